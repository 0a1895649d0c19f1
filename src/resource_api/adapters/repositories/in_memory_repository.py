# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""In-memory repository.

Reads see the committed records overlaid with the caller's staged changes;
writes only touch the staged changes.

Layer: adapters / repositories
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from resource_api.domain.exceptions.persistence import ResourceConflictError


@dataclass(slots=True)
class StagedChanges:
    """Writes staged for one entity type within one unit-of-work scope."""

    upserts: dict[UUID, Any] = field(default_factory=dict)
    removed: set[UUID] = field(default_factory=set)


class InMemoryRepository[TEntity]:
    """Repository over a shared dict of committed records."""

    def __init__(
        self,
        *,
        committed: Mapping[UUID, TEntity],
        staged: Callable[[], StagedChanges],
    ) -> None:
        self._committed = committed
        self._staged = staged

    async def list(self, filters: Any = None) -> Sequence[TEntity]:
        """Return every visible record in insertion order. ``filters`` is ignored."""
        changes = self._staged()
        items = [
            changes.upserts.get(entity_id, entity)
            for entity_id, entity in self._committed.items()
            if entity_id not in changes.removed
        ]
        items.extend(
            entity
            for entity_id, entity in changes.upserts.items()
            if entity_id not in self._committed
        )
        return items

    async def get(self, entity_id: UUID) -> TEntity | None:
        changes = self._staged()
        if entity_id in changes.removed:
            return None
        if entity_id in changes.upserts:
            return changes.upserts[entity_id]  # type: ignore[no-any-return]
        return self._committed.get(entity_id)

    async def add(self, entity: TEntity) -> None:
        entity_id: UUID = entity.id  # type: ignore[attr-defined]
        if await self.get(entity_id) is not None:
            raise ResourceConflictError(
                f"Record {entity_id} already exists", details={"id": str(entity_id)}
            )
        changes = self._staged()
        changes.removed.discard(entity_id)
        changes.upserts[entity_id] = entity

    async def update(self, entity: TEntity) -> None:
        entity_id: UUID = entity.id  # type: ignore[attr-defined]
        changes = self._staged()
        changes.removed.discard(entity_id)
        changes.upserts[entity_id] = entity

    async def remove(self, entity: TEntity) -> None:
        entity_id: UUID = entity.id  # type: ignore[attr-defined]
        changes = self._staged()
        changes.upserts.pop(entity_id, None)
        changes.removed.add(entity_id)
