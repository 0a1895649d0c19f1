# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""In-memory Unit of Work implementation.

Purpose:
    Provide a process-local store satisfying the application-layer
    UnitOfWork protocol. Committed records are shared by every caller;
    staged writes belong to the current context (one HTTP request, one
    task) and become visible to other readers only after :meth:`commit`.

Layer:
    adapters/uow
"""

from __future__ import annotations

from collections.abc import Iterable
from contextvars import ContextVar
from types import TracebackType
from typing import Any
from uuid import UUID

from resource_api.adapters.repositories.in_memory_repository import (
    InMemoryRepository,
    StagedChanges,
)
from resource_api.application.uow import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """Dictionary-backed UnitOfWork.

    Intended to be used via:

        async with uow:
            repo = uow.get_repository(Widget)
            await repo.add(widget)
            await uow.commit()
    """

    def __init__(self, entity_types: Iterable[type[Any]] = ()) -> None:
        """Initialize the store.

        Args:
            entity_types: Entity classes stored by this unit of work. More
                can be added later with :meth:`register`.
        """
        self._committed: dict[type[Any], dict[UUID, Any]] = {}
        self._repos: dict[type[Any], InMemoryRepository[Any]] = {}
        self._staged: ContextVar[dict[type[Any], StagedChanges] | None] = ContextVar(
            f"in_memory_uow_{id(self)}", default=None
        )
        for entity_type in entity_types:
            self.register(entity_type)

    def register(self, entity_type: type[Any]) -> None:
        """Make ``entity_type`` storable (idempotent)."""
        if entity_type in self._committed:
            return
        self._committed[entity_type] = {}
        self._repos[entity_type] = InMemoryRepository(
            committed=self._committed[entity_type],
            staged=lambda et=entity_type: self._changes(et),
        )

    # ------------------------------------------------------------------
    # Async context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> InMemoryUnitOfWork:
        """Open a fresh staging area for the current context."""
        self._staged.set({})
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        """Discard anything staged but not committed; exceptions propagate."""
        self._staged.set(None)
        return None

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    async def commit(self) -> None:
        """Apply every staged change to the shared store."""
        staged = self._staged.get()
        if not staged:
            return
        for entity_type, changes in staged.items():
            target = self._committed[entity_type]
            for entity_id in changes.removed:
                target.pop(entity_id, None)
            target.update(changes.upserts)
        staged.clear()

    async def rollback(self) -> None:
        """Drop every staged change."""
        staged = self._staged.get()
        if staged:
            staged.clear()

    # ------------------------------------------------------------------
    # Repository resolution
    # ------------------------------------------------------------------

    def get_repository(self, entity_type: type[Any]) -> InMemoryRepository[Any]:
        """Return the repository for ``entity_type``.

        Raises:
            KeyError: If ``entity_type`` was never registered.
        """
        try:
            return self._repos[entity_type]
        except KeyError as exc:
            raise KeyError(f"No repository registered for entity type {entity_type!r}.") from exc

    def _changes(self, entity_type: type[Any]) -> StagedChanges:
        staged = self._staged.get()
        if staged is None:
            staged = {}
            self._staged.set(staged)
        return staged.setdefault(entity_type, StagedChanges())
