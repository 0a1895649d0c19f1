# src/resource_api/domain/interfaces/repositories/resource_repository.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Resource Repository Interface.

Purpose:
    Define the domain-level contract for storing and retrieving the records
    of a single resource type. Keep the domain layer decoupled from the
    persistence technology.

Layer:
    domain

Notes:
    Repositories stage writes and never commit; the owning UnitOfWork decides
    when staged changes become durable.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol
from uuid import UUID


class ResourceRepository[TEntity](Protocol):
    """Domain-level contract for a single resource's storage."""

    async def list(self, filters: Any = None) -> Sequence[TEntity]:
        """Return the records visible to the current unit of work.

        Args:
            filters: Opaque list-filter request. Implementations may ignore it.
        """
        ...

    async def get(self, entity_id: UUID) -> TEntity | None:
        """Return the record with ``entity_id``, or ``None`` when absent."""
        ...

    async def add(self, entity: TEntity) -> None:
        """Stage a new record."""
        ...

    async def update(self, entity: TEntity) -> None:
        """Stage the new state of an existing record."""
        ...

    async def remove(self, entity: TEntity) -> None:
        """Stage removal of an existing record."""
        ...
