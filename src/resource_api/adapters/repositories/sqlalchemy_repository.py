# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
SqlAlchemyRepository: generic repository over one ORM model.

Purpose:
    Store domain entities in the table of ``model``. Rows and entities
    convert into each other by attribute name: every mapped column of the
    model must be accepted by the entity's constructor.

Layer: adapters / repositories

Notes:
    * No business logic, no domain decisions.
    * Repositories never commit; the unit of work owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession, async_scoped_session

from resource_api.domain.exceptions.persistence import ResourceConflictError
from resource_api.infrastructure.database.models.base import Base


class SqlAlchemyRepository[TEntity]:
    """Repository mapping ``entity_type`` records onto rows of ``model``."""

    def __init__(
        self,
        session: AsyncSession | async_scoped_session[AsyncSession],
        *,
        entity_type: type[TEntity],
        model: type[Base],
    ) -> None:
        """Initialize the repository.

        Args:
            session: Session (or task-scoped session proxy) used for every call.
            entity_type: Domain entity class built from rows.
            model: ORM model class storing the records.
        """
        self._session = session
        self._entity_type = entity_type
        self._model = model
        self._columns: tuple[str, ...] = tuple(attr.key for attr in inspect(model).column_attrs)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _to_entity(self, row: Base) -> TEntity:
        return self._entity_type(**{name: getattr(row, name) for name in self._columns})

    def _to_values(self, entity: TEntity) -> dict[str, Any]:
        return {name: getattr(entity, name) for name in self._columns if hasattr(entity, name)}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list(self, filters: Any = None) -> Sequence[TEntity]:
        """Return every row ordered by primary key. ``filters`` is ignored."""
        stmt = select(self._model).order_by(*inspect(self._model).primary_key)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def get(self, entity_id: UUID) -> TEntity | None:
        row = await self._session.get(self._model, entity_id)
        return None if row is None else self._to_entity(row)

    # ------------------------------------------------------------------
    # Staged writes
    # ------------------------------------------------------------------

    async def add(self, entity: TEntity) -> None:
        values = self._to_values(entity)
        if await self._session.get(self._model, values["id"]) is not None:
            raise ResourceConflictError(
                f"Record {values['id']} already exists", details={"id": str(values["id"])}
            )
        self._session.add(self._model(**values))

    async def update(self, entity: TEntity) -> None:
        await self._session.merge(self._model(**self._to_values(entity)))

    async def remove(self, entity: TEntity) -> None:
        row = await self._session.get(self._model, entity.id)  # type: ignore[attr-defined]
        if row is not None:
            await self._session.delete(row)
