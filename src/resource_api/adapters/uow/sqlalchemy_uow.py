# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""SQLAlchemy-backed Unit of Work implementation.

Purpose:
    Provide a concrete implementation of the application-layer UnitOfWork
    protocol using a task-scoped SQLAlchemy ``AsyncSession``. One instance is
    shared by every request: each asyncio task (one HTTP request) gets its
    own session and transaction from the scoped registry.

Layer:
    adapters/uow
"""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resource_api.adapters.repositories.sqlalchemy_repository import SqlAlchemyRepository
from resource_api.application.uow import UnitOfWork
from resource_api.infrastructure.database.models.base import Base
from resource_api.infrastructure.database.session import create_scoped_session
from resource_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy-based UnitOfWork implementation.

    Intended to be used via:

        async with uow:
            repo = uow.get_repository(Widget)
            ...
            await uow.commit()
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        models: Mapping[type[Any], type[Base]] | None = None,
    ) -> None:
        """Initialize the UnitOfWork.

        Args:
            session_factory:
                Factory for creating new AsyncSession instances.
            models:
                Mapping from entity class to the ORM model storing it. More
                can be added later with :meth:`register`.
        """
        self._session = create_scoped_session(session_factory)
        self._repos: dict[type[Any], SqlAlchemyRepository[Any]] = {}
        for entity_type, model in (models or {}).items():
            self.register(entity_type, model)

    def register(self, entity_type: type[Any], model: type[Base]) -> None:
        """Store ``entity_type`` records in the table of ``model``."""
        self._repos[entity_type] = SqlAlchemyRepository(
            self._session, entity_type=entity_type, model=model
        )

    # ------------------------------------------------------------------
    # Async context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        """Enter the scope; the session is opened lazily on first use."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        """Exit the scope.

        Behavior:
            * If an exception occurred, rolls back the transaction.
            * Closes the current task's session, discarding anything uncommitted.

        Returns:
            Always returns None; exceptions are propagated.
        """
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            await self._session.remove()
        return None

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    async def commit(self) -> None:
        """Commit the current task's transaction."""
        try:
            await self._session.commit()
        except Exception:
            logger.exception("uow_commit_failed")
            await self._session.rollback()
            raise

    async def rollback(self) -> None:
        """Roll back the current task's transaction."""
        await self._session.rollback()

    # ------------------------------------------------------------------
    # Repository resolution
    # ------------------------------------------------------------------

    def get_repository(self, entity_type: type[Any]) -> SqlAlchemyRepository[Any]:
        """Return the repository for ``entity_type``.

        Raises:
            KeyError: If no model is registered for ``entity_type``.
        """
        try:
            return self._repos[entity_type]
        except KeyError as exc:
            raise KeyError(
                f"No ORM model registered for entity type {entity_type!r}.",
            ) from exc
