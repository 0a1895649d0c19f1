# src/resource_api/application/uow.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Unit of Work (Application Layer).

Purpose:
    Define the abstract Unit-of-Work boundary used by the generic request
    handlers. Repositories obtained from a UnitOfWork stage their writes;
    nothing becomes durable until :meth:`UnitOfWork.commit` runs, which is
    what the Persist envelope (``SaveCommand``) triggers.

    This module is intentionally infrastructure-agnostic:
        * No SQLAlchemy / DB / HTTP imports.
        * No concrete repository implementations.

    Concrete implementations (in-memory, SQLAlchemy-backed) live in the
    adapters/ layer and must satisfy this protocol.

Layer:
    application
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from types import TracebackType
from typing import Any, Protocol, runtime_checkable

from resource_api.domain.interfaces.repositories.resource_repository import (
    ResourceRepository,
)


@runtime_checkable
class UnitOfWork(Protocol, AbstractAsyncContextManager["UnitOfWork"]):
    """Abstract Unit-of-Work contract for the generic request handlers.

    Entering the context opens a scope (typically one HTTP request). Exiting
    it discards whatever was staged but not committed.
    """

    async def __aenter__(self) -> UnitOfWork:
        """Enter the transactional scope and return the active UoW."""
        raise NotImplementedError

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        """Exit the transactional scope."""
        raise NotImplementedError

    async def commit(self) -> None:
        """Commit all pending changes for this UnitOfWork."""
        raise NotImplementedError

    async def rollback(self) -> None:
        """Roll back any pending changes for this UnitOfWork."""
        raise NotImplementedError

    def get_repository(self, entity_type: type[Any]) -> ResourceRepository[Any]:
        """Return the repository storing records of ``entity_type``.

        Args:
            entity_type:
                Entity class used as the lookup key.

        Raises:
            KeyError: If the UnitOfWork does not know ``entity_type``.
        """
        raise NotImplementedError
