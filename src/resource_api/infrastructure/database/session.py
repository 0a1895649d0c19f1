# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Async SQLAlchemy engine/session factory.

This module owns the application-global async SQLAlchemy engine and
``async_sessionmaker``, plus a task-scoped session registry used by the
SQLAlchemy unit of work.

Lifecycle:
    * Call ``init_engine_and_sessionmaker(settings)`` at app startup.
    * Use ``create_scoped_session()`` to obtain a task-scoped session proxy.
    * Call ``dispose_engine()`` during shutdown.

Notes:
    * No business logic here; repositories consume the session.
    * ``pool_pre_ping=True`` helps surface dead connections before use.
"""

from __future__ import annotations

from asyncio import current_task

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_scoped_session,
    async_sessionmaker,
    create_async_engine,
)

from resource_api.config.settings import Settings

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def init_engine_and_sessionmaker(settings: Settings) -> async_sessionmaker[AsyncSession]:
    """Initialize (once) and return the global async sessionmaker.

    Args:
        settings: Application settings providing ``database_url``.

    Raises:
        ValueError: If ``database_url`` is empty.
    """
    global _engine, _sessionmaker

    if not settings.database_url:
        raise ValueError("database_url must be configured")
    if _engine is not None and _sessionmaker is not None:
        return _sessionmaker

    _engine = create_async_engine(
        url=settings.database_url,
        pool_pre_ping=True,
        echo=settings.database_echo,
    )
    _sessionmaker = async_sessionmaker(bind=_engine, expire_on_commit=False, class_=AsyncSession)
    return _sessionmaker


def get_engine() -> AsyncEngine:
    """Return the initialized engine.

    Raises:
        RuntimeError: If the engine is not yet initialized.
    """
    if _engine is None:
        raise RuntimeError("DB engine not initialized (call init_engine_and_sessionmaker)")
    return _engine


async def dispose_engine() -> None:
    """Dispose the global engine at application shutdown."""
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


async def create_schema(engine: AsyncEngine, metadata: MetaData) -> None:
    """Create every table of ``metadata`` that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


def create_scoped_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> async_scoped_session[AsyncSession]:
    """Return a session registry keyed on the running asyncio task.

    Every dispatch of one request runs in the request's task, so they all
    share one session (and one transaction).
    """
    return async_scoped_session(session_factory, scopefunc=current_task)
