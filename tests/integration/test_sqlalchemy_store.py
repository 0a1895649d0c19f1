# tests/integration/test_sqlalchemy_store.py
"""SQLAlchemy unit of work against an in-memory SQLite database (aiosqlite)."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from resource_testkit import WIDGETS, Widget, WidgetCreate, WidgetLookup, WidgetPatch
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from widget_rows import WidgetRow

from resource_api.adapters.uow.sqlalchemy_uow import SqlAlchemyUnitOfWork
from resource_api.application.handlers.resource_handlers import register_resource_handlers
from resource_api.application.requests import (
    CreateCommand,
    IdQuery,
    ListQuery,
    PatchCommand,
    SaveCommand,
)
from resource_api.application.services.mediator import InProcessMediator
from resource_api.domain.exceptions.persistence import ResourceConflictError
from resource_api.infrastructure.database.models.base import Base
from resource_api.infrastructure.database.session import create_schema


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
    )
    await create_schema(engine, Base.metadata)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def sql_uow(engine: AsyncEngine) -> SqlAlchemyUnitOfWork:
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    return SqlAlchemyUnitOfWork(session_factory=factory, models={Widget: WidgetRow})


@pytest.mark.asyncio
async def test_commit_persists_rows(sql_uow: SqlAlchemyUnitOfWork) -> None:
    widget = Widget(name="lamp", quantity=2, tags=["home"])
    async with sql_uow:
        await sql_uow.get_repository(Widget).add(widget)
        await sql_uow.commit()

    async with sql_uow:
        loaded = await sql_uow.get_repository(Widget).get(widget.id)

    assert loaded == widget


@pytest.mark.asyncio
async def test_leaving_the_scope_discards_uncommitted_rows(sql_uow: SqlAlchemyUnitOfWork) -> None:
    async with sql_uow:
        await sql_uow.get_repository(Widget).add(Widget(name="lamp"))

    async with sql_uow:
        assert await sql_uow.get_repository(Widget).list() == []


@pytest.mark.asyncio
async def test_duplicate_identifier_conflicts(sql_uow: SqlAlchemyUnitOfWork) -> None:
    widget = Widget(name="lamp")
    async with sql_uow:
        repo = sql_uow.get_repository(Widget)
        await repo.add(widget)
        await sql_uow.commit()
        with pytest.raises(ResourceConflictError):
            await repo.add(Widget(id=widget.id, name="other"))


@pytest.mark.asyncio
async def test_handlers_round_trip_through_the_database(sql_uow: SqlAlchemyUnitOfWork) -> None:
    mediator = InProcessMediator()
    register_resource_handlers(mediator, WIDGETS, sql_uow)

    async with sql_uow:
        created = await mediator.send(
            CreateCommand(entity_type=Widget, request=WidgetCreate(name="lamp", tags=["a"]))
        )
        await mediator.send(SaveCommand(entity_type=Widget))

    async with sql_uow:
        loaded = await mediator.send(
            IdQuery(entity_type=Widget, request=WidgetLookup(id=created.id))
        )
        await mediator.send(
            PatchCommand(
                entity_type=Widget,
                entity=loaded,
                request=WidgetPatch.model_validate({"quantity": 7}),
            )
        )
        await mediator.send(SaveCommand(entity_type=Widget))

    async with sql_uow:
        rows = await mediator.send(ListQuery(entity_type=Widget))

    assert rows == [Widget(id=created.id, name="lamp", quantity=7, tags=["a"])]


@pytest.mark.asyncio
async def test_remove_deletes_row(sql_uow: SqlAlchemyUnitOfWork) -> None:
    widget = Widget(name="lamp")
    async with sql_uow:
        repo = sql_uow.get_repository(Widget)
        await repo.add(widget)
        await sql_uow.commit()
        await repo.remove(widget)
        await sql_uow.commit()

    async with sql_uow:
        assert await sql_uow.get_repository(Widget).get(widget.id) is None


def test_unknown_entity_type_raises_key_error(sql_uow: SqlAlchemyUnitOfWork) -> None:
    class _Unregistered:
        pass

    with pytest.raises(KeyError):
        sql_uow.get_repository(_Unregistered)
