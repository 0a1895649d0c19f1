# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from resource_testkit import WIDGETS, ScriptedMediator, Widget, WidgetDTO, WidgetLookup

from resource_api.adapters.controllers.resource_controller import ResourceController
from resource_api.adapters.uow.in_memory_uow import InMemoryUnitOfWork
from resource_api.application.services.structural_mapper import StructuralMapper
from resource_api.config.settings import Environment, Settings, get_settings
from resource_api.main import create_app


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Keep cached settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """In-memory settings with disconnect polling effectively idle."""
    return Settings(
        environment=Environment.TEST,
        database_url=None,
        disconnect_poll_interval_s=10.0,
    )


@pytest.fixture
def widget() -> Widget:
    return Widget(name="x", quantity=3, tags=["a"])


@pytest.fixture
def scripted_mediator() -> ScriptedMediator:
    return ScriptedMediator()


@pytest.fixture
def controller(scripted_mediator: ScriptedMediator) -> ResourceController[Any, Any, Any]:
    """Widget controller wired to the scripted mediator."""
    return ResourceController(
        mediator=scripted_mediator,
        mapper=StructuralMapper(),
        entity_type=Widget,
        dto_type=WidgetDTO,
        id_query_type=WidgetLookup,
        patch_type=WIDGETS.patch_type,
    )


@pytest.fixture
def memory_uow() -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork([Widget])


@pytest.fixture
def app(settings: Settings, memory_uow: InMemoryUnitOfWork) -> FastAPI:
    """Application exposing the widgets resource over the in-memory store."""
    return create_app([WIDGETS], settings=settings, uow=memory_uow)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
