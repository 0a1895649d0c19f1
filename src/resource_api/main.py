# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap that wires the store, the mediator, one controller and
    router per resource, middleware and error handlers.

Design:
    * Bootstrap only (no business logic).
    * Store selection: an explicit ``uow`` wins; otherwise ``DATABASE_URL``
      selects the SQLAlchemy store and its absence the in-memory store.
    * Every resource route runs inside one unit-of-work scope per request.
    * A caller-supplied mediator is used as-is; otherwise an in-process
      mediator is built and the generic handlers are registered on it.

Usage:
    app = create_app([widgets])
    uvicorn "myservice.app:build" --factory
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.routing import APIRoute
from starlette.responses import JSONResponse

from resource_api.adapters.controllers.resource_controller import ResourceController
from resource_api.adapters.routers.resource_router import ResourceRouter
from resource_api.adapters.uow import InMemoryUnitOfWork, SqlAlchemyUnitOfWork
from resource_api.application.handlers.resource_handlers import register_resource_handlers
from resource_api.application.interfaces.mapper import Mapper
from resource_api.application.interfaces.mediator import Mediator
from resource_api.application.resources import ResourceDefinition
from resource_api.application.services.mediator import InProcessMediator
from resource_api.application.services.structural_mapper import StructuralMapper
from resource_api.application.uow import UnitOfWork
from resource_api.config.settings import Settings, get_settings
from resource_api.infrastructure.database.models.base import Base
from resource_api.infrastructure.database.session import (
    create_schema,
    dispose_engine,
    get_engine,
    init_engine_and_sessionmaker,
)
from resource_api.infrastructure.http.errors import install_error_handlers
from resource_api.infrastructure.logging.logger import configure_root_logging, get_json_logger
from resource_api.infrastructure.middleware.request_id import RequestIdMiddleware

logger = get_json_logger(__name__)


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId, e.g. ``get__v1_widgets_id``."""
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


def _build_uow(
    resources: Sequence[ResourceDefinition],
    settings: Settings,
    models: Mapping[type[Any], type[Base]],
) -> UnitOfWork:
    if not settings.database_url:
        return InMemoryUnitOfWork(d.entity_type for d in resources)

    missing = [d.name for d in resources if d.entity_type not in models]
    if missing:
        raise ValueError(f"No ORM model registered for resources: {', '.join(missing)}")
    return SqlAlchemyUnitOfWork(
        session_factory=init_engine_and_sessionmaker(settings),
        models={d.entity_type: models[d.entity_type] for d in resources},
    )


def create_app(
    resources: Sequence[ResourceDefinition] = (),
    *,
    settings: Settings | None = None,
    mediator: Mediator | None = None,
    mapper: Mapper | None = None,
    uow: UnitOfWork | None = None,
    models: Mapping[type[Any], type[Base]] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        resources: Resources to expose, one router each.
        settings: Settings override; defaults to :func:`get_settings`.
        mediator: Dispatch executor override. When given, no handlers are
            registered on it.
        mapper: Entity-to-DTO mapper override.
        uow: Store override.
        models: ORM model per entity class, used with ``DATABASE_URL``.

    Returns:
        Fully configured application instance.
    """
    settings = settings or get_settings()
    configure_root_logging(settings.log_level)

    uses_database = uow is None and bool(settings.database_url)
    store = uow if uow is not None else _build_uow(resources, settings, models or {})

    if mediator is None:
        in_process = InProcessMediator()
        for definition in resources:
            register_resource_handlers(in_process, definition, store)
        mediator = in_process
    mapper = mapper or StructuralMapper()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if uses_database and settings.database_create_schema:
            await create_schema(get_engine(), Base.metadata)
        logger.info(
            "service_startup",
            extra={
                "extra": {
                    "environment": settings.environment.value,
                    "resources": [d.name for d in resources],
                    "store": type(store).__name__,
                }
            },
        )
        try:
            yield
        finally:
            if uses_database:
                await dispose_engine()
            logger.info("service_shutdown")

    app = FastAPI(
        title="Resource API",
        lifespan=lifespan,
        docs_url=settings.docs_url,
        redoc_url=None,
        openapi_url=settings.openapi_url,
        generate_unique_id_function=_stable_operation_id,
    )
    app.state.settings = settings
    app.state.uow = store
    app.state.mediator = mediator

    install_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    async def uow_scope() -> AsyncIterator[None]:
        async with store:
            yield

    for definition in resources:
        controller: ResourceController[Any, Any, Any] = ResourceController.for_resource(
            definition, mediator=mediator, mapper=mapper
        )
        app.include_router(
            ResourceRouter(
                definition,
                controller,
                version=settings.api_version,
                dependencies=[Depends(uow_scope)],
                disconnect_poll_interval=settings.disconnect_poll_interval_s,
            )
        )

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app
