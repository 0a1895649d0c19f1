# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Resource Router (Adapters Layer)

Purpose:
    Mount the six resource operations of a :class:`ResourceController` under
    ``/{version}/{resource}``:

        GET    /          -> 200 {"data": [dto, ...]}
        GET    /{id}      -> 200 {"data": dto} | 404
        POST   /          -> 201 {"data": dto} + Location
        PUT    /{id}      -> 200 {"data": dto} | 404
        PATCH  /{id}      -> 200 {"data": dto} | 404 | 422 (JSON-Patch body)
        DELETE /{id}      -> 204 | 404

    List filters, id-lookup options and delete reasons bind from the query
    string when the resource declares a model for them. Each request gets a
    :class:`CancellationToken` that fires when the client disconnects.

Layer:
    adapters/routers
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Any
from uuid import UUID

from fastapi import Body, Depends, Query, Request
from pydantic import BaseModel
from starlette.responses import Response

from resource_api.adapters.controllers.resource_controller import ResourceController
from resource_api.adapters.presenters.resource_presenter import ResourcePresenter
from resource_api.adapters.routers.base_router import BaseRouter
from resource_api.adapters.schemas.http.envelopes import SuccessEnvelope
from resource_api.application.cancellation import CancellationToken
from resource_api.application.resources import ResourceDefinition
from resource_api.application.schemas.dto.patch import PatchOperation
from resource_api.infrastructure.logging.logger import get_json_logger

_LOGGER = get_json_logger(__name__)

JSON_PATCH_MEDIA_TYPE = "application/json-patch+json"


def _query_dependency(model: type[BaseModel] | None) -> Callable[..., Any]:
    """Return a dependency binding ``model`` from the query string, or yielding ``None``."""
    if model is None:

        def _absent() -> None:
            return None

        return _absent

    def _bind(params: Annotated[model, Query()]) -> Any:  # type: ignore[valid-type]
        return params

    return _bind


def _has_lookup_options(model: type[BaseModel]) -> bool:
    return bool(set(model.model_fields) - {"id"})


class ResourceRouter(BaseRouter):
    """HTTP binding of one resource's controller.

    Args:
        definition: Resource whose types drive request binding and docs.
        controller: Controller serving the resource.
        version: API version segment.
        presenter: Optional presenter override.
        dependencies: Router-level dependencies (e.g. a unit-of-work scope).
        disconnect_poll_interval: Seconds between client-disconnect checks;
            ``None`` disables disconnect-driven cancellation.
    """

    def __init__(
        self,
        definition: ResourceDefinition,
        controller: ResourceController[Any, Any, Any],
        *,
        version: str = "v1",
        presenter: ResourcePresenter | None = None,
        dependencies: list[Any] | None = None,
        disconnect_poll_interval: float | None = 0.1,
    ) -> None:
        super().__init__(
            version=version,
            resource=definition.name,
            tags=[definition.name],
            dependencies=dependencies,
        )
        self.definition = definition
        self.controller = controller
        self.presenter = presenter or ResourcePresenter(definition.name)
        self.disconnect_poll_interval = disconnect_poll_interval
        self._mount()

    # -------------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------------

    async def _watch_disconnect(
        self, request: Request, token: CancellationToken, interval: float
    ) -> None:
        while not token.cancelled:
            await asyncio.sleep(interval)
            if await request.is_disconnected():
                _LOGGER.info(
                    "client_disconnected",
                    extra={"extra": {"path": request.url.path, "method": request.method}},
                )
                token.cancel("client disconnected")

    @asynccontextmanager
    async def _cancellation(self, request: Request) -> AsyncIterator[CancellationToken]:
        token = CancellationToken()
        interval = self.disconnect_poll_interval
        if interval is None:
            yield token
            return
        watcher = asyncio.ensure_future(self._watch_disconnect(request, token, interval))
        try:
            yield token
        finally:
            watcher.cancel()

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    def _mount(self) -> None:
        d = self.definition
        controller = self.controller
        presenter = self.presenter

        dto_type = d.dto_type
        create_type = d.create_type
        update_type = d.update_type
        list_filters = _query_dependency(d.list_filter_type)
        lookup = _query_dependency(
            d.id_query_type if _has_lookup_options(d.id_query_type) else None
        )
        delete_reason = _query_dependency(d.delete_type)
        get_route = f"get_{d.name}"

        async def list_resources(request: Request, filters: Any = Depends(list_filters)) -> Response:
            async with self._cancellation(request) as token:
                outcome = await controller.list(filters, cancellation=token)
            return self.send(presenter.present_list(outcome, trace_id=self.trace_id(request)))

        async def get_resource(
            request: Request, id: UUID, options: Any = Depends(lookup)
        ) -> Response:
            async with self._cancellation(request) as token:
                outcome = await controller.get_by_id(id, options, cancellation=token)
            return self.send(presenter.present_get(outcome, trace_id=self.trace_id(request)))

        async def create_resource(request: Request, payload: create_type) -> Response:  # type: ignore[valid-type]
            async with self._cancellation(request) as token:
                outcome = await controller.create(payload, cancellation=token)
            location = str(request.url_for(get_route, id=str(outcome.id)))
            result = presenter.present_created(
                outcome, location=location, trace_id=self.trace_id(request)
            )
            _LOGGER.info(
                "resource_created",
                extra={"extra": {"resource": d.name, "id": str(outcome.id)}},
            )
            return self.send(result)

        async def update_resource(
            request: Request, id: UUID, payload: update_type  # type: ignore[valid-type]
        ) -> Response:
            async with self._cancellation(request) as token:
                outcome = await controller.update(id, payload, cancellation=token)
            return self.send(presenter.present_updated(outcome, trace_id=self.trace_id(request)))

        async def patch_resource(
            request: Request,
            id: UUID,
            document: Annotated[list[PatchOperation], Body(media_type=JSON_PATCH_MEDIA_TYPE)],
        ) -> Response:
            async with self._cancellation(request) as token:
                outcome = await controller.patch(id, document, cancellation=token)
            return self.send(presenter.present_updated(outcome, trace_id=self.trace_id(request)))

        async def delete_resource(
            request: Request, id: UUID, reason: Any = Depends(delete_reason)
        ) -> Response:
            async with self._cancellation(request) as token:
                outcome = await controller.delete(id, reason, cancellation=token)
            result = presenter.present_deleted(outcome, trace_id=self.trace_id(request))
            return self.send(result)

        errors = self.std_error_responses()
        item_envelope = SuccessEnvelope[dto_type]  # type: ignore[valid-type]
        list_envelope = SuccessEnvelope[list[dto_type]]  # type: ignore[valid-type]

        self.add_api_route(
            "",
            list_resources,
            methods=["GET"],
            name=f"list_{d.name}",
            response_model=list_envelope,
            responses=errors,
        )
        self.add_api_route(
            "/{id}",
            get_resource,
            methods=["GET"],
            name=get_route,
            response_model=item_envelope,
            responses=errors,
        )
        self.add_api_route(
            "",
            create_resource,
            methods=["POST"],
            name=f"create_{d.name}",
            status_code=201,
            response_model=item_envelope,
            responses=errors,
        )
        self.add_api_route(
            "/{id}",
            update_resource,
            methods=["PUT"],
            name=f"update_{d.name}",
            response_model=item_envelope,
            responses=errors,
        )
        self.add_api_route(
            "/{id}",
            patch_resource,
            methods=["PATCH"],
            name=f"patch_{d.name}",
            response_model=item_envelope,
            responses=errors,
        )
        self.add_api_route(
            "/{id}",
            delete_resource,
            methods=["DELETE"],
            name=f"delete_{d.name}",
            status_code=204,
            response_class=Response,
            responses=errors,
        )
