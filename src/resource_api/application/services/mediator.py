# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""In-process mediator.

Purpose:
    Registry-based dispatch executor. Handlers are registered per envelope
    type, either for one entity type or for every entity type, and each
    ``send`` runs the selected handler under the caller's cancellation token.

Routing:
    1. ``(type(request), request.entity_type)``
    2. ``(type(request), None)``  (handlers registered for any entity)
    3. :class:`HandlerNotRegisteredError`

Layer:
    application/services
"""

from __future__ import annotations

import logging
from typing import Any

from resource_api.application.cancellation import CancellationToken, ensure_not_cancelled
from resource_api.application.interfaces.mediator import RequestHandler
from resource_api.application.requests import ResourceRequest
from resource_api.domain.exceptions.dispatch import HandlerNotRegisteredError

logger = logging.getLogger(__name__)

type _RouteKey = tuple[type[ResourceRequest], type[Any] | None]


class InProcessMediator:
    """Mediator dispatching envelopes to in-process handlers."""

    def __init__(self) -> None:
        """Initialize an empty handler registry."""
        self._handlers: dict[_RouteKey, RequestHandler[Any]] = {}

    def register(
        self,
        request_type: type[ResourceRequest],
        handler: RequestHandler[Any],
        *,
        entity_type: type[Any] | None = None,
    ) -> None:
        """Register ``handler`` for ``request_type``.

        Args:
            request_type: Envelope class the handler satisfies.
            handler: Object exposing ``async handle(request, *, cancellation)``.
            entity_type: Restrict the handler to one entity type. ``None``
                registers it as the fallback for every entity type.

        Raises:
            ValueError: If a handler is already registered for the same key.
        """
        key: _RouteKey = (request_type, entity_type)
        if key in self._handlers:
            raise ValueError(
                f"Handler already registered for {request_type.__name__} "
                f"and entity type {getattr(entity_type, '__name__', None)!r}.",
            )
        self._handlers[key] = handler

    def is_registered(
        self, request_type: type[ResourceRequest], entity_type: type[Any] | None = None
    ) -> bool:
        """Return ``True`` if a handler would be selected for the pair."""
        return (request_type, entity_type) in self._handlers or (
            request_type,
            None,
        ) in self._handlers

    async def send(
        self,
        request: ResourceRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        """Route ``request`` to its handler and return the handler's result.

        Raises:
            HandlerNotRegisteredError: If no handler matches the envelope.
            OperationCancelledError: If ``cancellation`` fires before or
                during the handler call.
        """
        handler = self._resolve(request)
        ensure_not_cancelled(cancellation)

        logger.debug(
            "mediator_dispatch",
            extra={
                "extra": {
                    "operation": request.operation,
                    "entity_type": request.entity_type.__name__,
                }
            },
        )

        call = handler.handle(request, cancellation=cancellation)
        if cancellation is None:
            return await call
        return await cancellation.run(call)

    def _resolve(self, request: ResourceRequest) -> RequestHandler[Any]:
        """Select the handler for ``request``."""
        request_type = type(request)
        handler = self._handlers.get((request_type, request.entity_type))
        if handler is None:
            handler = self._handlers.get((request_type, None))
        if handler is None:
            raise HandlerNotRegisteredError(
                f"No handler registered for {request.operation}.",
                details={
                    "operation": request.operation,
                    "entity_type": request.entity_type.__name__,
                },
            )
        return handler
