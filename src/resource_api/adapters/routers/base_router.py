# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Base Router (Adapters Layer)

Purpose:
    Provide a canonical APIRouter wrapper and shared utilities for HTTP endpoints:
      - Versioned routing with stable prefixes (e.g., "/v1/widgets").
      - Standard error response mapping using ErrorEnvelope.
      - Rendering of presenter results with headers (ETag, X-Request-ID, Location).

Layer:
    adapters/routers
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from resource_api.adapters.presenters.base_presenter import PresentResult
from resource_api.adapters.schemas.http.envelopes import ErrorEnvelope, WireModel
from resource_api.infrastructure.logging.logger import get_json_logger

_LOGGER = get_json_logger(__name__)

TagType = str | Enum


class BaseRouter(APIRouter):
    """Canonical router wrapper for HTTP endpoints.

    Args:
        version: API version segment (e.g., "v1").
        resource: Plural resource segment (e.g., "widgets").
        prefix: Optional explicit prefix (overrides version/resource).
        tags: Default tags applied to all routes mounted on this router.
        dependencies: Optional global dependencies for all routes.
        **kwargs: Additional APIRouter kwargs.
    """

    def __init__(
        self,
        *,
        version: str,
        resource: str,
        prefix: str | None = None,
        tags: Sequence[TagType] | None = None,
        dependencies: Sequence[Any] | None = None,
        **kwargs: Any,
    ) -> None:
        computed_prefix = prefix or f"/{version}/{resource}"
        super().__init__(
            prefix=computed_prefix,
            tags=list(tags) if tags is not None else None,
            dependencies=list(dependencies) if dependencies is not None else None,
            **kwargs,
        )
        _LOGGER.info(
            "router_initialized",
            extra={"extra": {"prefix": computed_prefix, "tags": [str(t) for t in tags or []]}},
        )

    # -------------------------------------------------------------------------
    # Response helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def trace_id(request: Request) -> str | None:
        """Return the correlation id assigned by ``RequestIdMiddleware``, if any."""
        return getattr(request.state, "request_id", None)

    @staticmethod
    def send(result: PresentResult[Any], *, default_status: int = 200) -> Response:
        """Render a presenter result as a response.

        A ``None`` body yields an empty response (e.g. ``204``); any other body
        is serialized with :meth:`WireModel.to_wire`.
        """
        status = result.status_code if result.status_code is not None else default_status
        headers = dict(result.headers)
        if result.body is None:
            return Response(status_code=status, headers=headers)

        body = result.body
        content = body.to_wire() if isinstance(body, WireModel) else body
        return JSONResponse(status_code=status, content=content, headers=headers)

    # -------------------------------------------------------------------------
    # OpenAPI Error Responses
    # -------------------------------------------------------------------------

    @staticmethod
    def std_error_responses() -> dict[int | str, dict[str, Any]]:
        """Return the canonical error response mapping for endpoints.

        Use in routes via:

            responses=BaseRouter.std_error_responses()
        """
        return {
            400: {"model": ErrorEnvelope, "description": "Bad request."},
            404: {"model": ErrorEnvelope, "description": "Not found."},
            409: {"model": ErrorEnvelope, "description": "Conflict."},
            422: {"model": ErrorEnvelope, "description": "Unprocessable content."},
            499: {"model": ErrorEnvelope, "description": "Client closed request."},
            500: {"model": ErrorEnvelope, "description": "Internal server error."},
        }
