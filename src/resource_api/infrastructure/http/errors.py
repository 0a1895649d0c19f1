# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""HTTP exception handlers rendering the canonical error envelope."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from resource_api.domain.exceptions.base import DomainError
from resource_api.domain.exceptions.dispatch import OperationCancelledError
from resource_api.domain.exceptions.patch import PatchApplicationError
from resource_api.domain.exceptions.persistence import ResourceConflictError
from resource_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

# Non-standard "client closed request" status.
STATUS_CLIENT_CLOSED_REQUEST = 499

_DOMAIN_STATUS: tuple[tuple[type[DomainError], int], ...] = (
    (PatchApplicationError, 422),
    (OperationCancelledError, STATUS_CLIENT_CLOSED_REQUEST),
    (ResourceConflictError, 409),
)


def _trace_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
    }
    if details is not None:
        err["details"] = details
    if trace_id is not None:
        err["trace_id"] = trace_id
    return {"error": err}


def _respond(request: Request, status: int, payload: dict[str, Any]) -> Response:
    headers: dict[str, str] = {}
    trace_id = _trace_id(request)
    if trace_id:
        headers["X-Request-ID"] = trace_id
    return JSONResponse(status_code=status, content=jsonable_encoder(payload), headers=headers)


def status_for_domain_error(exc: DomainError) -> int:
    """Return the HTTP status used to render ``exc``."""
    for exc_type, status in _DOMAIN_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 400


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": exc.errors()},
        trace_id=_trace_id(request),
    )
    return _respond(request, 422, payload)


async def handle_domain_error(request: Request, exc: DomainError) -> Response:
    status = status_for_domain_error(exc)
    logger.info(
        "domain_error",
        extra={"extra": {"code": exc.code, "status": status, "path": request.url.path}},
    )
    payload = error_envelope(
        code=exc.code,
        http_status=status,
        message=str(exc) or exc.code,
        details=exc.details or None,
        trace_id=_trace_id(request),
    )
    return _respond(request, status, payload)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=_trace_id(request),
    )
    return _respond(request, exc.status_code, payload)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    logger.exception("unhandled_exception", extra={"extra": {"path": request.url.path}})
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        details=None,
        trace_id=_trace_id(request),
    )
    return _respond(request, 500, payload)


def install_error_handlers(app: FastAPI) -> None:
    """Register every handler in this module on ``app``."""
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unhandled_exception)
