# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Request ID Middleware.

Summary:
    Assigns a correlation ID to each request and echoes it on the response.
    A caller-supplied ``X-Request-ID`` is reused when it is safe; otherwise a
    new UUID4 is generated.

Contract:
    * Reads:  X-Request-ID (optional)
    * Writes: X-Request-ID (always written)
    * Stores: request.state.request_id (str)
    * Binds the id to the logging context for the duration of the request.

Notes:
    Error envelopes carry this value as ``trace_id``.
"""

from __future__ import annotations

import re
import uuid
from typing import Final

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from resource_api.infrastructure.logging.logger import set_request_context

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
_SAFE_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9\-_.:@]{1,128}$")


def _coerce_request_id(raw: str | None) -> str:
    """Return ``raw`` when it is a safe token, else a fresh UUID4 string."""
    if raw and _SAFE_RE.match(raw):
        return raw
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that injects a request id onto the request and response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Attach ``request.state.request_id`` and emit the header on the response."""
        req_id = _coerce_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = req_id
        set_request_context(request_id=req_id)
        try:
            response: Response = await call_next(request)
        finally:
            set_request_context(request_id=None)
        response.headers.setdefault(REQUEST_ID_HEADER, req_id)
        return response
