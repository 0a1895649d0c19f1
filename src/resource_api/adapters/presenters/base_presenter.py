# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Presenter primitives.

A presenter turns a controller outcome into a :class:`PresentResult`: the
envelope to serialize, the headers to send and the status code. Routers
render results with :meth:`BaseRouter.send`; presenters never touch the
response object.

Headers:
    * ``X-Request-ID`` whenever a trace id is known.
    * ``ETag`` (quoted SHA-256 of the canonical JSON body) on success bodies.

Layer:
    adapters/presenters
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from resource_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    SuccessEnvelope,
)

REQUEST_ID_HEADER = "X-Request-ID"


def _compute_quoted_etag(payload: Mapping[str, Any]) -> str:
    """Return a strong, quoted ETag for ``payload``; key order does not matter."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return '"' + hashlib.sha256(canonical.encode("utf-8")).hexdigest() + '"'


@dataclass(slots=True)
class PresentResult[T]:
    """What a router needs to build the response.

    Attributes:
        body: Envelope to serialize, or ``None`` for an empty body.
        headers: Headers to send.
        status_code: Status override; the route default applies when ``None``.
    """

    body: T | None
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int | None = None


class BasePresenter:
    """Envelope and header helpers shared by resource presenters."""

    @staticmethod
    def _trace_headers(trace_id: str | None) -> dict[str, str]:
        return {REQUEST_ID_HEADER: trace_id} if trace_id else {}

    def present_success(
        self,
        *,
        data: Any,
        trace_id: str | None = None,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        """Wrap ``data`` in ``{"data": ...}`` and tag it with an ETag.

        ``headers`` are added after the standard ones and win on conflict.
        """
        body = SuccessEnvelope[Any](data=data)
        out = self._trace_headers(trace_id)
        out["ETag"] = _compute_quoted_etag(body.to_wire())
        out.update(headers or {})
        return PresentResult(body=body, headers=out, status_code=status_code)

    def present_error(
        self,
        *,
        code: str,
        http_status: int,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> PresentResult[ErrorEnvelope]:
        """Build ``{"error": ...}``; error bodies carry no ETag."""
        body = ErrorEnvelope(
            error=ErrorObject(
                code=code,
                http_status=http_status,
                message=message,
                details=details or {},
                trace_id=trace_id,
            )
        )
        return PresentResult(
            body=body, headers=self._trace_headers(trace_id), status_code=http_status
        )

    def present_empty(
        self,
        *,
        status_code: int,
        trace_id: str | None = None,
    ) -> PresentResult[None]:
        """Build a body-less result such as ``204 No Content``."""
        return PresentResult(
            body=None, headers=self._trace_headers(trace_id), status_code=status_code
        )
