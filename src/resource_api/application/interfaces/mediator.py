# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Mediator Port.

Purpose:
    Dispatch-executor contract used by the resource controller. A mediator
    accepts a typed envelope and returns its typed result or raises. The
    caller never inspects failure causes.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from resource_api.application.cancellation import CancellationToken
from resource_api.application.requests import ResourceRequest


@runtime_checkable
class RequestHandler[TRequest: ResourceRequest](Protocol):
    """Satisfies exactly one envelope type."""

    async def handle(
        self,
        request: TRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        """Execute ``request`` and return its result."""
        ...


@runtime_checkable
class Mediator(Protocol):
    """Opaque request/response executor."""

    async def send(
        self,
        request: ResourceRequest,
        *,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        """Route ``request`` to its handler and return the handler's result.

        Args:
            request: Envelope to execute.
            cancellation: Token propagated verbatim to the handler.
        """
        ...
