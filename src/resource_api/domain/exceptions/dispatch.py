# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Dispatch Domain Exceptions.

Synopsis:
    Error conditions raised while routing a request envelope to its handler.
    Failures raised *by* handlers (store errors, constraint violations) are
    not wrapped; they propagate with their own types.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from resource_api.domain.exceptions.base import DomainError


class HandlerNotRegisteredError(DomainError):
    """No handler is registered for the request type / entity type pair.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "HANDLER_NOT_REGISTERED"


class OperationCancelledError(DomainError):
    """The invocation was aborted through its cancellation token.

    No compensating action is taken; whatever the store already accepted
    stays accepted.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "OPERATION_CANCELLED"
