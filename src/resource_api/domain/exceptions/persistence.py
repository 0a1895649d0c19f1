# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Persistence Domain Exceptions.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from resource_api.domain.exceptions.base import DomainError


class ResourceConflictError(DomainError):
    """A record with the same identifier already exists in the store."""

    code = "RESOURCE_CONFLICT"
