# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Base DTO (Application Layer).

Purpose:
    Canonical Pydantic base for all application-layer DTOs and request
    payloads, plus the identifier-lookup request every id-based operation
    dispatches. Transport-agnostic.

Layer: application/schemas/dto
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    """Base class for application-layer DTOs.

    Notes:
        - Must not import HTTP-specific bases.
        - Enforces strict fields (`extra='forbid'`).
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class IdLookupRequest(BaseDTO):
    """Identifier lookup request.

    Resources needing extra lookup options (e.g. ``include_archived``)
    subclass this model; every extra field must have a default so the
    controller can build an instance from the identifier alone.

    Attributes:
        id: Identifier of the record to load. Set by the controller.
    """

    id: UUID | None = None
