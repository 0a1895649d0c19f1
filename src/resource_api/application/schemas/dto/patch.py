# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Patch document DTOs.

Purpose:
    JSON-Patch style operations (RFC 6902 shape) describing a partial update.
    ``op`` is kept as a free string so unsupported operations surface as a
    patch application failure rather than a request-shape error.

Layer: application/schemas/dto
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import Field

from resource_api.application.schemas.dto.base import BaseDTO


class PatchOperation(BaseDTO):
    """A single field-level operation.

    Attributes:
        op: One of ``add``/``set``, ``remove``, ``replace``, ``copy``, ``move``, ``test``.
        path: JSON pointer to the target location (leading ``/`` optional).
        value: New value for ``add``/``replace``, expected value for ``test``.
        from_: Source pointer for ``copy``/``move`` (wire name ``from``).
    """

    op: str = Field(..., min_length=1)
    path: str
    value: Any = None
    from_: str | None = Field(default=None, alias="from")

    @property
    def has_value(self) -> bool:
        """Return ``True`` when the caller supplied ``value`` (even ``null``)."""
        return "value" in self.model_fields_set


type PatchDocument = Sequence[PatchOperation]
