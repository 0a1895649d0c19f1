# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Resource response envelopes.

Every JSON body returned by a resource route has one of two shapes:

    {"data": dto}  or  {"data": [dto, ...]}
    {"error": {"code", "http_status", "message", "details", "trace_id"}}

Layer:
    adapters/schemas/http
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "WireModel",
    "ErrorObject",
    "ErrorEnvelope",
    "SuccessEnvelope",
]


class WireModel(BaseModel):
    """Base of every envelope; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-native dict written to the response body."""
        return self.model_dump(mode="json", by_alias=True)


class ErrorObject(WireModel):
    """Body of ``{"error": ...}``.

    ``code`` is UPPER_SNAKE_CASE and stable across releases; clients branch on
    it rather than on ``message``.
    """

    model_config = ConfigDict(
        title="ErrorObject",
        json_schema_extra={
            "examples": [
                {
                    "code": "RESOURCE_NOT_FOUND",
                    "http_status": 404,
                    "message": "widgets 7d1c... not found.",
                    "details": {"id": "7d1c..."},
                    "trace_id": "req-123",
                }
            ]
        },
    )

    code: str = Field(..., description="Machine-readable error code.")
    http_status: int = Field(..., description="HTTP status of the response.")
    message: str = Field(..., description="Human-readable description.")
    details: dict[str, Any] | None = Field(default=None, description="Structured context.")
    trace_id: str | None = Field(default=None, description="Value of X-Request-ID.")


class ErrorEnvelope(WireModel):
    """``{"error": ErrorObject}``."""

    model_config = ConfigDict(title="ErrorEnvelope")

    error: ErrorObject


class SuccessEnvelope[T](WireModel):
    """``{"data": T}`` where ``T`` is a DTO or a list of DTOs."""

    model_config = ConfigDict(title="SuccessEnvelope")

    data: T
