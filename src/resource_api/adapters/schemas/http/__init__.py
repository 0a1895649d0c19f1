# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""HTTP envelopes shared by the resource routers and presenters."""

from __future__ import annotations

from resource_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    SuccessEnvelope,
    WireModel,
)

__all__ = [
    "WireModel",
    "ErrorObject",
    "ErrorEnvelope",
    "SuccessEnvelope",
]
