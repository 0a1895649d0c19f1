# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Resource definitions.

Purpose:
    A :class:`ResourceDefinition` names every type one resource needs: the
    entity, its output DTO, the identifier-lookup request and the payload
    model of each operation. It is instantiated once per resource and shared
    by handler registration, the controller and the HTTP router.

Layer:
    application
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from resource_api.application.schemas.dto.base import IdLookupRequest


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceDefinition:
    """Static description of one resource.

    Attributes:
        name: Plural path segment (e.g. ``"widgets"``).
        entity_type: Domain entity class; also the mediator routing key.
        dto_type: Output representation returned to callers.
        create_type: Create payload model.
        update_type: Full-update payload model.
        patch_type: Sparse patch payload model; every field needs a default.
        id_query_type: Identifier lookup request model.
        list_filter_type: Optional list filter model (bound from the query string).
        delete_type: Optional delete-reason model (bound from the query string).
    """

    name: str
    entity_type: type[Any]
    dto_type: type[BaseModel]
    create_type: type[BaseModel]
    update_type: type[BaseModel]
    patch_type: type[BaseModel]
    id_query_type: type[IdLookupRequest] = IdLookupRequest
    list_filter_type: type[BaseModel] | None = None
    delete_type: type[BaseModel] | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.name or "/" in self.name:
            raise ValueError("resource name must be a non-empty path segment")
        if "id" not in self.dto_type.model_fields:
            raise ValueError(f"{self.dto_type.__name__} must declare an 'id' field")
