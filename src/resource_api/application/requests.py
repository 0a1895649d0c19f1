# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Dispatch Envelopes (Application Layer).

Purpose:
    Typed wrappers routed through the mediator. Each envelope pairs an
    operation-specific request (and, for mutations, the previously loaded
    entity) with ``entity_type`` so one mediator can serve many resources.

    Envelope        Result
    --------------  -----------------------
    ListQuery       Sequence[TEntity]
    IdQuery         TEntity | None
    CreateCommand   TEntity
    UpdateCommand   TEntity | None
    PatchCommand    TEntity
    DeleteCommand   None
    SaveCommand     None

Layer:
    application
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, kw_only=True)
class ResourceRequest:
    """Common base of all envelopes.

    Attributes:
        entity_type: Entity class the envelope is routed for.
    """

    entity_type: type[Any]

    @property
    def operation(self) -> str:
        """Return a short name for logs (e.g. ``"IdQuery"``)."""
        return type(self).__name__


@dataclass(frozen=True, kw_only=True)
class ListQuery[TEntity, TRequest](ResourceRequest):
    """List every entity matching the opaque filter request."""

    request: TRequest | None = None


@dataclass(frozen=True, kw_only=True)
class IdQuery[TEntity, TRequest](ResourceRequest):
    """Load a single entity by the identifier carried in ``request.id``."""

    request: TRequest


@dataclass(frozen=True, kw_only=True)
class CreateCommand[TEntity, TRequest](ResourceRequest):
    """Create a new entity from the payload."""

    request: TRequest


@dataclass(frozen=True, kw_only=True)
class UpdateCommand[TEntity, TRequest](ResourceRequest):
    """Apply a full update payload to a loaded entity."""

    entity: TEntity
    request: TRequest


@dataclass(frozen=True, kw_only=True)
class PatchCommand[TEntity, TRequest](ResourceRequest):
    """Apply a sparse payload (only its set fields) to a loaded entity."""

    entity: TEntity
    request: TRequest


@dataclass(frozen=True, kw_only=True)
class DeleteCommand[TEntity, TRequest](ResourceRequest):
    """Remove a loaded entity. ``request`` carries the caller's reason, if any."""

    entity: TEntity
    request: TRequest | None = None


@dataclass(frozen=True, kw_only=True)
class SaveCommand[TEntity](ResourceRequest):
    """Persist every staged change for ``entity_type``."""
