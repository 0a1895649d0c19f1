# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Generic request handlers.

Purpose:
    Satisfy every dispatch envelope for any resource against the repository
    that a :class:`UnitOfWork` exposes for ``request.entity_type``.

    * Reads (``ListQuery``, ``IdQuery``) go straight to the repository.
    * Mutations (``CreateCommand``, ``UpdateCommand``, ``PatchCommand``,
      ``DeleteCommand``) only stage changes.
    * ``SaveCommand`` commits the UnitOfWork.

    Entities are updated by copying payload fields that name entity
    attributes. Dataclass entities (frozen or not) are replaced with
    :func:`dataclasses.replace`; any other entity is mutated in place.

Layer:
    application/handlers
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from typing import Any
from uuid import uuid4

from pydantic import BaseModel

from resource_api.application.cancellation import CancellationToken
from resource_api.application.requests import (
    CreateCommand,
    DeleteCommand,
    IdQuery,
    ListQuery,
    PatchCommand,
    ResourceRequest,
    SaveCommand,
    UpdateCommand,
)
from resource_api.application.resources import ResourceDefinition
from resource_api.application.services.mediator import InProcessMediator
from resource_api.application.uow import UnitOfWork
from resource_api.domain.interfaces.repositories.resource_repository import (
    ResourceRepository,
)

logger = logging.getLogger(__name__)


def _entity_attributes(entity_type: type[Any]) -> set[str] | None:
    """Return writable attribute names for dataclass entities, else ``None``."""
    if dataclasses.is_dataclass(entity_type):
        return {f.name for f in dataclasses.fields(entity_type) if f.init}
    return None


def _select_changes(entity_type: type[Any], values: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only the payload values that name attributes of ``entity_type``."""
    names = _entity_attributes(entity_type)
    if names is not None:
        return {k: v for k, v in values.items() if k in names}
    return {k: v for k, v in values.items() if hasattr(entity_type, k)}


def _payload_values(payload: Any, *, sparse: bool) -> dict[str, Any]:
    """Dump a payload to a plain mapping keyed by field name."""
    if payload is None:
        return {}
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_unset=sparse)
    if isinstance(payload, Mapping):
        return dict(payload)
    raise TypeError(f"Unsupported payload type {type(payload).__name__}")


def _assign[TEntity](entity: TEntity, changes: Mapping[str, Any]) -> TEntity:
    """Apply ``changes`` to ``entity`` and return the resulting entity."""
    if not changes:
        return entity
    if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        return dataclasses.replace(entity, **changes)  # type: ignore[type-var]
    for name, value in changes.items():
        setattr(entity, name, value)
    return entity


class _RepositoryHandler:
    """Shared plumbing: resolve the repository for the envelope's entity type."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def _repository(self, request: ResourceRequest) -> ResourceRepository[Any]:
        return self._uow.get_repository(request.entity_type)


class ListQueryHandler(_RepositoryHandler):
    """Return every record visible to the unit of work."""

    async def handle(
        self,
        request: ListQuery[Any, Any],
        *,
        cancellation: CancellationToken | None = None,
    ) -> Sequence[Any]:
        return await self._repository(request).list(request.request)


class IdQueryHandler(_RepositoryHandler):
    """Load one record by ``request.request.id``; ``None`` when absent."""

    async def handle(
        self,
        request: IdQuery[Any, Any],
        *,
        cancellation: CancellationToken | None = None,
    ) -> Any | None:
        entity_id = getattr(request.request, "id", None)
        if entity_id is None:
            return None
        return await self._repository(request).get(entity_id)


class CreateCommandHandler(_RepositoryHandler):
    """Build a new entity from the payload and stage it."""

    async def handle(
        self,
        request: CreateCommand[Any, Any],
        *,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        values = _select_changes(
            request.entity_type, _payload_values(request.request, sparse=False)
        )
        entity = request.entity_type(**values)
        if getattr(entity, "id", None) is None:
            entity = _assign(entity, {"id": uuid4()})

        await self._repository(request).add(entity)
        logger.info(
            "resource_create_staged",
            extra={"extra": {"entity_type": request.entity_type.__name__, "id": str(entity.id)}},
        )
        return entity


class UpdateCommandHandler(_RepositoryHandler):
    """Copy every payload field onto the loaded entity and stage it."""

    async def handle(
        self,
        request: UpdateCommand[Any, Any],
        *,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        changes = _select_changes(
            request.entity_type, _payload_values(request.request, sparse=False)
        )
        changes.pop("id", None)
        entity = _assign(request.entity, changes)
        await self._repository(request).update(entity)
        return entity


class PatchCommandHandler(_RepositoryHandler):
    """Copy only the payload's set fields onto the loaded entity and stage it."""

    async def handle(
        self,
        request: PatchCommand[Any, Any],
        *,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        changes = _select_changes(
            request.entity_type, _payload_values(request.request, sparse=True)
        )
        changes.pop("id", None)
        entity = _assign(request.entity, changes)
        await self._repository(request).update(entity)
        return entity


class DeleteCommandHandler(_RepositoryHandler):
    """Stage removal of the loaded entity."""

    async def handle(
        self,
        request: DeleteCommand[Any, Any],
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        await self._repository(request).remove(request.entity)
        logger.info(
            "resource_delete_staged",
            extra={
                "extra": {
                    "entity_type": request.entity_type.__name__,
                    "id": str(request.entity.id),
                    "reason": _payload_values(request.request, sparse=True) or None,
                }
            },
        )


class SaveCommandHandler:
    """Commit everything staged in the unit of work."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def handle(
        self,
        request: SaveCommand[Any],
        *,
        cancellation: CancellationToken | None = None,
    ) -> None:
        await self._uow.commit()


def register_resource_handlers(
    mediator: InProcessMediator,
    definition: ResourceDefinition,
    uow: UnitOfWork,
) -> None:
    """Register the seven generic handlers for ``definition.entity_type``.

    Args:
        mediator: Mediator to populate.
        definition: Resource whose entity type keys the registrations.
        uow: Unit of work providing the resource's repository.
    """
    handlers: tuple[tuple[type[ResourceRequest], Any], ...] = (
        (ListQuery, ListQueryHandler(uow)),
        (IdQuery, IdQueryHandler(uow)),
        (CreateCommand, CreateCommandHandler(uow)),
        (UpdateCommand, UpdateCommandHandler(uow)),
        (PatchCommand, PatchCommandHandler(uow)),
        (DeleteCommand, DeleteCommandHandler(uow)),
        (SaveCommand, SaveCommandHandler(uow)),
    )
    for request_type, handler in handlers:
        mediator.register(request_type, handler, entity_type=definition.entity_type)
