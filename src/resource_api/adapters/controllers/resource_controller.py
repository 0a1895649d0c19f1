# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Resource Controller.

Summary:
    Generic controller implementing list, get-by-id, create, update, patch
    and delete for any resource by dispatching envelopes through a mediator
    and mapping entities to the resource's output DTO.

Sequencing:
    * Reads issue exactly one dispatch.
    * Create issues ``CreateCommand`` then ``SaveCommand``; never a lookup.
    * Update/patch/delete issue ``IdQuery`` first. An absent result ends the
      call with :class:`NotFound` and nothing else is dispatched; otherwise
      the mutate envelope is dispatched, then ``SaveCommand``.

    Dispatches are strictly sequential. The cancellation token is checked
    before every dispatch and passed verbatim to the mediator. Failures from
    the mediator, the mapper and patch application propagate unchanged; the
    controller neither retries nor compensates, and does not log.

Layer:
    adapters/controllers
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from resource_api.adapters.controllers.outcomes import (
    Created,
    Deleted,
    DeleteOutcome,
    Found,
    GetOutcome,
    Listed,
    NotFound,
    Updated,
    UpdateOutcome,
)
from resource_api.application.cancellation import CancellationToken, ensure_not_cancelled
from resource_api.application.interfaces.mapper import Mapper
from resource_api.application.interfaces.mediator import Mediator
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
from resource_api.application.schemas.dto.base import IdLookupRequest
from resource_api.application.schemas.dto.patch import PatchDocument
from resource_api.application.services.patching import apply_patch
from resource_api.domain.entities.base import Entity


class ResourceController[TEntity: Entity, TDto: BaseModel, TQueryById: IdLookupRequest]:
    """Controller orchestrating the six resource operations.

    Holds only immutable references fixed at construction; one instance can
    serve concurrent invocations.
    """

    __slots__ = (
        "_mediator",
        "_mapper",
        "_entity_type",
        "_dto_type",
        "_id_query_type",
        "_patch_type",
    )

    def __init__(
        self,
        *,
        mediator: Mediator,
        mapper: Mapper,
        entity_type: type[TEntity],
        dto_type: type[TDto],
        id_query_type: type[TQueryById],
        patch_type: type[BaseModel] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            mediator: Dispatch executor satisfying every envelope.
            mapper: Structural mapper used for ``entity -> dto``.
            entity_type: Entity class; routing key for every envelope.
            dto_type: Output representation type.
            id_query_type: Identifier lookup request type. Must be
                constructible from ``id`` alone.
            patch_type: Default patch payload type used by :meth:`patch`.
        """
        self._mediator = mediator
        self._mapper = mapper
        self._entity_type = entity_type
        self._dto_type = dto_type
        self._id_query_type = id_query_type
        self._patch_type = patch_type

    @classmethod
    def for_resource(
        cls,
        definition: ResourceDefinition,
        *,
        mediator: Mediator,
        mapper: Mapper,
    ) -> ResourceController[Any, Any, Any]:
        """Build a controller from a :class:`ResourceDefinition`."""
        return cls(
            mediator=mediator,
            mapper=mapper,
            entity_type=definition.entity_type,
            dto_type=definition.dto_type,
            id_query_type=definition.id_query_type,
            patch_type=definition.patch_type,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list(
        self,
        filters: Any = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> Listed[TDto]:
        """Return every entity matching ``filters`` as DTOs.

        Args:
            filters: Opaque list-filter request forwarded to the mediator.
            cancellation: Optional cancellation token.

        Returns:
            Listed outcome; an empty result is still a success.
        """
        entities: Sequence[TEntity] = await self._send(
            ListQuery(entity_type=self._entity_type, request=filters), cancellation
        )
        return Listed(items=self._mapper.map_many(entities, self._dto_type))

    async def get_by_id(
        self,
        id: UUID,
        lookup_request: TQueryById | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> GetOutcome[TDto]:
        """Load one entity by identifier.

        Args:
            id: Identifier of the record.
            lookup_request: Optional lookup request carrying resource-specific
                options; its ``id`` is overwritten with ``id`` on a copy.
            cancellation: Optional cancellation token.

        Returns:
            Found with the DTO, or NotFound.
        """
        request = (
            lookup_request.model_copy(update={"id": id})
            if lookup_request is not None
            else self._id_query(id)
        )
        entity = await self._send(
            IdQuery(entity_type=self._entity_type, request=request), cancellation
        )
        if entity is None:
            return NotFound(id=id)
        return Found(value=self._to_dto(entity))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(
        self,
        payload: Any,
        *,
        cancellation: CancellationToken | None = None,
    ) -> Created[TDto]:
        """Create and persist a new entity.

        Args:
            payload: Create payload forwarded to the mediator.
            cancellation: Optional cancellation token.

        Returns:
            Created with the DTO and the new identifier.
        """
        entity: TEntity = await self._send(
            CreateCommand(entity_type=self._entity_type, request=payload), cancellation
        )
        await self._persist(cancellation)
        dto = self._to_dto(entity)
        return Created(value=dto, id=dto.id)  # type: ignore[attr-defined]

    async def update(
        self,
        id: UUID,
        payload: Any,
        *,
        cancellation: CancellationToken | None = None,
    ) -> UpdateOutcome[TDto]:
        """Apply a full update to an existing entity.

        The DTO is built from the entity returned by the update dispatch, or
        from the loaded entity when the handler mutated it in place and
        returned ``None``.
        """
        entity = await self._load(id, cancellation)
        if entity is None:
            return NotFound(id=id)

        updated = await self._send(
            UpdateCommand(entity_type=self._entity_type, entity=entity, request=payload),
            cancellation,
        )
        await self._persist(cancellation)
        return Updated(value=self._to_dto(updated if updated is not None else entity))

    async def patch(
        self,
        id: UUID,
        document: PatchDocument,
        payload_type: type[BaseModel] | None = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> UpdateOutcome[TDto]:
        """Apply a patch document to an existing entity.

        A fresh payload (``payload_type`` or the controller's default patch
        type) is patched into a sparse payload after the lookup succeeds and
        before anything is mutated, so a malformed document aborts the call
        without a mutate or persist dispatch.

        Raises:
            PatchApplicationError: If the document cannot be applied.
            TypeError: If no patch payload type is known.
        """
        model = payload_type or self._patch_type
        if model is None:
            raise TypeError("patch() needs a payload_type when the controller has no patch_type")

        entity = await self._load(id, cancellation)
        if entity is None:
            return NotFound(id=id)

        payload = apply_patch(document, model())

        patched = await self._send(
            PatchCommand(entity_type=self._entity_type, entity=entity, request=payload),
            cancellation,
        )
        await self._persist(cancellation)
        return Updated(value=self._to_dto(patched))

    async def delete(
        self,
        id: UUID,
        payload: Any = None,
        *,
        cancellation: CancellationToken | None = None,
    ) -> DeleteOutcome:
        """Delete an existing entity.

        Args:
            id: Identifier of the record.
            payload: Optional delete request (e.g. a reason).
            cancellation: Optional cancellation token.

        Returns:
            Deleted (no payload), or NotFound.
        """
        entity = await self._load(id, cancellation)
        if entity is None:
            return NotFound(id=id)

        await self._send(
            DeleteCommand(entity_type=self._entity_type, entity=entity, request=payload),
            cancellation,
        )
        await self._persist(cancellation)
        return Deleted(id=id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _id_query(self, id: UUID) -> TQueryById:
        return self._id_query_type(id=id)

    async def _load(self, id: UUID, cancellation: CancellationToken | None) -> TEntity | None:
        return await self._send(  # type: ignore[no-any-return]
            IdQuery(entity_type=self._entity_type, request=self._id_query(id)), cancellation
        )

    async def _persist(self, cancellation: CancellationToken | None) -> None:
        await self._send(SaveCommand(entity_type=self._entity_type), cancellation)

    async def _send(self, request: ResourceRequest, cancellation: CancellationToken | None) -> Any:
        ensure_not_cancelled(cancellation)
        return await self._mediator.send(request, cancellation=cancellation)

    def _to_dto(self, entity: TEntity) -> TDto:
        return self._mapper.map(entity, self._dto_type)
