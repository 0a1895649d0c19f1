# tests/unit/adapters/controllers/test_resource_controller.py
from __future__ import annotations

import asyncio
from typing import Any
from uuid import uuid4

import pytest
from resource_testkit import (
    WIDGETS,
    ScriptedMediator,
    Widget,
    WidgetCreate,
    WidgetDeleteReason,
    WidgetDTO,
    WidgetListFilter,
    WidgetLookup,
    WidgetPatch,
    WidgetUpdate,
)

from resource_api.adapters.controllers.outcomes import (
    Created,
    Deleted,
    Found,
    Listed,
    NotFound,
    Updated,
)
from resource_api.adapters.controllers.resource_controller import ResourceController
from resource_api.application.cancellation import CancellationToken
from resource_api.application.requests import (
    CreateCommand,
    DeleteCommand,
    IdQuery,
    ListQuery,
    PatchCommand,
    SaveCommand,
    UpdateCommand,
)
from resource_api.application.schemas.dto.patch import PatchOperation
from resource_api.application.services.structural_mapper import StructuralMapper
from resource_api.domain.exceptions.dispatch import OperationCancelledError
from resource_api.domain.exceptions.patch import PatchApplicationError


def _replace(entity: Widget, **changes: Any) -> Widget:
    return Widget(
        id=entity.id,
        name=changes.get("name", entity.name),
        quantity=changes.get("quantity", entity.quantity),
        tags=changes.get("tags", entity.tags),
    )


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_dispatches_once_and_maps_items(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    other = Widget(name="y")
    scripted_mediator.script[ListQuery] = [widget, other]
    filters = WidgetListFilter(name="x")

    outcome = await controller.list(filters)

    assert isinstance(outcome, Listed)
    assert [dto.name for dto in outcome.items] == ["x", "y"]
    assert all(isinstance(dto, WidgetDTO) for dto in outcome.items)
    assert scripted_mediator.operations == ["ListQuery"]
    sent = scripted_mediator.calls[0]
    assert isinstance(sent, ListQuery)
    assert sent.request is filters
    assert sent.entity_type is Widget


@pytest.mark.asyncio
async def test_list_with_empty_result_is_still_listed(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    scripted_mediator.script[ListQuery] = []

    outcome = await controller.list()

    assert outcome == Listed(items=[])
    assert scripted_mediator.operations == ["ListQuery"]


# ---------------------------------------------------------------------------
# Get by id
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_by_id_found_round_trips_the_identifier(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget

    outcome = await controller.get_by_id(widget.id)

    assert isinstance(outcome, Found)
    assert outcome.value.id == widget.id
    assert outcome.value.name == "x"
    sent = scripted_mediator.calls[0]
    assert isinstance(sent, IdQuery)
    assert isinstance(sent.request, WidgetLookup)
    assert sent.request.id == widget.id


@pytest.mark.asyncio
async def test_get_by_id_absent_returns_not_found(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    missing = uuid4()

    outcome = await controller.get_by_id(missing)

    assert outcome == NotFound(id=missing)
    assert scripted_mediator.operations == ["IdQuery"]


@pytest.mark.asyncio
async def test_get_by_id_overwrites_lookup_id_on_a_copy(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget
    lookup = WidgetLookup(id=uuid4(), include_archived=True)

    await controller.get_by_id(widget.id, lookup)

    sent = scripted_mediator.calls[0].request
    assert sent.id == widget.id
    assert sent.include_archived is True
    assert lookup.id != widget.id


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_dispatches_create_then_save_without_lookup(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    created = Widget(name="y")
    scripted_mediator.script[CreateCommand] = created
    payload = WidgetCreate(name="y")

    outcome = await controller.create(payload)

    assert isinstance(outcome, Created)
    assert outcome.id == created.id
    assert outcome.value.name == "y"
    assert scripted_mediator.operations == ["CreateCommand", "SaveCommand"]
    assert scripted_mediator.calls[0].request is payload


@pytest.mark.asyncio
async def test_create_propagates_save_failure(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    scripted_mediator.script[CreateCommand] = Widget(name="y")
    scripted_mediator.script[SaveCommand] = RuntimeError("store unavailable")

    with pytest.raises(RuntimeError, match="store unavailable"):
        await controller.create(WidgetCreate(name="y"))

    assert scripted_mediator.operations == ["CreateCommand", "SaveCommand"]


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_update_found_dispatches_lookup_mutate_save(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget
    scripted_mediator.script[UpdateCommand] = lambda req: _replace(req.entity, name="q")
    payload = WidgetUpdate(name="q", quantity=1)

    outcome = await controller.update(widget.id, payload)

    assert isinstance(outcome, Updated)
    assert outcome.value.name == "q"
    assert outcome.value.id == widget.id
    assert scripted_mediator.operations == ["IdQuery", "UpdateCommand", "SaveCommand"]
    mutate = scripted_mediator.calls[1]
    assert isinstance(mutate, UpdateCommand)
    assert mutate.entity is widget
    assert mutate.request is payload


@pytest.mark.asyncio
async def test_update_falls_back_to_loaded_entity_when_handler_returns_none(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget

    outcome = await controller.update(widget.id, WidgetUpdate(name="q", quantity=1))

    assert isinstance(outcome, Updated)
    assert outcome.value.name == "x"


@pytest.mark.asyncio
async def test_update_absent_issues_only_the_lookup(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    missing = uuid4()

    outcome = await controller.update(missing, WidgetUpdate(name="q", quantity=1))

    assert outcome == NotFound(id=missing)
    assert scripted_mediator.operations == ["IdQuery"]


# ---------------------------------------------------------------------------
# Patch
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_patch_sends_sparse_payload_and_saves(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget
    scripted_mediator.script[PatchCommand] = lambda req: _replace(
        req.entity, **req.request.model_dump(exclude_unset=True)
    )
    document = [PatchOperation(op="replace", path="/name", value="z")]

    outcome = await controller.patch(widget.id, document)

    assert isinstance(outcome, Updated)
    assert outcome.value.name == "z"
    assert outcome.value.quantity == 3
    assert scripted_mediator.operations == ["IdQuery", "PatchCommand", "SaveCommand"]
    payload = scripted_mediator.calls[1].request
    assert isinstance(payload, WidgetPatch)
    assert payload.model_fields_set == {"name"}


@pytest.mark.asyncio
async def test_patch_with_empty_document_sends_pristine_payload(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget
    scripted_mediator.script[PatchCommand] = lambda req: req.entity

    outcome = await controller.patch(widget.id, [])

    assert isinstance(outcome, Updated)
    assert outcome.value.name == widget.name
    payload = scripted_mediator.calls[1].request
    assert payload == WidgetPatch()
    assert payload.model_fields_set == set()


@pytest.mark.asyncio
async def test_patch_absent_issues_only_the_lookup(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    missing = uuid4()
    document = [PatchOperation(op="replace", path="/name", value="z")]

    outcome = await controller.patch(missing, document)

    assert outcome == NotFound(id=missing)
    assert scripted_mediator.operations == ["IdQuery"]


@pytest.mark.asyncio
async def test_patch_failure_stops_before_mutation(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget
    document = [PatchOperation(op="replace", path="/colour", value="red")]

    with pytest.raises(PatchApplicationError):
        await controller.patch(widget.id, document)

    assert scripted_mediator.operations == ["IdQuery"]


@pytest.mark.asyncio
async def test_patch_uses_explicit_payload_type(
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    controller = ResourceController(
        mediator=scripted_mediator,
        mapper=StructuralMapper(),
        entity_type=Widget,
        dto_type=WidgetDTO,
        id_query_type=WidgetLookup,
    )
    scripted_mediator.script[IdQuery] = widget
    scripted_mediator.script[PatchCommand] = lambda req: req.entity

    await controller.patch(widget.id, [], WidgetPatch)

    assert isinstance(scripted_mediator.calls[1].request, WidgetPatch)


@pytest.mark.asyncio
async def test_patch_without_any_payload_type_is_rejected(
    scripted_mediator: ScriptedMediator,
) -> None:
    controller = ResourceController(
        mediator=scripted_mediator,
        mapper=StructuralMapper(),
        entity_type=Widget,
        dto_type=WidgetDTO,
        id_query_type=WidgetLookup,
    )

    with pytest.raises(TypeError):
        await controller.patch(uuid4(), [])

    assert scripted_mediator.calls == []


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_found_dispatches_lookup_mutate_save(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget
    reason = WidgetDeleteReason(reason="obsolete")

    outcome = await controller.delete(widget.id, reason)

    assert outcome == Deleted(id=widget.id)
    assert scripted_mediator.operations == ["IdQuery", "DeleteCommand", "SaveCommand"]
    mutate = scripted_mediator.calls[1]
    assert isinstance(mutate, DeleteCommand)
    assert mutate.entity is widget
    assert mutate.request is reason


@pytest.mark.asyncio
async def test_delete_absent_issues_only_the_lookup(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    missing = uuid4()

    outcome = await controller.delete(missing)

    assert outcome == NotFound(id=missing)
    assert scripted_mediator.operations == ["IdQuery"]


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_token_is_forwarded_to_every_dispatch(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    scripted_mediator.script[IdQuery] = widget
    token = CancellationToken()

    await controller.delete(widget.id, cancellation=token)

    assert scripted_mediator.tokens == [token, token, token]


@pytest.mark.asyncio
async def test_cancelled_token_prevents_any_dispatch(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
) -> None:
    token = CancellationToken()
    token.cancel("caller gave up")

    with pytest.raises(OperationCancelledError):
        await controller.list(cancellation=token)

    assert scripted_mediator.calls == []


@pytest.mark.asyncio
async def test_cancellation_during_lookup_skips_mutate_and_save(
    controller: ResourceController[Any, Any, Any],
    scripted_mediator: ScriptedMediator,
    widget: Widget,
) -> None:
    token = CancellationToken()

    async def _lookup(_: Any) -> Widget:
        token.cancel("client disconnected")
        await asyncio.sleep(0)
        return widget

    scripted_mediator.script[IdQuery] = _lookup

    with pytest.raises(OperationCancelledError) as exc_info:
        await controller.update(widget.id, WidgetUpdate(name="q", quantity=1), cancellation=token)

    assert exc_info.value.details == {"reason": "client disconnected"}
    assert scripted_mediator.operations == ["IdQuery"]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_for_resource_uses_definition_types(scripted_mediator: ScriptedMediator) -> None:
    controller = ResourceController.for_resource(
        WIDGETS, mediator=scripted_mediator, mapper=StructuralMapper()
    )

    assert controller._entity_type is Widget
    assert controller._dto_type is WidgetDTO
    assert controller._patch_type is WidgetPatch
