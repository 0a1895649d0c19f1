# tests/unit/application/test_mediator.py
from __future__ import annotations

import asyncio
from typing import Any

import pytest
from resource_testkit import Widget

from resource_api.application.cancellation import CancellationToken
from resource_api.application.requests import IdQuery, ListQuery, SaveCommand
from resource_api.application.services.mediator import InProcessMediator
from resource_api.domain.exceptions.dispatch import (
    HandlerNotRegisteredError,
    OperationCancelledError,
)


class _Gadget:
    pass


class _EchoHandler:
    def __init__(self, label: str) -> None:
        self.label = label
        self.seen: list[tuple[Any, CancellationToken | None]] = []

    async def handle(self, request: Any, *, cancellation: CancellationToken | None = None) -> str:
        self.seen.append((request, cancellation))
        return self.label


@pytest.mark.asyncio
async def test_send_routes_by_request_and_entity_type() -> None:
    mediator = InProcessMediator()
    widgets = _EchoHandler("widgets")
    gadgets = _EchoHandler("gadgets")
    mediator.register(ListQuery, widgets, entity_type=Widget)
    mediator.register(ListQuery, gadgets, entity_type=_Gadget)

    assert await mediator.send(ListQuery(entity_type=Widget)) == "widgets"
    assert await mediator.send(ListQuery(entity_type=_Gadget)) == "gadgets"


@pytest.mark.asyncio
async def test_send_falls_back_to_handler_for_any_entity_type() -> None:
    mediator = InProcessMediator()
    mediator.register(SaveCommand, _EchoHandler("any"))

    assert await mediator.send(SaveCommand(entity_type=Widget)) == "any"
    assert mediator.is_registered(SaveCommand, Widget)


@pytest.mark.asyncio
async def test_send_without_handler_raises() -> None:
    mediator = InProcessMediator()

    with pytest.raises(HandlerNotRegisteredError) as exc_info:
        await mediator.send(IdQuery(entity_type=Widget, request=None))

    assert exc_info.value.details == {"operation": "IdQuery", "entity_type": "Widget"}


def test_duplicate_registration_is_rejected() -> None:
    mediator = InProcessMediator()
    mediator.register(ListQuery, _EchoHandler("a"), entity_type=Widget)

    with pytest.raises(ValueError):
        mediator.register(ListQuery, _EchoHandler("b"), entity_type=Widget)


@pytest.mark.asyncio
async def test_send_forwards_token_verbatim() -> None:
    mediator = InProcessMediator()
    handler = _EchoHandler("ok")
    mediator.register(ListQuery, handler)
    token = CancellationToken()

    await mediator.send(ListQuery(entity_type=Widget), cancellation=token)

    assert handler.seen[0][1] is token


@pytest.mark.asyncio
async def test_send_with_cancelled_token_never_calls_handler() -> None:
    mediator = InProcessMediator()
    handler = _EchoHandler("ok")
    mediator.register(ListQuery, handler)
    token = CancellationToken()
    token.cancel()

    with pytest.raises(OperationCancelledError):
        await mediator.send(ListQuery(entity_type=Widget), cancellation=token)

    assert handler.seen == []


@pytest.mark.asyncio
async def test_send_interrupts_handler_when_token_fires() -> None:
    mediator = InProcessMediator()
    token = CancellationToken()

    class _SlowHandler:
        async def handle(self, request: Any, *, cancellation: CancellationToken | None = None) -> None:
            token.cancel("timeout")
            await asyncio.sleep(10)

    mediator.register(ListQuery, _SlowHandler())

    with pytest.raises(OperationCancelledError):
        await mediator.send(ListQuery(entity_type=Widget), cancellation=token)
