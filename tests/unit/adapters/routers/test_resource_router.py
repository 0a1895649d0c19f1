# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Unit tests for ResourceRouter mounting and disconnect-driven cancellation."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.routing import APIRoute
from resource_testkit import WIDGETS

from resource_api.adapters.controllers.resource_controller import ResourceController
from resource_api.adapters.presenters.base_presenter import PresentResult
from resource_api.adapters.routers.base_router import BaseRouter
from resource_api.adapters.routers.resource_router import ResourceRouter
from resource_api.application.cancellation import CancellationToken


class _FakeRequest:
    """Just enough of ``Request`` for the disconnect watcher."""

    def __init__(self, *, disconnected: bool) -> None:
        self._disconnected = disconnected
        self.url = SimpleNamespace(path="/v1/widgets")
        self.method = "GET"

    async def is_disconnected(self) -> bool:
        return self._disconnected


def test_router_mounts_six_named_routes(controller: ResourceController[Any, Any, Any]) -> None:
    router = ResourceRouter(WIDGETS, controller)

    routes = {
        (route.name, route.path, next(iter(route.methods)))
        for route in router.routes
        if isinstance(route, APIRoute)
    }

    assert routes == {
        ("list_widgets", "/v1/widgets", "GET"),
        ("get_widgets", "/v1/widgets/{id}", "GET"),
        ("create_widgets", "/v1/widgets", "POST"),
        ("update_widgets", "/v1/widgets/{id}", "PUT"),
        ("patch_widgets", "/v1/widgets/{id}", "PATCH"),
        ("delete_widgets", "/v1/widgets/{id}", "DELETE"),
    }


def test_router_uses_version_and_tags(controller: ResourceController[Any, Any, Any]) -> None:
    router = ResourceRouter(WIDGETS, controller, version="v3")

    assert router.prefix == "/v3/widgets"
    assert router.tags == ["widgets"]


@pytest.mark.asyncio
async def test_client_disconnect_cancels_token(
    controller: ResourceController[Any, Any, Any],
) -> None:
    router = ResourceRouter(WIDGETS, controller, disconnect_poll_interval=0.01)

    async with router._cancellation(_FakeRequest(disconnected=True)) as token:  # type: ignore[arg-type]
        await asyncio.wait_for(token.wait(), timeout=2)

    assert token.cancelled
    assert token.reason == "client disconnected"


@pytest.mark.asyncio
async def test_connected_client_leaves_token_alone(
    controller: ResourceController[Any, Any, Any],
) -> None:
    router = ResourceRouter(WIDGETS, controller, disconnect_poll_interval=0.01)

    async with router._cancellation(_FakeRequest(disconnected=False)) as token:  # type: ignore[arg-type]
        await asyncio.sleep(0.05)

    assert not token.cancelled


@pytest.mark.asyncio
async def test_polling_can_be_disabled(controller: ResourceController[Any, Any, Any]) -> None:
    router = ResourceRouter(WIDGETS, controller, disconnect_poll_interval=None)

    async with router._cancellation(_FakeRequest(disconnected=True)) as token:  # type: ignore[arg-type]
        await asyncio.sleep(0.02)

    assert not token.cancelled


def test_send_renders_empty_and_json_bodies() -> None:
    empty = BaseRouter.send(PresentResult(body=None, headers={"X-Request-ID": "r"}, status_code=204))
    plain = BaseRouter.send(PresentResult(body={"ok": True}, headers={}))

    assert empty.status_code == 204
    assert empty.body == b""
    assert empty.headers["X-Request-ID"] == "r"
    assert plain.status_code == 200
    assert plain.body == b'{"ok":true}'


@pytest.mark.asyncio
async def test_watcher_uses_the_interval_it_is_given(
    controller: ResourceController[Any, Any, Any],
) -> None:
    router = ResourceRouter(WIDGETS, controller, disconnect_poll_interval=None)
    token = CancellationToken()

    await asyncio.wait_for(
        router._watch_disconnect(_FakeRequest(disconnected=True), token, 0.01),  # type: ignore[arg-type]
        timeout=2,
    )

    assert token.reason == "client disconnected"
