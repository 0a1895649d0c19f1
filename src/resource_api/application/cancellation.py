# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Cooperative cancellation token.

Purpose:
    Carry an explicit "stop" signal through every dispatch issued by one
    controller invocation. The token is checked between suspension points
    and, through :meth:`CancellationToken.run`, interrupts an awaited
    dispatch that is still outstanding when the signal arrives.

    The awaited dispatch keeps running in the caller's task so task-scoped
    state (context variables, task-scoped database sessions) stays intact.

Layer:
    application
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable

from resource_api.domain.exceptions.dispatch import OperationCancelledError


class CancellationToken:
    """One-shot cancellation signal shared by a single invocation."""

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        """Initialize an un-signalled token."""
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """Return ``True`` once :meth:`cancel` has been called."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Return the optional reason passed to :meth:`cancel`."""
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Signal cancellation. Later calls are no-ops."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> None:
        """Suspend until the token is signalled."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        """Raise :class:`OperationCancelledError` if the token is signalled."""
        if self._event.is_set():
            raise OperationCancelledError(
                "Operation cancelled",
                details={"reason": self._reason} if self._reason else None,
            )

    async def run[T](self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        Args:
            awaitable: Coroutine to await in the current task.

        Returns:
            Whatever ``awaitable`` returns.

        Raises:
            OperationCancelledError: If the token was already signalled or
                fires while ``awaitable`` is outstanding.
            asyncio.CancelledError: If the surrounding task itself is
                cancelled by someone else.
        """
        self.raise_if_cancelled()

        task = asyncio.current_task()
        if task is None:  # pragma: no cover - always inside a task under asyncio
            return await awaitable

        watcher = asyncio.ensure_future(self._interrupt(task))
        try:
            return await awaitable
        except asyncio.CancelledError:
            fired = watcher.done() and not watcher.cancelled()
            if fired and task.uncancel() == 0:
                self.raise_if_cancelled()
            raise
        finally:
            watcher.cancel()

    async def _interrupt(self, task: asyncio.Task[object]) -> None:
        """Cancel ``task`` once the token is signalled."""
        await self._event.wait()
        task.cancel()


def ensure_not_cancelled(cancellation: CancellationToken | None) -> None:
    """Checkpoint helper tolerating an absent token."""
    if cancellation is not None:
        cancellation.raise_if_cancelled()
