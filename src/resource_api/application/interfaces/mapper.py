# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Mapper Port.

Purpose:
    Structural, field-based conversion between related shapes, used by the
    resource controller for ``Entity -> DTO`` and ``Sequence[Entity] ->
    list[DTO]``. Implementations MUST be pure (no I/O).

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Mapper(Protocol):
    """Structural mapper contract."""

    def map[TTarget](self, source: Any, target_type: type[TTarget]) -> TTarget:
        """Convert ``source`` into an instance of ``target_type``."""
        ...

    def map_many[TTarget](
        self, sources: Iterable[Any], target_type: type[TTarget]
    ) -> list[TTarget]:
        """Convert every element of ``sources``, preserving order."""
        ...
