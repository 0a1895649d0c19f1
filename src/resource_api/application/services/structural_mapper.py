# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Structural mapper.

Purpose:
    Field-based conversion between structurally related shapes:

        * pydantic targets are built with ``model_validate(..., from_attributes=True)``
          so entities (dataclasses, ORM rows, other models) map by attribute name;
        * dataclass targets are built from the source attributes named by the
          target's init fields;
        * explicit converters registered for a ``(source_type, target_type)``
          pair take precedence over both.

    Extra attributes on object sources are ignored; mapping sources are
    validated as-is. Missing required target fields fail with the target's
    own validation error.

Layer:
    application/services
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel

type Converter = Callable[[Any], Any]


class StructuralMapper:
    """Default :class:`~resource_api.application.interfaces.mapper.Mapper`."""

    def __init__(self) -> None:
        """Initialize the mapper with no custom converters."""
        self._converters: dict[tuple[type[Any], type[Any]], Converter] = {}

    def register(
        self,
        source_type: type[Any],
        target_type: type[Any],
        converter: Converter,
    ) -> None:
        """Override structural mapping for one source/target pair.

        Args:
            source_type: Exact type of the source instances.
            target_type: Requested target type.
            converter: Callable receiving the source and returning the target.
        """
        self._converters[(source_type, target_type)] = converter

    def map[TTarget](self, source: Any, target_type: type[TTarget]) -> TTarget:
        """Convert ``source`` into an instance of ``target_type``.

        Raises:
            TypeError: If ``target_type`` is neither a pydantic model nor a
                dataclass and no converter is registered.
            pydantic.ValidationError: If a pydantic target rejects the source.
        """
        converter = self._converters.get((type(source), target_type))
        if converter is not None:
            return converter(source)  # type: ignore[no-any-return]

        if isinstance(target_type, type) and issubclass(target_type, BaseModel):
            if isinstance(source, Mapping):
                return target_type.model_validate(dict(source))  # type: ignore[return-value]
            return target_type.model_validate(source, from_attributes=True)  # type: ignore[return-value]

        if dataclasses.is_dataclass(target_type):
            return target_type(**self._collect(source, target_type))

        raise TypeError(f"No structural mapping to {target_type!r}.")

    def map_many[TTarget](
        self, sources: Iterable[Any], target_type: type[TTarget]
    ) -> list[TTarget]:
        """Convert every element of ``sources``, preserving order."""
        return [self.map(source, target_type) for source in sources]

    @staticmethod
    def _collect(source: Any, target_type: type[Any]) -> dict[str, Any]:
        """Gather constructor kwargs for a dataclass target."""
        values: dict[str, Any] = {}
        for f in dataclasses.fields(target_type):
            if not f.init:
                continue
            if isinstance(source, Mapping):
                if f.name in source:
                    values[f.name] = source[f.name]
            elif hasattr(source, f.name):
                values[f.name] = getattr(source, f.name)
        return values
