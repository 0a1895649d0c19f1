# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Controller outcomes.

Summary:
    Typed results of the resource controller's operations. ``NotFound`` is an
    expected outcome, not an error; presenters decide how each outcome is
    rendered on the wire.

Layer:
    adapters/controllers
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Listed[TDto]:
    """Result of a list operation (possibly empty)."""

    items: Sequence[TDto]


@dataclass(frozen=True, slots=True)
class Found[TDto]:
    """The requested record exists."""

    value: TDto


@dataclass(frozen=True, slots=True)
class NotFound:
    """No record exists for ``id``."""

    id: UUID


@dataclass(frozen=True, slots=True)
class Created[TDto]:
    """A new record was created and persisted.

    Attributes:
        value: Output representation of the new record.
        id: Identifier of the new record, for building a location reference.
    """

    value: TDto
    id: UUID


@dataclass(frozen=True, slots=True)
class Updated[TDto]:
    """An existing record was updated (fully or partially) and persisted."""

    value: TDto


@dataclass(frozen=True, slots=True)
class Deleted:
    """An existing record was deleted and the removal persisted."""

    id: UUID


type GetOutcome[TDto] = Found[TDto] | NotFound
type UpdateOutcome[TDto] = Updated[TDto] | NotFound
type DeleteOutcome = Deleted | NotFound
