# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Base Entity (Domain Layer).

Purpose:
    Structural contract shared by every resource record, plus a frozen
    dataclass mixin for plain domain entities. ORM-mapped classes satisfy the
    same contract structurally and do not need to inherit from the mixin.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable
from uuid import UUID, uuid4


@runtime_checkable
class Entity(Protocol):
    """Anything exposing a stable, unique identifier."""

    id: UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class BaseEntity:
    """Base mixin for domain entities.

    Attributes:
        id:
            Opaque 128-bit identifier. A fresh UUID4 is generated when the
            caller does not provide one.
    """

    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:  # noqa: D401
        """Hook for subclasses to extend with invariant checks."""
        return
