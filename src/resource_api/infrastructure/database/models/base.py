# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Declarative Base and persistence mixins.

This module defines:
    - A project-wide SQLAlchemy Declarative Base with deterministic naming
      conventions.
    - An identity mixin providing the UUID primary key every resource table
      shares with its domain entity.

Resource tables declare one mapped column per entity attribute so rows and
entities convert into each other by attribute name.
"""

from __future__ import annotations

import uuid

from sqlalchemy import MetaData, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

__all__ = ["metadata", "Base", "IdentityMixin"]

#: Deterministic naming conventions for stable schema diffs.
NAMING_CONVENTIONS: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTIONS)


class Base(DeclarativeBase):
    """Declarative Base for all ORM models."""

    metadata = metadata


class IdentityMixin:
    """Mixin providing a UUIDv4 primary key ``id`` column.

    ``sqlalchemy.Uuid`` maps to the native UUID type where the dialect has
    one and to ``CHAR(32)`` elsewhere (e.g. SQLite).
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
