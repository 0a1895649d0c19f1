# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Unit of Work implementations (Adapters Layer)

Purpose:
    Provide concrete UnitOfWork implementations. Application-layer code must
    depend only on the `UnitOfWork` protocol from
    `resource_api.application.uow`.

Exports:
    - InMemoryUnitOfWork: process-local store with per-request staging.
    - SqlAlchemyUnitOfWork: task-scoped AsyncSession-backed store.
"""

from __future__ import annotations

from .in_memory_uow import InMemoryUnitOfWork
from .sqlalchemy_uow import SqlAlchemyUnitOfWork

__all__ = ["InMemoryUnitOfWork", "SqlAlchemyUnitOfWork"]
