# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Patch Domain Exceptions.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from resource_api.domain.exceptions.base import DomainError


class PatchApplicationError(DomainError):
    """A patch document could not be applied to its target payload.

    Typical causes:
        * Unsupported ``op`` value
        * Path naming an unknown field or a missing container element
        * Failed ``test`` operation
        * Resulting value incompatible with the payload's field types

    The ``details`` mapping carries ``index`` (position of the failing
    operation) and, for type mismatches, the validation ``errors``.
    """

    code = "PATCH_APPLICATION_ERROR"
