# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Generic resource API.

Exposes any registered entity type as a versioned HTTP resource with list,
get, create, update, JSON-Patch and delete operations, dispatched through an
in-process mediator onto a unit-of-work store.

Usage:
    from resource_api.main import create_app
"""
