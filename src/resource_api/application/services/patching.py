# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Patch application.

Purpose:
    Apply a patch document to a pydantic payload instance, producing a new
    instance whose ``model_fields_set`` holds exactly the fields the caller
    touched (plus whatever was already set on the input). The controller
    calls this on a fresh, empty payload, so the result is a sparse payload
    that handlers can merge with ``model_dump(exclude_unset=True)``.

Semantics:
    * Paths are JSON pointers. The leading ``/`` is optional and the first
      segment is matched case-insensitively against field names and aliases.
      Deeper segments walk dicts and lists (``-`` appends to a list).
    * ``add`` (alias ``set``) and ``replace`` on a top-level field assign it.
    * ``remove`` on a top-level field resets it to its declared default and
      still counts as touched; required fields cannot be removed.
    * ``copy``/``move`` read ``from`` and write ``path``; ``test`` compares
      against the JSON form of the value (UUIDs, dates and enums as strings).
    * Operations run in order against a working document; the document is
      validated once at the end.

    Any failure (unknown op, unknown field, bad pointer, failed test, type
    mismatch) raises :class:`PatchApplicationError` and leaves ``target``
    untouched.

Layer:
    application/services
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticUndefined, to_jsonable_python

from resource_api.application.schemas.dto.patch import PatchDocument, PatchOperation
from resource_api.domain.exceptions.patch import PatchApplicationError

SUPPORTED_OPERATIONS: frozenset[str] = frozenset(
    {"add", "set", "remove", "replace", "copy", "move", "test"}
)


def apply_patch[TPayload: BaseModel](document: PatchDocument, target: TPayload) -> TPayload:
    """Apply ``document`` to ``target`` and return the patched copy.

    Args:
        document: Ordered patch operations.
        target: Payload instance; not mutated.

    Returns:
        A new instance of ``type(target)``.

    Raises:
        PatchApplicationError: If any operation fails or the patched
            document does not validate against the payload model.
    """
    working = _WorkingDocument(target)

    for index, operation in enumerate(document):
        try:
            working.apply(operation)
        except PatchApplicationError as exc:
            exc.details.setdefault("index", index)
            raise
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise PatchApplicationError(
                f"Cannot apply '{operation.op}' at '{operation.path}': {_reason(exc)}",
                details={"index": index, "op": operation.op, "path": operation.path},
            ) from exc

    try:
        return type(target).model_validate(working.state)
    except ValidationError as exc:
        raise PatchApplicationError(
            "Patched payload failed validation",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc


def _reason(exc: Exception) -> str:
    """Return a readable message for container errors."""
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


def _parse_pointer(path: str) -> list[str]:
    """Split a JSON pointer into unescaped tokens."""
    raw = path[1:] if path.startswith("/") else path
    if not raw:
        raise PatchApplicationError(
            "Patch path must name a field", details={"path": path}
        )
    return [token.replace("~1", "/").replace("~0", "~") for token in raw.split("/")]


def _list_index(container: list[Any], token: str, *, allow_end: bool) -> int:
    """Resolve a list token to an index."""
    if allow_end and token == "-":
        return len(container)
    if not token.isdigit():
        raise IndexError("Invalid list index")
    idx = int(token)
    upper = len(container) if allow_end else len(container) - 1
    if idx > upper:
        raise IndexError("List index out of range")
    return idx


def _get_value(node: Any, tokens: list[str]) -> Any:
    current = node
    for token in tokens:
        if isinstance(current, dict):
            if token not in current:
                raise KeyError("Missing object key")
            current = current[token]
        elif isinstance(current, list):
            current = current[_list_index(current, token, allow_end=False)]
        else:
            raise TypeError("Cannot traverse into non-container")
    return current


def _nested_add(node: Any, tokens: list[str], value: Any) -> None:
    container = _get_value(node, tokens[:-1])
    token = tokens[-1]
    if isinstance(container, dict):
        container[token] = value
    elif isinstance(container, list):
        container.insert(_list_index(container, token, allow_end=True), value)
    else:
        raise TypeError("Cannot add into non-container")


def _nested_remove(node: Any, tokens: list[str]) -> Any:
    container = _get_value(node, tokens[:-1])
    token = tokens[-1]
    if isinstance(container, dict):
        if token not in container:
            raise KeyError("Missing object key")
        return container.pop(token)
    if isinstance(container, list):
        return container.pop(_list_index(container, token, allow_end=False))
    raise TypeError("Cannot remove from non-container")


def _nested_replace(node: Any, tokens: list[str], value: Any) -> None:
    container = _get_value(node, tokens[:-1])
    token = tokens[-1]
    if isinstance(container, dict):
        if token not in container:
            raise KeyError("Missing object key")
        container[token] = value
    elif isinstance(container, list):
        container[_list_index(container, token, allow_end=False)] = value
    else:
        raise TypeError("Cannot replace in non-container")


class _WorkingDocument:
    """Mutable dict view of a payload, keyed by field alias.

    Values are held in JSON form so ``test`` compares like with like.
    """

    def __init__(self, target: BaseModel) -> None:
        self._model_type = type(target)
        self._snapshot = target.model_dump(mode="json", by_alias=True)
        self.state: dict[str, Any] = target.model_dump(
            mode="json", by_alias=True, exclude_unset=True
        )
        self._dispatch: dict[str, Callable[[PatchOperation], None]] = {
            "add": self._add,
            "set": self._add,
            "remove": self._remove,
            "replace": self._replace,
            "copy": self._copy,
            "move": self._move,
            "test": self._test,
        }

    def apply(self, operation: PatchOperation) -> None:
        handler = self._dispatch.get(operation.op.lower())
        if handler is None:
            raise PatchApplicationError(
                f"Unsupported patch operation '{operation.op}'",
                details={"op": operation.op, "supported": sorted(SUPPORTED_OPERATIONS)},
            )
        handler(operation)

    # ------------------------------------------------------------------
    # Field resolution
    # ------------------------------------------------------------------

    def _resolve(self, path: str) -> tuple[str, str, list[str]]:
        """Return ``(field_name, key, rest)`` for ``path``."""
        head, *rest = _parse_pointer(path)
        lowered = head.lower()
        for name, info in self._model_type.model_fields.items():
            key = info.alias or name
            if lowered in (name.lower(), key.lower()):
                return name, key, rest
        raise PatchApplicationError(
            f"Unknown field '{head}'", details={"path": path}
        )

    def _current(self, key: str) -> Any:
        if key in self.state:
            return self.state[key]
        return self._snapshot.get(key)

    def _seed(self, key: str) -> Any:
        """Copy the current value of ``key`` into the working state."""
        if key not in self.state:
            self.state[key] = copy.deepcopy(self._snapshot.get(key))
        return self.state[key]

    def _read(self, path: str) -> Any:
        _, key, rest = self._resolve(path)
        return _get_value(self._current(key), rest)

    def _write(self, path: str, value: Any) -> None:
        _, key, rest = self._resolve(path)
        if not rest:
            self.state[key] = value
            return
        _nested_add(self._seed(key), rest, value)

    def _delete(self, path: str) -> Any:
        name, key, rest = self._resolve(path)
        if rest:
            return _nested_remove(self._seed(key), rest)
        previous = self._current(key)
        default = self._model_type.model_fields[name].get_default(call_default_factory=True)
        if default is PydanticUndefined:
            raise PatchApplicationError(
                f"Cannot remove required field '{name}'", details={"path": path}
            )
        self.state[key] = to_jsonable_python(default)
        return previous

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @staticmethod
    def _require_value(operation: PatchOperation) -> Any:
        if not operation.has_value:
            raise PatchApplicationError(
                f"Operation '{operation.op}' requires a value",
                details={"path": operation.path},
            )
        return copy.deepcopy(operation.value)

    @staticmethod
    def _require_from(operation: PatchOperation) -> str:
        if not operation.from_:
            raise PatchApplicationError(
                f"Operation '{operation.op}' requires 'from'",
                details={"path": operation.path},
            )
        return operation.from_

    def _add(self, operation: PatchOperation) -> None:
        self._write(operation.path, self._require_value(operation))

    def _remove(self, operation: PatchOperation) -> None:
        self._delete(operation.path)

    def _replace(self, operation: PatchOperation) -> None:
        value = self._require_value(operation)
        _, key, rest = self._resolve(operation.path)
        if not rest:
            self.state[key] = value
            return
        _nested_replace(self._seed(key), rest, value)

    def _copy(self, operation: PatchOperation) -> None:
        value = copy.deepcopy(self._read(self._require_from(operation)))
        self._write(operation.path, value)

    def _move(self, operation: PatchOperation) -> None:
        source = self._require_from(operation)
        _, source_key, source_rest = self._resolve(source)
        _, target_key, target_rest = self._resolve(operation.path)
        source_tokens = [source_key, *source_rest]
        target_tokens = [target_key, *target_rest]
        if len(target_tokens) > len(source_tokens) and (
            target_tokens[: len(source_tokens)] == source_tokens
        ):
            raise PatchApplicationError(
                "Cannot move a value into one of its children",
                details={"from": source, "path": operation.path},
            )
        value = self._delete(source)
        self._write(operation.path, value)

    def _test(self, operation: PatchOperation) -> None:
        expected = self._require_value(operation)
        actual = self._read(operation.path)
        if actual != expected:
            raise PatchApplicationError(
                f"Test failed at '{operation.path}'",
                details={"path": operation.path, "expected": expected, "actual": actual},
            )
