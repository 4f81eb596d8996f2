# ledger_client/casing.py
# -*- coding: utf-8 -*-
"""
Key-casing conversion between the local (camelCase) and wire (snake_case) forms.

Both directions return a fresh structure; inputs are never mutated.
Children of user-owned maps (tags, reference data, cursors) pass through
untouched, only the key pointing at them is re-cased.
"""

from __future__ import annotations

import re
from typing import Any, FrozenSet, Mapping

# Compared in snake_case form in both directions.
EXCLUDED_KEYS: FrozenSet[str] = frozenset(
    {
        "after",
        "next",
        "tags",
        "action_tags",
        "token_tags",
        "transaction_tags",
        "account_tags",
        "asset_tags",
        "flavor_tags",
        "reference_data",
    }
)

_ALL_CAPS = re.compile(r"^(?=.*[A-Z])[A-Z0-9_]+$")
_UPPER = re.compile(r"([A-Z])")
_UNDERSCORE_LOWER = re.compile(r"_([a-z])")


def is_constant_key(key: str) -> bool:
    return bool(_ALL_CAPS.match(key))


def snake_key(key: str) -> str:
    if is_constant_key(key):
        return key
    return _UPPER.sub(lambda m: "_" + m.group(1).lower(), key)


def camel_key(key: str) -> str:
    if is_constant_key(key):
        return key
    return _UNDERSCORE_LOWER.sub(lambda m: m.group(1).upper(), key)


def _convert(obj: Any, rename, excluded: FrozenSet[str]) -> Any:
    if isinstance(obj, Mapping):
        out = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                out[key] = _convert(value, rename, excluded)
                continue
            new_key = rename(key)
            if snake_key(key) in excluded:
                out[new_key] = value
            else:
                out[new_key] = _convert(value, rename, excluded)
        return out
    if isinstance(obj, (list, tuple)):
        return [_convert(v, rename, excluded) for v in obj]
    return obj


def snakeize(obj: Any, *, excluded: FrozenSet[str] = EXCLUDED_KEYS) -> Any:
    """camelCase -> snake_case, recursively."""
    return _convert(obj, snake_key, excluded)


def camelize(obj: Any, *, excluded: FrozenSet[str] = EXCLUDED_KEYS) -> Any:
    """snake_case -> camelCase, recursively."""
    return _convert(obj, camel_key, excluded)


__all__ = [
    "EXCLUDED_KEYS",
    "snakeize",
    "camelize",
    "snake_key",
    "camel_key",
    "is_constant_key",
]
