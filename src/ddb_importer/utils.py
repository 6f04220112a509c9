"""
Helpers for working with nested Foundry document dicts.
"""

from __future__ import annotations

import copy
import re
from typing import Any

from shortuuid import random

_ID_CLEAN_RE = re.compile(r"[^A-Za-z0-9]")
ID_LENGTH = 16


def random_id(length: int = ID_LENGTH) -> str:
    """Generate a Foundry-style random document id."""
    return random(length=length)


def named_id_stub(name: str, postfix: str | int | None = None, length: int = ID_LENGTH) -> str:
    """Build a stable document id from a display name.

    Non alphanumeric characters are dropped, the result is padded with zeros
    and cut to ``length`` so the same name always gives the same id.

    Example:
        >>> named_id_stub("Fire Bolt")
        'ddbFireBolt00000'
    """
    stub = "ddb" + _ID_CLEAN_RE.sub("", name)
    if postfix is not None:
        stub += str(postfix)
    return stub[:length].ljust(length, "0")


def get_property(obj: dict, path: str, default: Any = None) -> Any:
    """Read a dotted path from nested dicts."""
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def set_property(obj: dict, path: str, value: Any) -> None:
    """Set a dotted path on nested dicts, creating intermediate dicts."""
    parts = path.split(".")
    current = obj
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def expand_object(data: dict) -> dict:
    """Expand dotted keys into nested dicts.

    Example:
        >>> expand_object({"a.b": 1, "c": {"d.e": 2}})
        {'a': {'b': 1}, 'c': {'d': {'e': 2}}}
    """
    expanded: dict = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = expand_object(value)
        if "." in key:
            existing = get_property(expanded, key)
            if isinstance(existing, dict) and isinstance(value, dict):
                merge_object(existing, value)
            else:
                set_property(expanded, key, value)
        elif isinstance(expanded.get(key), dict) and isinstance(value, dict):
            merge_object(expanded[key], value)
        else:
            expanded[key] = value
    return expanded


def merge_object(original: dict, other: dict) -> dict:
    """Deep-merge ``other`` into ``original`` in place and return it.

    Dotted keys in ``other`` are expanded first. Nested dicts merge key by
    key; every other value (lists included) replaces the original.
    """
    for key, value in expand_object(other).items():
        if isinstance(value, dict) and isinstance(original.get(key), dict):
            merge_object(original[key], value)
        else:
            original[key] = copy.deepcopy(value)
    return original
