"""Dictionary merging for layered configuration.

Layers are merged lowest priority first. Nested mappings merge key by key;
lists are replaced unless the override list starts with ``"+"``, in which
case its remaining items are appended to the base list.
"""
from __future__ import annotations

from typing import Any, Dict, List


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` onto ``base`` without mutating either.

    Example:
        >>> deep_merge({"synthesis": {"defaults": {"async_mode": "auto"}}},
        ...            {"synthesis": {"defaults": {"missing_map": "stub"}}})
        {'synthesis': {'defaults': {'async_mode': 'auto', 'missing_map': 'stub'}}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            result[key] = merge_lists(current, value)
        else:
            result[key] = value
    return result


def merge_lists(base: List[Any], override: List[Any]) -> List[Any]:
    """Merge two lists: replace by default, append when prefixed with ``"+"``.

    >>> merge_lists(["Awaitable"], ["+", "Deferred"])
    ['Awaitable', 'Deferred']
    >>> merge_lists(["Awaitable"], ["Deferred"])
    ['Deferred']
    """
    if override and override[0] == "+":
        return [*base, *(item for item in override[1:] if item not in base)]
    return list(override)


__all__ = ["deep_merge", "merge_lists"]
