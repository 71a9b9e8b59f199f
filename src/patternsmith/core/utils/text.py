"""Identifier and naming helpers used to derive generated type names."""
from __future__ import annotations

import keyword
import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def is_identifier(name: str) -> bool:
    """True when ``name`` can be used as a Python class or function name."""
    return bool(name) and name.isidentifier() and not keyword.iskeyword(name)


def strip_interface_prefix(name: str) -> str:
    """Drop a conventional ``I`` prefix (``IStorage`` -> ``Storage``).

    Names such as ``Index`` or a lone ``I`` are returned unchanged.
    """
    if len(name) > 1 and name[0] == "I" and name[1].isupper():
        return name[1:]
    return name


def to_snake_case(name: str) -> str:
    """Convert a CamelCase type name to a snake_case module name.

    >>> to_snake_case("OrderPipeline")
    'order_pipeline'
    >>> to_snake_case("HTTPClient")
    'http_client'
    """
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


__all__ = ["is_identifier", "strip_interface_prefix", "to_snake_case"]
