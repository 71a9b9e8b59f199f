"""Shared utilities (merging, file I/O, identifier helpers)."""
from __future__ import annotations

from .io import atomic_write_text, read_yaml_file
from .merge import deep_merge, merge_lists
from .text import is_identifier, strip_interface_prefix, to_snake_case

__all__ = [
    "atomic_write_text",
    "read_yaml_file",
    "deep_merge",
    "merge_lists",
    "is_identifier",
    "strip_interface_prefix",
    "to_snake_case",
]
