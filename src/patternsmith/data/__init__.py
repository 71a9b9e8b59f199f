"""
Bundled data resources for patternsmith.

Configuration defaults and JSON schemas (expressed as YAML) ship inside the
package and are located with importlib.resources.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a bundled data file or directory.

    Args:
        subpackage: Name of the data subdirectory ("config" or "schemas")
        filename: Optional filename within the subdirectory

    Returns:
        Absolute path to the file or directory

    Example:
        >>> get_data_path("schemas", "contract.schema.yaml")
        PosixPath('/path/to/patternsmith/data/schemas/contract.schema.yaml')
    """
    pkg = resources.files("patternsmith.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=32)
def read_yaml(subpackage: str, filename: str) -> dict[str, Any]:
    """
    Read and parse a bundled YAML file (cached).

    Callers must not mutate the returned mapping.
    """
    path = get_data_path(subpackage, filename)
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def list_files(subpackage: str, pattern: str = "*.yaml") -> list[Path]:
    """List bundled files matching ``pattern``, sorted by name."""
    return sorted(get_data_path(subpackage).glob(pattern))


def clear_caches() -> None:
    """Clear read caches (used by tests)."""
    read_yaml.cache_clear()


__all__ = [
    "get_data_path",
    "read_yaml",
    "list_files",
    "clear_caches",
]
