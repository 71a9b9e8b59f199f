"""File I/O helpers: YAML reading and crash-safe text writes."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml


def read_yaml_file(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Read a YAML file.

    Returns ``default`` when the file is missing or unparsable, unless
    ``raise_on_error`` is set, in which case the error propagates.
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return data if data is not None else default


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write ``content`` to ``path`` through a temp file and ``os.replace``.

    The parent directory is created when missing. A partially written temp
    file is removed if anything fails.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding=encoding, dir=str(path.parent), delete=False, suffix=".tmp"
        ) as handle:
            tmp_path = Path(handle.name)
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(str(tmp_path), str(path))
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


__all__ = ["read_yaml_file", "atomic_write_text"]
