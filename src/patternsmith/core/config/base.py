"""Base class for section-specific configuration accessors."""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .manager import get_cached_config


class BaseDomainConfig(ABC):
    """Typed, cached access to one top-level configuration section.

    Usage:
        class OutputConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "output"

        OutputConfig(repo_root=Path("/path/to/project")).section["directory"]

    Args:
        repo_root: Repository whose configuration is loaded (cwd when None).
        config: An already-merged configuration mapping; skips loading.
    """

    def __init__(self, repo_root: Optional[Path] = None, *, config: Optional[Mapping[str, Any]] = None) -> None:
        self._repo_root = repo_root
        self._config = dict(config) if config is not None else get_cached_config(repo_root)

    @property
    def repo_root(self) -> Path:
        return Path(self._repo_root) if self._repo_root is not None else Path.cwd()

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level config key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        return self._config.get(self._config_section(), {}) or {}


__all__ = ["BaseDomainConfig"]
