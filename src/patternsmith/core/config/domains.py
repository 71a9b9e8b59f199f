"""Section accessors for synthesis, output and logging configuration."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .base import BaseDomainConfig


class SynthesisConfig(BaseDomainConfig):
    """Accessor for the ``synthesis`` section.

    Usage:
        cfg = SynthesisConfig(repo_root=Path("/path/to/project"))
        cfg.handle_names      # ('Awaitable', 'Coroutine', ...)
        cfg.defaults["wrap_order"]
    """

    def _config_section(self) -> str:
        return "synthesis"

    @cached_property
    def handle_names(self) -> Tuple[str, ...]:
        return tuple(self.section.get("handles") or ())

    @cached_property
    def cancellation_types(self) -> Tuple[str, ...]:
        return tuple(self.section.get("cancellation_types") or ())

    @cached_property
    def defaults(self) -> Dict[str, Any]:
        return dict(self.section.get("defaults") or {})

    @cached_property
    def severity_overrides(self) -> Dict[str, str]:
        return {str(k): str(v) for k, v in (self.section.get("severity") or {}).items()}


class OutputConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "output"

    @cached_property
    def directory(self) -> Path:
        raw = Path(self.section.get("directory") or "generated")
        return raw if raw.is_absolute() else self.repo_root / raw

    @cached_property
    def header(self) -> str:
        return str(self.section.get("header") or "")


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level") or "WARNING").upper()

    @cached_property
    def file(self) -> Optional[Path]:
        raw = self.section.get("file")
        if not raw:
            return None
        path = Path(raw)
        return path if path.is_absolute() else self.repo_root / path


__all__ = ["SynthesisConfig", "OutputConfig", "LoggingConfig"]
