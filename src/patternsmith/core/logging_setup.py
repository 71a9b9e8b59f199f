"""Stdlib logging configuration for the patternsmith CLI."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_INSTALLED_HANDLER: Optional[logging.Handler] = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: str = "WARNING", log_path: Optional[Path] = None) -> logging.Handler:
    """Route ``patternsmith`` loggers to ``log_path`` (or stderr) at ``level``.

    Idempotent: a previously installed handler is replaced, never duplicated.
    """
    global _INSTALLED_HANDLER

    logger = logging.getLogger("patternsmith")
    logger.setLevel(_level_from_name(level))
    if _INSTALLED_HANDLER is not None:
        logger.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()

    if log_path is not None:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    _INSTALLED_HANDLER = handler
    return handler


def suppress_lastresort_in_json_mode() -> None:
    """Keep stdlib's implicit stderr handler out of ``--json`` output.

    Installs a NullHandler on the root logger when it has none.
    """
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(logging.NullHandler())


def reset_logging_for_tests() -> None:
    global _INSTALLED_HANDLER
    if _INSTALLED_HANDLER is not None:
        logging.getLogger("patternsmith").removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()
        _INSTALLED_HANDLER = None


__all__ = ["configure_logging", "suppress_lastresort_in_json_mode", "reset_logging_for_tests"]
