"""Shared CLI utilities."""
from __future__ import annotations

import argparse
from pathlib import Path

from patternsmith.core.config.domains import LoggingConfig
from patternsmith.core.logging_setup import configure_logging, suppress_lastresort_in_json_mode


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get repository root from ``--repo-root`` or the current directory."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return Path.cwd().resolve()


def setup_logging(args: argparse.Namespace, repo_root: Path) -> None:
    """Configure logging from the ``logging`` config section and ``--verbose``.

    In ``--json`` mode without a log file nothing is routed to stderr.
    """
    cfg = LoggingConfig(repo_root)
    verbose = int(getattr(args, "verbose", 0) or 0)
    level = cfg.level
    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    if getattr(args, "json", False) and cfg.file is None:
        suppress_lastresort_in_json_mode()
        return
    configure_logging(level, cfg.file)


__all__ = ["get_repo_root", "setup_logging"]
