"""
patternsmith command line.

Domains (``synth``, ``config``, ``diagnostics``) are subpackages discovered
by ``_dispatcher``; the helpers below are shared by their commands.
"""
from ._output import OutputFormatter
from ._args import (
    add_json_flag,
    add_repo_root_flag,
    add_dry_run_flag,
    add_verbose_flag,
    add_standard_flags,
)
from ._utils import get_repo_root, setup_logging

__all__ = [
    "OutputFormatter",
    "add_json_flag",
    "add_repo_root_flag",
    "add_dry_run_flag",
    "add_verbose_flag",
    "add_standard_flags",
    "get_repo_root",
    "setup_logging",
]
