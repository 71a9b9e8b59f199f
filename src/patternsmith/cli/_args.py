"""Flags shared by patternsmith commands."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Print one JSON document instead of text")


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo-root",
        metavar="DIR",
        help="Project directory whose .patternsmith/config layer applies (default: current directory)",
    )


def add_dry_run_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dry-run", action="store_true", help="Synthesize but do not write any file")


def add_verbose_flag(parser: argparse.ArgumentParser) -> None:
    """``-v`` logs at INFO, ``-vv`` at DEBUG."""
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Increase log verbosity")


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """--json, --repo-root and --verbose."""
    for add in (add_json_flag, add_repo_root_flag, add_verbose_flag):
        add(parser)


__all__ = [
    "add_json_flag",
    "add_repo_root_flag",
    "add_dry_run_flag",
    "add_verbose_flag",
    "add_standard_flags",
]
