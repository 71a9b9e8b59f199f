"""
patternsmith diagnostics list command.

SUMMARY: List every diagnostic the synthesizer can report
"""

from __future__ import annotations

import argparse

from patternsmith.cli import OutputFormatter, add_json_flag
from patternsmith.core.diagnostics import catalog

SUMMARY = "List every diagnostic the synthesizer can report"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--category",
        help="Only list diagnostics in this category (e.g. 'composition')",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    descriptors = [
        d
        for _, d in sorted(catalog.ALL_DESCRIPTORS.items())
        if not args.category or d.category.value == args.category.lower()
    ]
    formatter.emit(
        [
            {
                "id": d.id,
                "kind": d.kind,
                "category": d.category.value,
                "severity": d.severity.value,
                "message": d.template,
            }
            for d in descriptors
        ],
        "\n".join(f"{d.id}  {d.severity.value:<7}  {d.kind:<32}  {d.template}" for d in descriptors),
    )
    return 0
