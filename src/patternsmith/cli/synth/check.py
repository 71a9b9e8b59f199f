"""
patternsmith synth check command.

SUMMARY: Validate contract documents without writing files

Runs every synthesis request and prints its diagnostics. Exits non-zero
when any request reported an error.
"""

from __future__ import annotations

import argparse

from patternsmith.cli import OutputFormatter, add_standard_flags, get_repo_root, setup_logging
from patternsmith.cli.synth._common import register_documents_arg, run_documents
from patternsmith.core.diagnostics import Severity
from patternsmith.core.engine import SynthesisEngine
from patternsmith.core.exceptions import PatternsmithError

SUMMARY = "Validate contract documents without writing files"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    register_documents_arg(parser)
    parser.add_argument(
        "--show-info",
        action="store_true",
        help="Also list informational diagnostics",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Check documents - runs synthesis but writes nothing."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        setup_logging(args, repo_root)
        results = run_documents(args.documents, SynthesisEngine(repo_root))
    except PatternsmithError as e:
        formatter.error(e)
        return 1

    diagnostics = [
        d
        for _, outcomes in results
        for outcome in outcomes
        for d in outcome.diagnostics
        if args.show_info or d.severity is not Severity.INFO
    ]
    errors = sum(1 for d in diagnostics if d.is_error)
    requests = sum(len(outcomes) for _, outcomes in results)
    formatter.diagnostics(diagnostics)
    formatter.emit(
        {
            "status": "error" if errors else "success",
            "errors": errors,
            "diagnostics": [d.to_dict() for d in diagnostics],
        },
        f"Checked {requests} request(s): {errors} error(s), {len(diagnostics) - errors} other diagnostic(s)",
    )
    return 1 if errors else 0
