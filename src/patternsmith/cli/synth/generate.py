"""
patternsmith synth generate command.

SUMMARY: Generate pattern code from contract documents

Runs every synthesis request in each document and writes the artifacts of
the requests that finished without errors. Exits non-zero when any
request reported an error.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from patternsmith.cli import (
    OutputFormatter,
    add_dry_run_flag,
    add_standard_flags,
    get_repo_root,
    setup_logging,
)
from patternsmith.cli.synth._common import register_documents_arg, run_documents
from patternsmith.core.engine import SynthesisEngine
from patternsmith.core.exceptions import PatternsmithError
from patternsmith.core.output import ArtifactWriter

SUMMARY = "Generate pattern code from contract documents"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    register_documents_arg(parser)
    parser.add_argument(
        "--out",
        type=str,
        help="Output directory (default: output.directory from config)",
    )
    add_dry_run_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Generate artifacts - delegates to SynthesisEngine and ArtifactWriter."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        setup_logging(args, repo_root)
        engine = SynthesisEngine(repo_root)
        out_dir = Path(args.out).resolve() if args.out else engine.output.directory
        writer = ArtifactWriter(out_dir, dry_run=args.dry_run)
        results = run_documents(args.documents, engine, writer)
    except PatternsmithError as e:
        formatter.error(e)
        return 1

    batches = [batch for batch, _ in results]
    failed = any(not batch.succeeded for batch in batches)
    written = sum(len(r.written) for batch in batches for r in batch.reports)
    verb = "Would write" if args.dry_run else "Wrote"
    summaries = [batch.summary() for batch in batches]
    formatter.emit(
        {
            "status": "error" if failed else "success",
            "dry_run": args.dry_run,
            "output": str(out_dir),
            "documents": [batch.to_dict() for batch in batches],
        },
        "\n".join(summaries + [f"{verb} {written} file(s) to {out_dir}"]),
    )
    return 1 if failed else 0
