"""Shared helpers for synth commands."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Tuple

from patternsmith.core.engine import SynthesisEngine, SynthesisOutcome
from patternsmith.core.loader import load_document
from patternsmith.core.output import ArtifactWriter
from patternsmith.core.report import BatchSynthesisReport, SynthesisReport


def register_documents_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "documents",
        nargs="+",
        help="Contract documents (YAML) to synthesize",
    )


def run_documents(
    paths: List[str],
    engine: SynthesisEngine,
    writer: Optional[ArtifactWriter] = None,
) -> List[Tuple[BatchSynthesisReport, List[SynthesisOutcome]]]:
    """Load each document, run its requests and write successful artifacts.

    Requests are independent: a failing request never prevents another
    request's artifacts from being written.
    """
    results = []
    for raw_path in paths:
        document = load_document(Path(raw_path))
        batch = BatchSynthesisReport(source=document.source)
        outcomes = engine.synthesize_all(document.requests)
        for outcome in outcomes:
            report = SynthesisReport.from_outcome(outcome)
            if writer is not None and outcome.succeeded:
                report.written = writer.write_all(outcome.artifacts)
            batch.add_report(report)
        results.append((batch, outcomes))
    return results


__all__ = ["register_documents_arg", "run_documents"]
