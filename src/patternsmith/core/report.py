"""Synthesis reporting dataclasses.

Provides structured reports for synthesis runs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from patternsmith.core.diagnostics import Diagnostic, Severity
from patternsmith.core.engine import SynthesisOutcome


@dataclass
class SynthesisReport:
    """Report from synthesizing one pattern for one contract."""

    contract: str
    pattern: str
    timestamp: datetime = field(default_factory=datetime.now)
    artifacts: List[str] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: SynthesisOutcome) -> "SynthesisReport":
        return cls(
            contract=outcome.request.contract.qualified_name,
            pattern=outcome.request.pattern,
            artifacts=[artifact.name for artifact in outcome.artifacts],
            diagnostics=list(outcome.diagnostics),
        )

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def has_issues(self) -> bool:
        """Check if there are any warnings or errors."""
        return bool(self.errors or self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary for serialization."""
        return {
            "contract": self.contract,
            "pattern": self.pattern,
            "timestamp": self.timestamp.isoformat(),
            "artifacts": self.artifacts,
            "written": [str(p) for p in self.written],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [f"Synthesis Report: {self.pattern}/{self.contract}"]
        if self.artifacts:
            lines.append(f"  Artifacts: {', '.join(self.artifacts)}")
        else:
            lines.append("  Artifacts: none")
        if self.errors:
            lines.append(f"  Errors: {len(self.errors)}")
        if self.warnings:
            lines.append(f"  Warnings: {len(self.warnings)}")
        for diagnostic in self.diagnostics:
            lines.append(f"    - {diagnostic.render()}")
        return "\n".join(lines)


@dataclass
class BatchSynthesisReport:
    """Report from running every request of a contract document."""

    source: str
    timestamp: datetime = field(default_factory=datetime.now)
    reports: List[SynthesisReport] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.reports)

    @property
    def success_count(self) -> int:
        """Requests synthesized without errors."""
        return sum(1 for r in self.reports if not r.errors)

    @property
    def warning_count(self) -> int:
        return sum(1 for r in self.reports if r.warnings)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.reports if r.errors)

    @property
    def succeeded(self) -> bool:
        return self.error_count == 0

    def add_report(self, report: SynthesisReport) -> None:
        self.reports.append(report)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
            "total": self.total_count,
            "succeeded": self.success_count,
            "errors": self.error_count,
            "warnings": self.warning_count,
            "reports": [r.to_dict() for r in self.reports],
        }

    def summary(self) -> str:
        """Generate batch summary."""
        lines = [
            f"Batch Synthesis Report: {self.source}",
            f"  Total: {self.total_count}",
            f"  Success: {self.success_count}",
            f"  Warnings: {self.warning_count}",
            f"  Errors: {self.error_count}",
        ]
        issues = [r for r in self.reports if r.has_issues]
        if issues:
            lines.append("  Issues:")
            for r in issues:
                status = "ERROR" if r.errors else "WARN"
                lines.append(f"    [{status}] {r.pattern}/{r.contract}")
                for diagnostic in r.diagnostics:
                    if diagnostic.severity is not Severity.INFO:
                        lines.append(f"      {diagnostic.render()}")
        return "\n".join(lines)


__all__ = ["SynthesisReport", "BatchSynthesisReport"]
