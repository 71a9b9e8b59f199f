"""Accumulating diagnostic sink.

One sink is created per synthesis request. Stages report into it and keep
going; the engine checks ``has_errors`` between phases.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Tuple

from .model import Diagnostic, DiagnosticDescriptor, Severity, SourceAnchor

logger = logging.getLogger(__name__)


class DiagnosticSink:
    """Collect diagnostics, applying per-id severity overrides on report.

    Args:
        severity_overrides: Mapping of diagnostic id to the severity it should
            be reported with (for example downgrading an ambiguity error to
            ``info``).
    """

    def __init__(self, severity_overrides: Optional[Mapping[str, Severity]] = None) -> None:
        self._overrides = dict(severity_overrides or {})
        self._items: List[Diagnostic] = []

    def report(
        self,
        descriptor: DiagnosticDescriptor,
        anchor: Optional[SourceAnchor],
        *args: object,
    ) -> Diagnostic:
        severity = self._overrides.get(descriptor.id, descriptor.severity)
        diagnostic = Diagnostic(
            descriptor=descriptor,
            severity=severity,
            args=tuple(str(arg) for arg in args),
            anchor=anchor,
        )
        self._items.append(diagnostic)
        logger.debug("diagnostic %s", diagnostic.render())
        return diagnostic

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        self._items.extend(diagnostics)

    def mark(self) -> int:
        """Return a position that ``errors_since`` can be checked against."""
        return len(self._items)

    def errors_since(self, mark: int) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self._items[mark:] if d.is_error)

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._items)

    @property
    def errors(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self._items if d.severity is Severity.ERROR)

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self._items if d.severity is Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._items)

    def sorted(self) -> Tuple[Diagnostic, ...]:
        """Diagnostics in a total order independent of report order."""
        return tuple(sorted(self._items, key=Diagnostic.sort_key))

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["DiagnosticSink"]
