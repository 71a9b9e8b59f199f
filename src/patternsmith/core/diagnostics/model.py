"""Diagnostic records.

A diagnostic is data, never an exception: stages report them into a
``DiagnosticSink`` and the engine decides afterwards whether to emit.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Severity(str, Enum):
    """Diagnostic severity.

    ERROR aborts emission for the whole contract, WARNING drops the offending
    element, INFO is advisory.
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


class Category(str, Enum):
    STRUCTURAL = "structural"
    CONFIGURATION = "configuration"
    SURFACE = "surface"
    BINDING = "binding"
    COMPOSITION = "composition"


@dataclass(frozen=True)
class SourceAnchor:
    """Where a diagnostic points: a document path and a symbol path inside it."""

    path: str = ""
    symbol: str = ""
    line: Optional[int] = None

    def render(self) -> str:
        location = self.path
        if self.line is not None:
            location = f"{location}:{self.line}"
        if self.symbol:
            return f"{location}: {self.symbol}" if location else self.symbol
        return location

    def child(self, symbol: str) -> "SourceAnchor":
        qualified = f"{self.symbol}.{symbol}" if self.symbol else symbol
        return SourceAnchor(path=self.path, symbol=qualified, line=self.line)


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Static description of one validation rule."""

    id: str
    kind: str
    category: Category
    severity: Severity
    template: str
    title: str = ""


@dataclass(frozen=True)
class Diagnostic:
    descriptor: DiagnosticDescriptor
    severity: Severity
    args: Tuple[str, ...] = ()
    anchor: Optional[SourceAnchor] = None

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def kind(self) -> str:
        return self.descriptor.kind

    @property
    def message(self) -> str:
        return self.descriptor.template.format(*self.args)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def sort_key(self) -> Tuple[int, str, str, str]:
        symbol = self.anchor.symbol if self.anchor else ""
        return (self.severity.rank, self.id, symbol, self.message)

    def render(self) -> str:
        where = self.anchor.render() if self.anchor else ""
        prefix = f"{where}: " if where else ""
        return f"{prefix}{self.severity.value} {self.id}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "category": self.descriptor.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "args": list(self.args),
            "anchor": {
                "path": self.anchor.path,
                "symbol": self.anchor.symbol,
                "line": self.anchor.line,
            } if self.anchor else None,
        }


__all__ = ["Severity", "Category", "SourceAnchor", "DiagnosticDescriptor", "Diagnostic"]
