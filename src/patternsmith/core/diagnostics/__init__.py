"""Diagnostics: severities, descriptors, the catalog and the accumulating sink."""
from __future__ import annotations

from . import catalog
from .model import Category, Diagnostic, DiagnosticDescriptor, Severity, SourceAnchor
from .sink import DiagnosticSink

__all__ = [
    "catalog",
    "Category",
    "Diagnostic",
    "DiagnosticDescriptor",
    "DiagnosticSink",
    "Severity",
    "SourceAnchor",
]
