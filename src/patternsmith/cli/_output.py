"""Text and JSON output for CLI commands.

Commands build one result object and hand it to ``OutputFormatter.emit``
with the text rendering; the formatter decides which one is printed.
Errors always go to stderr.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Iterable, Optional

from patternsmith.core.diagnostics import Diagnostic
from patternsmith.core.exceptions import PatternsmithError


class OutputFormatter:
    """Print command results as text or, with ``--json``, as one JSON document."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def _dump(self, data: Any) -> str:
        return json.dumps(data, indent=self.indent, default=str)

    def emit(self, data: Any, text: Optional[str] = None) -> None:
        """Print ``data`` as JSON in json mode, otherwise ``text`` (when given)."""
        if self.json_mode:
            print(self._dump(data))
        elif text is not None:
            print(text)

    def text(self, message: str) -> None:
        if not self.json_mode:
            print(message)

    def diagnostics(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Print rendered diagnostics, one per line (text mode only)."""
        for diagnostic in diagnostics:
            self.text(diagnostic.render())

    def error(self, error: Exception, message: Optional[str] = None, *, error_code: str = "error") -> None:
        """Report a failure on stderr.

        In json mode a ``PatternsmithError`` contributes its own code and
        context; other exceptions are reported under ``error_code``.
        """
        msg = message or str(error)
        if not self.json_mode:
            print(f"Error: {msg}", file=sys.stderr)
            return
        if isinstance(error, PatternsmithError):
            payload = {**error.to_json_error(), "message": msg}
        else:
            payload = {"error": error_code, "message": msg}
        print(self._dump(payload), file=sys.stderr)


__all__ = ["OutputFormatter"]
