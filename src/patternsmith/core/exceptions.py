from __future__ import annotations

from typing import Any, Dict, Mapping


class PatternsmithError(Exception):
    """Base exception for patternsmith."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ContractLoadError(PatternsmithError, ValueError):
    """Raised when a contract document cannot be read or resolved."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PatternsmithError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class ConfigurationError(PatternsmithError, ValueError):
    """Raised when configuration files are malformed or fail schema validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PatternsmithError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class UnknownPatternError(PatternsmithError, KeyError):
    """Raised when no generator is registered for a pattern name."""

    def __init__(self, pattern: str, *, available: list[str] | None = None) -> None:
        known = ", ".join(sorted(available or []))
        message = f"Unknown pattern '{pattern}'" + (f" (available: {known})" if known else "")
        PatternsmithError.__init__(
            self, message, context={"pattern": pattern, "available": sorted(available or [])}
        )
        self.pattern = pattern

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return self.args[0] if self.args else ""


class ArtifactWriteError(PatternsmithError, OSError):
    """Raised when a generated artifact cannot be written to disk."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PatternsmithError.__init__(self, message, context=context)
        OSError.__init__(self, message)


__all__ = [
    "PatternsmithError",
    "ContractLoadError",
    "ConfigurationError",
    "UnknownPatternError",
    "ArtifactWriteError",
]
