"""Synthesis engine: options, generator dispatch and diagnostics per request."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from patternsmith.core.composition.planner import DEFAULT_CANCELLATION_TYPES
from patternsmith.core.config.domains import OutputConfig, SynthesisConfig
from patternsmith.core.config.options import parse_options
from patternsmith.core.diagnostics import Diagnostic, DiagnosticSink, Severity, catalog
from patternsmith.core.generators import (
    Artifact,
    GenerationContext,
    SynthesisRequest,
    available_patterns,
    find_generator,
)
from patternsmith.core.surface.handles import DEFAULT_HANDLE_NAMES, CompletionHandles
from patternsmith.core.utils.merge import deep_merge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisOutcome:
    """Artifacts and sorted diagnostics for one request.

    ``artifacts`` is empty whenever any diagnostic is an error.
    """

    request: SynthesisRequest
    artifacts: Tuple[Artifact, ...]
    diagnostics: Tuple[Diagnostic, ...]

    @property
    def succeeded(self) -> bool:
        return not any(d.is_error for d in self.diagnostics)

    @property
    def errors(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.ERROR)

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.WARNING)


class SynthesisEngine:
    """Run synthesis requests against the merged configuration.

    Args:
        repo_root: Project whose ``.patternsmith/config`` layer applies.
        config: Already-merged configuration; skips loading when given.

    Example:
        >>> engine = SynthesisEngine(config=get_cached_config())
        >>> outcome = engine.synthesize(SynthesisRequest("decorator", contract))
        >>> outcome.succeeded
        True
    """

    def __init__(self, repo_root: Optional[Path] = None, *, config: Optional[Mapping[str, Any]] = None) -> None:
        self.synthesis = SynthesisConfig(repo_root, config=config)
        self.output = OutputConfig(repo_root, config=config)
        self.handles = CompletionHandles(self.synthesis.handle_names or DEFAULT_HANDLE_NAMES)
        self.cancellation_types = self.synthesis.cancellation_types or DEFAULT_CANCELLATION_TYPES

    def raw_options(self, request: SynthesisRequest) -> Dict[str, Any]:
        """Configured defaults, then configured severities, then the request's own options."""
        merged = deep_merge(self.synthesis.defaults, {"severity": self.synthesis.severity_overrides})
        return deep_merge(merged, dict(request.options or {}))

    def synthesize(self, request: SynthesisRequest) -> SynthesisOutcome:
        anchor = request.anchor or request.contract.anchor
        scratch = DiagnosticSink()
        options = parse_options(self.raw_options(request), scratch, anchor)
        sink = DiagnosticSink(options.severity_overrides)
        for diagnostic in scratch.diagnostics:
            sink.report(diagnostic.descriptor, diagnostic.anchor, *diagnostic.args)
        if sink.has_errors:
            logger.info("%s for %s: invalid options", request.pattern, request.contract.qualified_name)
            return SynthesisOutcome(request, (), sink.sorted())

        generator_class = find_generator(request.pattern)
        if generator_class is None:
            sink.report(catalog.UNKNOWN_PATTERN, anchor, request.pattern, ", ".join(available_patterns()))
            return SynthesisOutcome(request, (), sink.sorted())

        context = GenerationContext(
            sink=sink,
            options=options,
            handles=self.handles,
            cancellation_types=tuple(self.cancellation_types),
            header=self.output.header,
        )
        artifacts = generator_class(context).generate(request)
        logger.info(
            "%s for %s: %d artifact(s), %d diagnostic(s)",
            request.pattern,
            request.contract.qualified_name,
            len(artifacts),
            len(sink),
        )
        return SynthesisOutcome(request, tuple(artifacts), sink.sorted())

    def synthesize_all(self, requests: Iterable[SynthesisRequest]) -> List[SynthesisOutcome]:
        """Run every request independently; one failing request never blocks another."""
        return [self.synthesize(request) for request in requests]


__all__ = ["SynthesisEngine", "SynthesisOutcome"]
