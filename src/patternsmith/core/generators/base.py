"""Base class for pattern generators.

A generator turns one ``SynthesisRequest`` into zero or more Python source
artifacts. The base class runs the checks every pattern shares (structural
validation, generated-name resolution and conflict detection) and enforces
all-or-nothing emission: if any error was reported while generating, no
artifact is returned.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from patternsmith.core.composition.steps import CompositionStep, TerminalStep
from patternsmith.core.config.options import SynthesisOptions
from patternsmith.core.diagnostics import DiagnosticSink, SourceAnchor, catalog
from patternsmith.core.surface.binding import CandidateImplementation, ExposedMember
from patternsmith.core.surface.classifier import MemberClassifier
from patternsmith.core.surface.handles import CompletionHandles
from patternsmith.core.surface.model import (
    ClassifiedMember,
    ContractSurface,
    ContractVariant,
    MemberDescriptor,
)
from patternsmith.core.surface.structure import FORWARDING_VARIANTS, check_name_conflicts, check_structure
from patternsmith.core.surface.walker import SurfaceWalker
from patternsmith.core.utils.text import strip_interface_prefix, to_snake_case

from .writer import ModuleBuilder

logger = logging.getLogger(__name__)

DEFAULT_HEADER = "# <auto-generated by patternsmith> Do not edit by hand."


@dataclass(frozen=True)
class Artifact:
    """One generated source file."""

    name: str
    text: str
    pattern: str = ""
    type_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SynthesisRequest:
    """Everything the engine needs to generate one pattern for one type.

    ``options`` is the raw option mapping; it is merged over configured
    defaults and validated by the engine.
    """

    pattern: str
    contract: ContractSurface
    options: Mapping[str, Any] = field(default_factory=dict)
    steps: Tuple[CompositionStep, ...] = ()
    terminals: Tuple[TerminalStep, ...] = ()
    candidates: Tuple[CandidateImplementation, ...] = ()
    factories: Tuple[MemberDescriptor, ...] = ()
    exposes: Tuple[ExposedMember, ...] = ()
    anchor: Optional[SourceAnchor] = None


@dataclass
class GenerationContext:
    sink: DiagnosticSink
    options: SynthesisOptions
    handles: CompletionHandles = field(default_factory=CompletionHandles)
    cancellation_types: Tuple[str, ...] = ("CancellationToken", "asyncio.Event", "threading.Event")
    header: str = DEFAULT_HEADER


class PatternGenerator(ABC):
    """Shared pipeline for one pattern family.

    Subclasses declare which contract variants they accept, the generated
    names they own and implement ``default_names`` and ``build``.

    Example:
        >>> generator = DecoratorGenerator(context)
        >>> artifacts = generator.generate(request)
        >>> [a.name for a in artifacts]
        ['storage_decorator.py']
    """

    pattern: str = ""
    variants: FrozenSet[ContractVariant] = FORWARDING_VARIANTS
    requires_extensible: bool = False
    type_name_keys: Tuple[str, ...] = ()

    def __init__(self, context: GenerationContext) -> None:
        self.context = context
        self.sink = context.sink
        self.options = context.options
        self.handles = context.handles

    def generate(self, request: SynthesisRequest) -> Tuple[Artifact, ...]:
        contract = request.contract
        mark = self.sink.mark()
        if not check_structure(
            contract,
            self.pattern,
            self.sink,
            variants=self.accepted_variants(request),
            require_extensible=self.requires_extensible,
        ):
            return ()

        names = self.resolve_names(contract)
        type_names = [names[key] for key in self.type_name_keys if key in names]
        if not check_name_conflicts(contract, type_names, self.sink):
            return ()
        if self.sink.errors_since(mark):
            return ()

        artifacts = self.build(request, names)
        if self.sink.errors_since(mark):
            logger.info("%s for %s not emitted: errors reported", self.pattern, contract.qualified_name)
            return ()
        return tuple(artifacts)

    def accepted_variants(self, request: SynthesisRequest) -> FrozenSet[ContractVariant]:
        return self.variants

    @abstractmethod
    def default_names(self, contract: ContractSurface) -> Dict[str, str]:
        """Default generated names keyed by naming-override key."""

    @abstractmethod
    def build(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        """Generate artifacts; report problems into ``self.sink``."""

    def resolve_names(self, contract: ContractSurface) -> Dict[str, str]:
        defaults = self.default_names(contract)
        for key in sorted(self.options.naming):
            if key not in defaults:
                self.sink.report(catalog.UNKNOWN_NAMING_KEY, contract.anchor, key, self.pattern)
        names = {key: self.options.name(key, value) for key, value in defaults.items()}
        seen: Dict[str, str] = {}
        for key, name in names.items():
            if name in seen:
                self.sink.report(
                    catalog.CONFLICTING_OPTIONS, contract.anchor, f"naming.{key}", f"naming.{seen[name]}",
                    f"both generate '{name}'",
                )
            seen.setdefault(name, key)
        return names

    def surface(self, contract: ContractSurface) -> Tuple[ClassifiedMember, ...]:
        """Walk and classify the contract's members (empty on any error)."""
        members = SurfaceWalker().walk(contract)
        classified = MemberClassifier(self.handles, self.sink).classify(contract, members)
        if not classified and not self.sink.has_errors:
            self.sink.report(catalog.EMPTY_SURFACE, contract.anchor, contract.name)
        return classified

    def stem(self, contract: ContractSurface) -> str:
        return strip_interface_prefix(contract.name)

    def artifact_name(self, contract: ContractSurface, suffix: Optional[str] = None) -> str:
        return f"{to_snake_case(self.stem(contract))}_{suffix or self.pattern}.py"

    def new_module(self, summary: str) -> ModuleBuilder:
        return ModuleBuilder(self.context.header or DEFAULT_HEADER, summary)


__all__ = [
    "Artifact",
    "SynthesisRequest",
    "GenerationContext",
    "PatternGenerator",
    "DEFAULT_HEADER",
]
