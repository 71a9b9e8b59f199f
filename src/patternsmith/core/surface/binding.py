"""Binding resolver: map contract members onto implementations.

Implementations come from a candidate pool (functions in subsystem
modules). A candidate tagged with a target name binds to the contract
member of that name only; an untagged candidate binds structurally, when
its parameter shapes equal the member's and its return shape is
compatible. The pool is indexed once per synthesis as a flat list of
``(parameter key, candidate)`` pairs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from patternsmith.core.config.options import AsyncMode, MissingMapPolicy
from patternsmith.core.diagnostics import DiagnosticSink, SourceAnchor, catalog

from .handles import CompletionHandles
from .keys import parameters_key
from .model import AsyncKind, ClassifiedMember, MemberDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateImplementation:
    """A function in ``module`` that may implement a contract member."""

    member: MemberDescriptor
    module: str
    target: Optional[str] = None
    order: int = 0

    @property
    def name(self) -> str:
        return self.member.name

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.member.name}"


@dataclass(frozen=True)
class ExposedMember:
    """A static host method a host-first facade publishes, under ``name``."""

    member: MemberDescriptor
    alias: Optional[str] = None

    @property
    def name(self) -> str:
        return self.alias or self.member.name


class BindingStatus(str, Enum):
    BOUND = "bound"
    AMBIGUOUS = "ambiguous"
    UNBOUND = "unbound"


class Adaptation(str, Enum):
    """How a generated method reaches its bound implementation."""

    DIRECT = "direct"
    AWAIT = "await"
    COMPLETE = "complete"
    BLOCK = "block"


@dataclass(frozen=True)
class Binding:
    member: ClassifiedMember
    status: BindingStatus
    candidate: Optional[CandidateImplementation] = None
    matches: Tuple[CandidateImplementation, ...] = ()
    fallback: Optional[MissingMapPolicy] = None
    adaptation: Adaptation = Adaptation.DIRECT

    @property
    def bound(self) -> bool:
        return self.candidate is not None


class CandidateIndex:
    """Read-only index over the candidate pool for one synthesis."""

    def __init__(self, candidates: Iterable[CandidateImplementation]) -> None:
        ordered = sorted(candidates, key=lambda c: c.order)
        self.entries: List[Tuple[str, CandidateImplementation]] = [
            (parameters_key(c.member.parameters), c) for c in ordered if not c.target
        ]
        self.by_target: Dict[str, List[CandidateImplementation]] = {}
        for candidate in ordered:
            if candidate.target:
                self.by_target.setdefault(candidate.target, []).append(candidate)

    def structural(self, key: str) -> List[CandidateImplementation]:
        return [candidate for entry_key, candidate in self.entries if entry_key == key]

    def targeted(self, name: str) -> List[CandidateImplementation]:
        return list(self.by_target.get(name, ()))


class BindingResolver:
    """Resolve contract members against a ``CandidateIndex``.

    Args:
        index: Candidate pool index.
        handles: Completion-handle classifier.
        sink: Diagnostic sink for the current contract.
        policy: What to do with members that match nothing.
        async_mode: Configured async generation mode.
        adapt_async: Treat a sync ``T`` and a handle of ``T`` as compatible.
    """

    def __init__(
        self,
        index: CandidateIndex,
        handles: CompletionHandles,
        sink: DiagnosticSink,
        *,
        policy: MissingMapPolicy = MissingMapPolicy.ERROR,
        async_mode: AsyncMode = AsyncMode.AUTO,
        adapt_async: bool = False,
    ) -> None:
        self.index = index
        self.handles = handles
        self.sink = sink
        self.policy = policy
        self.async_mode = async_mode
        self.adapt_async = adapt_async

    def resolve_all(
        self, members: Sequence[ClassifiedMember], anchors: Dict[str, Optional[SourceAnchor]]
    ) -> Tuple[Binding, ...]:
        return tuple(self.resolve(member, anchors.get(member.key)) for member in members)

    def resolve(self, member: ClassifiedMember, anchor: Optional[SourceAnchor] = None) -> Binding:
        targeted = self.index.targeted(member.name)
        if targeted:
            matches = tuple(targeted)
        else:
            shape = parameters_key(member.descriptor.parameters)
            matches = tuple(
                c for c in self.index.structural(shape) if self.returns_compatible(member.descriptor, c.member)
            )

        if not matches:
            return self._unbound(member, anchor)

        chosen = matches[0]
        status = BindingStatus.BOUND
        if len(matches) > 1:
            status = BindingStatus.AMBIGUOUS
            self.sink.report(
                catalog.AMBIGUOUS_BINDING, anchor, member.name, len(matches),
                ", ".join(c.qualified_name for c in matches), chosen.qualified_name,
            )
        if targeted:
            problem = self.signature_problem(member.descriptor, chosen.member)
            if problem:
                self.sink.report(catalog.BINDING_SIGNATURE_MISMATCH, anchor, member.name, chosen.qualified_name, problem)

        candidate_kind = self.handles.classify(chosen.member)
        if candidate_kind.is_async and self.async_mode is AsyncMode.OFF:
            self.sink.report(catalog.ASYNC_BINDING_WIDENED, anchor, member.name, chosen.qualified_name)

        logger.debug("binding: %s -> %s (%s)", member.key, chosen.qualified_name, status.value)
        return Binding(
            member=member,
            status=status,
            candidate=chosen,
            matches=matches,
            adaptation=self._adaptation(member, chosen.member, candidate_kind),
        )

    def _unbound(self, member: ClassifiedMember, anchor: Optional[SourceAnchor]) -> Binding:
        if self.policy is MissingMapPolicy.ERROR:
            self.sink.report(catalog.UNMAPPED_MEMBER, anchor, member.name)
        return Binding(member=member, status=BindingStatus.UNBOUND, fallback=self.policy)

    def returns_compatible(self, expected: MemberDescriptor, actual: MemberDescriptor) -> bool:
        expected_async = self.handles.classify(expected).is_async
        actual_async = self.handles.classify(actual).is_async
        if not expected_async and not actual_async:
            return expected.returns == actual.returns
        if expected_async and actual_async:
            return self.handles.result_type(expected) == self.handles.result_type(actual)
        if self.adapt_async:
            return self.handles.result_type(expected) == self.handles.result_type(actual)
        return False

    def signature_problem(self, expected: MemberDescriptor, actual: MemberDescriptor) -> str:
        """Describe why ``actual`` cannot stand in for ``expected`` (empty when it can)."""
        if len(expected.parameters) != len(actual.parameters):
            return f"expected {len(expected.parameters)} parameter(s), found {len(actual.parameters)}"
        expected_key = parameters_key(expected.parameters)
        actual_key = parameters_key(actual.parameters)
        if expected_key != actual_key:
            return f"expected parameters {expected_key}, found {actual_key}"
        if not self.returns_compatible(expected, actual):
            return f"expected return '{expected.returns}', found '{actual.returns}'"
        return ""

    def _adaptation(self, member: ClassifiedMember, actual: MemberDescriptor, actual_kind: AsyncKind) -> Adaptation:
        expected = member.descriptor
        if member.async_kind.is_async and actual_kind.is_async:
            return Adaptation.AWAIT if expected.coroutine else Adaptation.DIRECT
        if member.async_kind.is_async:
            return Adaptation.DIRECT if expected.coroutine else Adaptation.COMPLETE
        if actual_kind.is_async and self.adapt_async:
            return Adaptation.BLOCK
        return Adaptation.DIRECT


__all__ = [
    "CandidateImplementation",
    "ExposedMember",
    "CandidateIndex",
    "BindingResolver",
    "Binding",
    "BindingStatus",
    "Adaptation",
]
