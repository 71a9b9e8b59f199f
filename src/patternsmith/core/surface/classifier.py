"""Member classifier: decide which walked members a generated type forwards.

Rules are applied per member in a fixed order. Member-local problems
(unreachable members or accessors) drop the member with a warning; members
that make the contract impossible to forward (generic methods, indexers,
nested types, events) are errors, and a contract with any error yields no
members at all.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from patternsmith.core.diagnostics import DiagnosticSink, SourceAnchor, catalog

from .handles import CompletionHandles
from .keys import signature_key
from .model import (
    ClassifiedMember,
    ContractSurface,
    ContractVariant,
    MemberDescriptor,
    MemberKind,
    RefMode,
)

logger = logging.getLogger(__name__)

IGNORE_MARKER = "ignore"


def member_anchor(contract: ContractSurface, member: MemberDescriptor) -> Optional[SourceAnchor]:
    if member.anchor is not None:
        return member.anchor
    if contract.anchor is not None:
        return contract.anchor.child(member.name)
    return SourceAnchor(symbol=f"{contract.name}.{member.name}")


class MemberClassifier:
    def __init__(self, handles: CompletionHandles, sink: DiagnosticSink) -> None:
        self.handles = handles
        self.sink = sink

    def classify(
        self, contract: ContractSurface, members: Sequence[MemberDescriptor]
    ) -> Tuple[ClassifiedMember, ...]:
        """Classify ``members`` (walker output) of ``contract``.

        Returns the surviving members sorted by signature key, or an empty
        tuple when any error was reported for the contract.
        """
        mark = self.sink.mark()
        survivors: List[ClassifiedMember] = []
        for member in members:
            classified = self._classify_one(contract, member)
            if classified is not None:
                survivors.append(classified)

        if self.sink.errors_since(mark):
            logger.info("contract %s has errors; no members are forwarded", contract.qualified_name)
            return ()
        return tuple(sorted(survivors, key=lambda m: m.key))

    def _classify_one(self, contract: ContractSurface, member: MemberDescriptor) -> Optional[ClassifiedMember]:
        anchor = member_anchor(contract, member)
        key = signature_key(member)
        label = f"{member.declaring_type or contract.name}.{member.name}"

        if member.has_marker(IGNORE_MARKER):
            return ClassifiedMember(
                descriptor=member, key=key, forwardable=False, overridable=False, ignored=True,
                result=member.returns,
            )
        if member.static:
            return None
        if member.special or member.is_dunder:
            return None
        if member.kind is MemberKind.METHOD and member.generic_arity:
            self.sink.report(catalog.GENERIC_MEMBER, anchor, label)
            return None
        if member.indexer:
            self.sink.report(catalog.UNSUPPORTED_MEMBER, anchor, label, "indexer")
            return None
        if member.kind is MemberKind.NESTED_TYPE:
            self.sink.report(catalog.UNSUPPORTED_MEMBER, anchor, label, "nested type")
            return None
        if member.kind is MemberKind.EVENT:
            self.sink.report(catalog.UNSUPPORTED_MEMBER, anchor, label, "event")
            return None
        if contract.variant is ContractVariant.PARTIAL_BASE and not member.overridable:
            return None
        if not member.accessibility.forwardable:
            self.sink.report(catalog.INACCESSIBLE_MEMBER, anchor, label, member.accessibility.value)
            return None
        if member.is_data and not self._accessors_reachable(member, anchor, label):
            return None

        for parameter in member.parameters:
            if parameter.mode is not RefMode.NONE:
                self.sink.report(catalog.BY_REFERENCE_PARAMETER, anchor, label, parameter.name, parameter.mode.value)

        return ClassifiedMember(
            descriptor=member,
            key=key,
            async_kind=self.handles.classify(member),
            result=self.handles.result_type(member) if not member.is_data else member.returns,
            forwardable=True,
            overridable=contract.variant is ContractVariant.CAPABILITY_SET or member.overridable,
        )

    def _accessors_reachable(self, member: MemberDescriptor, anchor: Optional[SourceAnchor], label: str) -> bool:
        for accessor_name, accessibility in (("get", member.getter), ("set", member.setter)):
            if accessibility is not None and not accessibility.forwardable:
                self.sink.report(catalog.INACCESSIBLE_ACCESSOR, anchor, label, accessibility.value, accessor_name)
                return False
        return True


__all__ = ["MemberClassifier", "IGNORE_MARKER", "member_anchor"]
