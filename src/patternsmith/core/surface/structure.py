"""Structural checks run before any member is looked at."""
from __future__ import annotations

from typing import Collection, Iterable

from patternsmith.core.diagnostics import DiagnosticSink, catalog

from .model import ContractSurface, ContractVariant

FORWARDING_VARIANTS = frozenset({ContractVariant.CAPABILITY_SET, ContractVariant.PARTIAL_BASE})


def is_walkable(contract: ContractSurface) -> bool:
    """A contract whose member surface can be resolved at all."""
    return (
        contract.variant in FORWARDING_VARIANTS
        and contract.generic_arity == 0
        and contract.nesting_depth == 0
    )


def check_structure(
    contract: ContractSurface,
    pattern: str,
    sink: DiagnosticSink,
    *,
    variants: Collection[ContractVariant] = FORWARDING_VARIANTS,
    require_extensible: bool = False,
) -> bool:
    """Report structural errors for ``contract``; True when it may be analysed."""
    mark = sink.mark()
    anchor = contract.anchor
    if contract.variant not in variants:
        sink.report(catalog.INVALID_VARIANT, anchor, contract.name, pattern)
    if contract.generic_arity:
        sink.report(catalog.GENERIC_CONTRACT, anchor, contract.name, contract.generic_arity)
    if contract.nesting_depth:
        sink.report(catalog.NESTED_CONTRACT, anchor, contract.name)
    if require_extensible and not contract.extensible:
        sink.report(catalog.NOT_EXTENSIBLE, anchor, contract.name, pattern)
    return not sink.errors_since(mark)


def check_name_conflicts(contract: ContractSurface, names: Iterable[str], sink: DiagnosticSink) -> bool:
    """Report generated names that collide with types next to the contract."""
    mark = sink.mark()
    taken = set(contract.namespace_types) | {contract.name}
    for name in names:
        if name in taken:
            sink.report(catalog.NAME_CONFLICT, contract.anchor, name, contract.namespace or contract.name)
    return not sink.errors_since(mark)


__all__ = ["FORWARDING_VARIANTS", "is_walkable", "check_structure", "check_name_conflicts"]
