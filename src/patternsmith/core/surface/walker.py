"""Surface walker: collect every member a generated type must honor.

Capability sets contribute their own members followed by the members of
their whole base closure; a partially-implemented base contributes the
members of every class in its linearization up to, but excluding, the
implicit root. Either way each signature key is kept once, first
occurrence wins, so diamond-shaped hierarchies yield a single member.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Sequence, Tuple

from .keys import signature_key
from .model import ContractSurface, ContractVariant, MemberDescriptor
from .structure import is_walkable

logger = logging.getLogger(__name__)

ROOT_TYPE_NAMES = frozenset({"object", "builtins.object"})


class InconsistentHierarchyError(ValueError):
    """Raised when bases cannot be linearized (no consistent method resolution order)."""


def base_closure(contract: ContractSurface) -> List[ContractSurface]:
    """Transitive bases in breadth-first declaration order, each visited once."""
    seen = {contract.qualified_name}
    ordered: List[ContractSurface] = []
    queue = deque(contract.bases)
    while queue:
        base = queue.popleft()
        if base.qualified_name in seen or base.name in ROOT_TYPE_NAMES:
            continue
        seen.add(base.qualified_name)
        ordered.append(base)
        queue.extend(base.bases)
    return ordered


def linearize(contract: ContractSurface) -> List[ContractSurface]:
    """C3 linearization of ``contract`` (the contract itself first).

    With single inheritance this is simply the base chain.
    """
    bases = [b for b in contract.bases if b.name not in ROOT_TYPE_NAMES]
    sequences = [linearize(base) for base in bases] + [list(bases)]
    result = [contract]
    sequences = [list(seq) for seq in sequences if seq]
    while sequences:
        for seq in sequences:
            head = seq[0]
            if not any(head.qualified_name in _names(other[1:]) for other in sequences):
                break
        else:
            raise InconsistentHierarchyError(
                f"Cannot create a consistent method resolution order for '{contract.qualified_name}'"
            )
        result.append(head)
        sequences = [seq[1:] if seq[0].qualified_name == head.qualified_name else seq for seq in sequences]
        sequences = [seq for seq in sequences if seq]
    return result


def _names(types: Sequence[ContractSurface]) -> List[str]:
    return [t.qualified_name for t in types]


class SurfaceWalker:
    """Collect the deduplicated member surface of a contract."""

    def walk(self, contract: ContractSurface) -> Tuple[MemberDescriptor, ...]:
        if not is_walkable(contract):
            return ()
        if contract.variant is ContractVariant.CAPABILITY_SET:
            levels = [contract, *base_closure(contract)]
        else:
            levels = linearize(contract)

        collected: Dict[str, MemberDescriptor] = {}
        for level in levels:
            for member in level.declared_members():
                key = signature_key(member)
                if key in collected:
                    logger.debug("walker: %s from %s already collected", key, level.name)
                    continue
                collected[key] = member
        return tuple(collected.values())


__all__ = ["SurfaceWalker", "InconsistentHierarchyError", "base_closure", "linearize"]
