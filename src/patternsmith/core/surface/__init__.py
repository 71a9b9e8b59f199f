"""Contract surface resolution: model, keys, walker, classifier and binding."""
from __future__ import annotations

from .binding import (
    Adaptation,
    Binding,
    BindingResolver,
    BindingStatus,
    CandidateImplementation,
    CandidateIndex,
    ExposedMember,
)
from .classifier import MemberClassifier
from .handles import DEFAULT_HANDLE_NAMES, CompletionHandles
from .keys import parameters_key, signature_key
from .model import (
    Accessibility,
    AsyncKind,
    ClassifiedMember,
    ContractSurface,
    ContractVariant,
    HostSemantics,
    MemberDescriptor,
    MemberKind,
    Parameter,
    ParameterKind,
    RefMode,
)
from .structure import check_name_conflicts, check_structure, is_walkable
from .types import TypeRef
from .walker import SurfaceWalker

__all__ = [
    "Adaptation",
    "Binding",
    "BindingResolver",
    "BindingStatus",
    "CandidateImplementation",
    "CandidateIndex",
    "ExposedMember",
    "MemberClassifier",
    "CompletionHandles",
    "DEFAULT_HANDLE_NAMES",
    "parameters_key",
    "signature_key",
    "Accessibility",
    "AsyncKind",
    "ClassifiedMember",
    "ContractSurface",
    "ContractVariant",
    "HostSemantics",
    "MemberDescriptor",
    "MemberKind",
    "Parameter",
    "ParameterKind",
    "RefMode",
    "check_name_conflicts",
    "check_structure",
    "is_walkable",
    "TypeRef",
    "SurfaceWalker",
]
