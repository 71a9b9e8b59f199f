"""Member descriptor model.

Language-neutral records describing a contract and its members. They are
produced by the contract loader (or built directly by callers) and consumed
by every analysis stage; all of them are immutable.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from patternsmith.core.diagnostics.model import SourceAnchor
from patternsmith.core.surface.types import ANY, NONE, TypeRef


class ContractVariant(str, Enum):
    """Shape of the type a pattern is generated for."""

    CAPABILITY_SET = "capability_set"
    PARTIAL_BASE = "partial_base"
    CONCRETE = "concrete"


class HostSemantics(str, Enum):
    """Ownership tag: whether a host is copied on assignment."""

    REFERENCE = "reference"
    VALUE = "value"


class MemberKind(str, Enum):
    METHOD = "method"
    PROPERTY = "property"
    EVENT = "event"
    FIELD = "field"
    NESTED_TYPE = "nested_type"

    @property
    def code(self) -> str:
        return _KIND_CODES[self]


_KIND_CODES = {
    MemberKind.EVENT: "E",
    MemberKind.FIELD: "F",
    MemberKind.METHOD: "M",
    MemberKind.PROPERTY: "P",
    MemberKind.NESTED_TYPE: "T",
}


class Accessibility(str, Enum):
    PUBLIC = "public"
    INTERNAL = "internal"
    PROTECTED_INTERNAL = "protected_internal"
    PROTECTED = "protected"
    PRIVATE_PROTECTED = "private_protected"
    PRIVATE = "private"

    @property
    def forwardable(self) -> bool:
        """Whether a generated sibling type may reach a member with this accessibility."""
        return self in _FORWARDABLE

    @classmethod
    def infer(cls, name: str) -> "Accessibility":
        """Derive accessibility from Python naming conventions."""
        if name.startswith("__") and not name.endswith("__"):
            return cls.PRIVATE
        if name.startswith("_") and not name.endswith("__"):
            return cls.PROTECTED
        return cls.PUBLIC


_FORWARDABLE = frozenset({Accessibility.PUBLIC, Accessibility.INTERNAL, Accessibility.PROTECTED_INTERNAL})


class RefMode(str, Enum):
    """How an argument is passed. Part of a member's identity."""

    NONE = "none"
    IN = "in"
    REF = "ref"
    OUT = "out"


class ParameterKind(str, Enum):
    POSITIONAL = "positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_POSITIONAL = "var_positional"
    VAR_KEYWORD = "var_keyword"


class AsyncKind(str, Enum):
    SYNC = "sync"
    ASYNC_NO_RESULT = "async_no_result"
    ASYNC_WITH_RESULT = "async_with_result"

    @property
    def is_async(self) -> bool:
        return self is not AsyncKind.SYNC


@dataclass(frozen=True)
class Parameter:
    name: str
    type: TypeRef = ANY
    mode: RefMode = RefMode.NONE
    kind: ParameterKind = ParameterKind.POSITIONAL
    default: Optional[str] = None
    inject: bool = False


@dataclass(frozen=True)
class MemberDescriptor:
    """One declared member of a contract, a candidate pool entry or a host."""

    name: str
    kind: MemberKind = MemberKind.METHOD
    accessibility: Accessibility = Accessibility.PUBLIC
    static: bool = False
    returns: TypeRef = NONE
    coroutine: bool = False
    parameters: Tuple[Parameter, ...] = ()
    generic_arity: int = 0
    special: bool = False
    indexer: bool = False
    getter: Optional[Accessibility] = None
    setter: Optional[Accessibility] = None
    virtual: bool = False
    abstract: bool = False
    markers: FrozenSet[str] = frozenset()
    declaring_type: str = ""
    anchor: Optional[SourceAnchor] = None

    @property
    def is_data(self) -> bool:
        """Properties and fields are forwarded as attribute access."""
        return self.kind in (MemberKind.PROPERTY, MemberKind.FIELD)

    @property
    def is_dunder(self) -> bool:
        return len(self.name) > 4 and self.name.startswith("__") and self.name.endswith("__")

    @property
    def overridable(self) -> bool:
        return self.virtual or self.abstract

    def has_marker(self, marker: str) -> bool:
        return marker in self.markers

    def with_declaring_type(self, type_name: str) -> "MemberDescriptor":
        return replace(self, declaring_type=type_name)


@dataclass(frozen=True)
class ContractSurface:
    """A nominally-typed contract or host type and its declared members."""

    name: str
    namespace: str = ""
    variant: ContractVariant = ContractVariant.CAPABILITY_SET
    generic_arity: int = 0
    nesting_depth: int = 0
    members: Tuple[MemberDescriptor, ...] = ()
    bases: Tuple["ContractSurface", ...] = ()
    extensible: bool = True
    semantics: HostSemantics = HostSemantics.REFERENCE
    namespace_types: FrozenSet[str] = frozenset()
    anchor: Optional[SourceAnchor] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    def declared_members(self) -> Tuple[MemberDescriptor, ...]:
        """Members declared directly on this type, tagged with their declaring type."""
        return tuple(m if m.declaring_type else m.with_declaring_type(self.name) for m in self.members)


@dataclass(frozen=True)
class ClassifiedMember:
    """A member that survived classification, with derived eligibility flags."""

    descriptor: MemberDescriptor
    key: str
    async_kind: AsyncKind = AsyncKind.SYNC
    result: TypeRef = NONE
    forwardable: bool = True
    overridable: bool = True
    ignored: bool = False

    @property
    def name(self) -> str:
        return self.descriptor.name


__all__ = [
    "ContractVariant",
    "HostSemantics",
    "MemberKind",
    "Accessibility",
    "RefMode",
    "ParameterKind",
    "AsyncKind",
    "Parameter",
    "MemberDescriptor",
    "ContractSurface",
    "ClassifiedMember",
]
