"""Contract documents: YAML descriptions of contracts and synthesis requests.

A document has two top-level keys. ``contracts`` maps a type name to its
description (variant, bases by name, members); ``syntheses`` lists the
patterns to generate, each naming a contract, its options and, for
facades, the candidate implementations. Documents are validated against
the bundled ``contract.schema.yaml`` before anything is built.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import yaml
from jsonschema import Draft202012Validator

from patternsmith.core.composition.steps import CompositionStep, TerminalStep
from patternsmith.core.diagnostics import SourceAnchor
from patternsmith.core.exceptions import ContractLoadError
from patternsmith.core.generators import SynthesisRequest
from patternsmith.core.surface.binding import CandidateImplementation, ExposedMember
from patternsmith.core.surface.model import (
    Accessibility,
    ContractSurface,
    ContractVariant,
    HostSemantics,
    MemberDescriptor,
    MemberKind,
    Parameter,
    ParameterKind,
    RefMode,
)
from patternsmith.core.surface.types import ANY, NONE, TypeRef
from patternsmith.core.surface.walker import InconsistentHierarchyError, linearize
from patternsmith.core.utils.io import read_yaml_file
from patternsmith.data import read_yaml

logger = logging.getLogger(__name__)

SCHEMA_NAME = "contract.schema.yaml"


@dataclass(frozen=True)
class ContractDocument:
    source: str
    contracts: Dict[str, ContractSurface]
    requests: Tuple[SynthesisRequest, ...]

    def contract(self, name: str) -> ContractSurface:
        try:
            return self.contracts[name]
        except KeyError:
            raise ContractLoadError(
                f"{self.source}: unknown contract '{name}'", context={"contract": name}
            ) from None


@dataclass(frozen=True)
class _Roles:
    steps: Tuple[CompositionStep, ...] = ()
    terminals: Tuple[TerminalStep, ...] = ()
    factories: Tuple[MemberDescriptor, ...] = ()
    exposes: Tuple[ExposedMember, ...] = ()


def validate_document(data: Any, source: str = "<document>") -> None:
    """Validate a parsed document against the contract schema.

    Raises:
        ContractLoadError: listing every schema violation
    """
    validator = Draft202012Validator(read_yaml("schemas", SCHEMA_NAME))
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        details = [
            f"{'.'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}" for err in errors
        ]
        raise ContractLoadError(
            f"{source}: invalid contract document:\n  " + "\n  ".join(details),
            context={"source": source, "errors": details},
        )


def load_document(path: Path) -> ContractDocument:
    """Read, validate and build the contract document at ``path``."""
    path = Path(path)
    try:
        data = read_yaml_file(path, default=None, raise_on_error=True)
    except FileNotFoundError as exc:
        raise ContractLoadError(str(exc), context={"path": str(path)}) from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ContractLoadError(f"Cannot read {path}: {exc}", context={"path": str(path)}) from exc
    return ContractLoader(str(path)).build(data)


def parse_document(text: str, source: str = "<string>") -> ContractDocument:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ContractLoadError(f"{source}: invalid YAML: {exc}", context={"source": source}) from exc
    return ContractLoader(source).build(data)


class ContractLoader:
    """Build contracts and synthesis requests from one parsed document."""

    def __init__(self, source: str = "<document>") -> None:
        self.source = source
        self._raw: Dict[str, Mapping[str, Any]] = {}
        self._built: Dict[str, ContractSurface] = {}
        self._roles: Dict[str, _Roles] = {}

    def build(self, data: Any) -> ContractDocument:
        validate_document(data, self.source)
        self._raw = dict(data.get("contracts") or {})
        for name in self._raw:
            self._contract(name, ())

        requests = tuple(
            self._request(index, raw) for index, raw in enumerate(data.get("syntheses") or [])
        )
        logger.debug("%s: %d contract(s), %d request(s)", self.source, len(self._built), len(requests))
        return ContractDocument(source=self.source, contracts=dict(self._built), requests=requests)

    # ---- contracts ---------------------------------------------------------

    def _anchor(self, symbol: str) -> SourceAnchor:
        return SourceAnchor(path=self.source, symbol=symbol)

    def _contract(self, name: str, stack: Tuple[str, ...]) -> ContractSurface:
        if name in self._built:
            return self._built[name]
        if name in stack:
            cycle = " -> ".join(stack + (name,))
            raise ContractLoadError(f"{self.source}: inheritance cycle {cycle}", context={"cycle": cycle})
        raw = self._raw.get(name)
        if raw is None:
            raise ContractLoadError(
                f"{self.source}: '{stack[-1]}' names unknown base '{name}'",
                context={"contract": stack[-1], "base": name},
            )

        bases = tuple(self._contract(base, stack + (name,)) for base in raw.get("bases") or ())
        anchor = self._anchor(name)
        steps: List[CompositionStep] = []
        terminals: List[TerminalStep] = []
        factories: List[MemberDescriptor] = []
        exposes: List[ExposedMember] = []
        members: List[MemberDescriptor] = []
        for raw_member in raw.get("members") or ():
            member = self._member(name, raw_member, anchor.child(raw_member["name"]))
            members.append(member)
            role = raw_member.get("role")
            if role == "step":
                if "rank" not in raw_member:
                    raise ContractLoadError(
                        f"{self.source}: step '{name}.{member.name}' needs a rank",
                        context={"contract": name, "member": member.name},
                    )
                steps.append(CompositionStep(member, int(raw_member["rank"]), raw_member.get("label", "")))
            elif role == "terminal":
                terminals.append(TerminalStep(member, raw_member.get("label", "")))
            elif role == "factory":
                factories.append(member)
            elif role == "expose":
                exposes.append(ExposedMember(member, raw_member.get("expose_as") or None))

        contract = ContractSurface(
            name=name,
            namespace=raw.get("namespace", ""),
            variant=ContractVariant(raw.get("variant", "capability_set")),
            generic_arity=raw.get("generic_arity", 0),
            nesting_depth=raw.get("nesting_depth", 0),
            members=tuple(members),
            bases=bases,
            extensible=raw.get("extensible", True),
            semantics=HostSemantics(raw.get("semantics", "reference")),
            namespace_types=frozenset(raw.get("namespace_types") or ()),
            anchor=anchor,
        )
        if contract.variant is ContractVariant.PARTIAL_BASE:
            try:
                linearize(contract)
            except InconsistentHierarchyError as exc:
                raise ContractLoadError(f"{self.source}: {exc}", context={"contract": name}) from exc

        self._built[name] = contract
        self._roles[name] = _Roles(tuple(steps), tuple(terminals), tuple(factories), tuple(exposes))
        return contract

    def _type(self, text: Optional[str], where: str) -> TypeRef:
        try:
            return TypeRef.parse(text)
        except ValueError as exc:
            raise ContractLoadError(f"{self.source}: {where}: {exc}", context={"symbol": where}) from exc

    def _parameters(self, raw_params: Any, where: str) -> Tuple[Parameter, ...]:
        params = []
        for raw in raw_params or ():
            default = raw.get("default")
            if default is not None and not isinstance(default, str):
                default = repr(default)
            params.append(
                Parameter(
                    name=raw["name"],
                    type=self._type(raw["type"], f"{where}({raw['name']})") if "type" in raw else ANY,
                    mode=RefMode(raw.get("mode", "none")),
                    kind=ParameterKind(raw.get("kind", "positional")),
                    default=default,
                    inject=raw.get("inject", False),
                )
            )
        return tuple(params)

    def _member(self, owner: str, raw: Mapping[str, Any], anchor: SourceAnchor) -> MemberDescriptor:
        name = raw["name"]
        where = f"{owner}.{name}"
        kind = MemberKind(raw.get("kind", "method"))
        accessibility = (
            Accessibility(raw["accessibility"]) if "accessibility" in raw else Accessibility.infer(name)
        )
        type_text = raw.get("returns", raw.get("type"))
        getter: Optional[Accessibility] = None
        setter: Optional[Accessibility] = None
        if kind in (MemberKind.PROPERTY, MemberKind.FIELD):
            getter = accessibility
            if kind is MemberKind.FIELD:
                setter = accessibility
            if "getter" in raw:
                getter = Accessibility(raw["getter"]) if raw["getter"] else None
            if "setter" in raw:
                setter = Accessibility(raw["setter"]) if raw["setter"] else None

        return MemberDescriptor(
            name=name,
            kind=kind,
            accessibility=accessibility,
            static=raw.get("static", False),
            returns=self._type(type_text, where) if type_text else NONE,
            coroutine=raw.get("async", False),
            parameters=self._parameters(raw.get("parameters"), where),
            generic_arity=raw.get("generic_arity", 0),
            special=raw.get("special", False),
            indexer=raw.get("indexer", False),
            getter=getter,
            setter=setter,
            virtual=raw.get("virtual", False),
            abstract=raw.get("abstract", False),
            markers=frozenset(raw.get("markers") or ()),
            declaring_type=owner,
            anchor=anchor,
        )

    # ---- requests ----------------------------------------------------------

    def _request(self, index: int, raw: Mapping[str, Any]) -> SynthesisRequest:
        name = raw["contract"]
        if name not in self._built:
            raise ContractLoadError(
                f"{self.source}: syntheses[{index}] names unknown contract '{name}'",
                context={"index": index, "contract": name},
            )
        roles = self._roles[name]
        candidates = []
        for order, candidate in enumerate(raw.get("candidates") or ()):
            where = f"{candidate['module']}.{candidate['name']}"
            member = MemberDescriptor(
                name=candidate["name"],
                returns=self._type(candidate["returns"], where) if candidate.get("returns") else NONE,
                coroutine=candidate.get("async", False),
                parameters=self._parameters(candidate.get("parameters"), where),
                declaring_type=candidate["module"],
            )
            candidates.append(
                CandidateImplementation(
                    member=member,
                    module=candidate["module"],
                    target=candidate.get("target") or None,
                    order=order,
                )
            )
        return SynthesisRequest(
            pattern=raw["pattern"],
            contract=self._built[name],
            options=dict(raw.get("options") or {}),
            steps=roles.steps,
            terminals=roles.terminals,
            candidates=tuple(candidates),
            factories=roles.factories,
            exposes=roles.exposes,
            anchor=self._anchor(f"syntheses[{index}]"),
        )


__all__ = ["ContractDocument", "ContractLoader", "load_document", "parse_document", "validate_document"]
