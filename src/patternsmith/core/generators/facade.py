"""Facade generator.

Contract-first: implements a contract by binding each of its methods to a
function from the candidate pool (see ``BindingResolver``). Candidate
modules are imported under deterministic private aliases. Members that bind
to nothing follow the configured missing-implementation policy.

Host-first: for a concrete host type, publishes the host's static methods
(the members marked ``expose``, or every public static method when none is
marked) as instance methods of a plain class. Parameters marked ``inject``
become constructor dependencies, stored once per distinct type.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, List, Sequence

from patternsmith.core.config.options import AsyncMode, MissingMapPolicy
from patternsmith.core.diagnostics import catalog
from patternsmith.core.surface.binding import (
    Adaptation,
    Binding,
    BindingResolver,
    CandidateImplementation,
    CandidateIndex,
    ExposedMember,
)
from patternsmith.core.surface.classifier import member_anchor
from patternsmith.core.surface.model import (
    Accessibility,
    ClassifiedMember,
    ContractSurface,
    ContractVariant,
    MemberDescriptor,
    MemberKind,
    ParameterKind,
)
from patternsmith.core.surface.structure import FORWARDING_VARIANTS
from patternsmith.core.surface.types import TypeRef
from patternsmith.core.utils.text import is_identifier, to_snake_case

from .base import Artifact, PatternGenerator, SynthesisRequest
from .writer import ModuleBuilder, SourceWriter, annotation, render_arguments, render_def

HOST_VARIANTS = FORWARDING_VARIANTS | {ContractVariant.CONCRETE}
HOST_ONLY_OPTIONS = ("include", "exclude", "member_prefix")


def module_aliases(modules: Sequence[str]) -> Dict[str, str]:
    """Map module paths to unique ``_name`` aliases, in sorted module order."""
    aliases: Dict[str, str] = {}
    used: set = set()
    for module in sorted(set(modules)):
        base = "_" + module.rsplit(".", 1)[-1]
        alias, counter = base, 2
        while alias in used:
            alias = f"{base}{counter}"
            counter += 1
        used.add(alias)
        aliases[module] = alias
    return aliases


@dataclass(frozen=True)
class Dependency:
    """A constructor-injected value shared by every host call that needs its type."""

    type: TypeRef
    argument: str

    @property
    def field(self) -> str:
        return f"_{self.argument}"


def host_dependencies(members: Sequence[MemberDescriptor]) -> Dict[str, Dependency]:
    """Injected parameter types of ``members`` keyed by rendered type, in type order.

    Types whose snake-case names coincide get numeric suffixes
    (``Connection`` and ``db.Connection`` become ``connection`` and ``connection2``).
    """
    types: Dict[str, TypeRef] = {}
    for member in members:
        for parameter in member.parameters:
            if parameter.inject:
                types.setdefault(parameter.type.render(), parameter.type)

    dependencies: Dict[str, Dependency] = {}
    used: set = set()
    for text in sorted(types):
        base = to_snake_case(types[text].base_name)
        if not is_identifier(base):
            base = "dependency"
        argument, counter = base, 2
        while argument in used:
            argument = f"{base}{counter}"
            counter += 1
        used.add(argument)
        dependencies[text] = Dependency(types[text], argument)
    return dependencies


class FacadeGenerator(PatternGenerator):
    pattern = "facade"
    type_name_keys = ("facade_type_name",)

    def accepted_variants(self, request: SynthesisRequest) -> FrozenSet[ContractVariant]:
        return HOST_VARIANTS

    def default_names(self, contract: ContractSurface) -> Dict[str, str]:
        return {"facade_type_name": f"{self.stem(contract)}Facade"}

    @staticmethod
    def host_first(request: SynthesisRequest) -> bool:
        return request.contract.variant is ContractVariant.CONCRETE or bool(request.exposes)

    def build(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        if self.host_first(request):
            return self._build_host(request, names)
        self._report_ignored_options(request, names["facade_type_name"])
        return self._build_contract(request, names)

    def _report_ignored_options(self, request: SynthesisRequest, facade_name: str) -> None:
        anchor = request.anchor or request.contract.anchor
        for key in HOST_ONLY_OPTIONS:
            if getattr(self.options, key):
                self.sink.report(
                    catalog.FACADE_OPTION_IGNORED, anchor, key, facade_name, "it applies to host-first facades only"
                )
        if self.options.async_mode is AsyncMode.ON:
            self.sink.report(
                catalog.FACADE_OPTION_IGNORED, anchor, "async_mode", facade_name,
                "method signatures come from the contract",
            )

    # ---- contract-first ----------------------------------------------------

    def _build_contract(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        contract = request.contract
        methods: List[ClassifiedMember] = []
        for member in self.surface(contract):
            if member.ignored:
                continue
            if member.descriptor.is_data:
                self.sink.report(
                    catalog.UNSUPPORTED_FACADE_MEMBER, member_anchor(contract, member.descriptor),
                    member.name, member.descriptor.kind.value,
                )
                continue
            methods.append(member)
        if self.sink.has_errors:
            return []

        resolver = BindingResolver(
            CandidateIndex(request.candidates),
            self.handles,
            self.sink,
            policy=self.options.missing_map,
            async_mode=self.options.async_mode,
            adapt_async=self.options.adapt_async,
        )
        bindings = [resolver.resolve(m, member_anchor(contract, m.descriptor)) for m in methods]
        if self.sink.has_errors:
            return []

        module = self.new_module(f"Facade for {contract.qualified_name}")
        module.import_type(contract.namespace, contract.name)
        aliases = module_aliases([b.candidate.module for b in bindings if b.candidate is not None])
        for path, alias in aliases.items():
            module.import_project(f"import {path} as {alias}")

        facade_name = names["facade_type_name"]
        w = module.body
        with w.block(f"class {facade_name}({contract.name}):"):
            w.docstring(f"{contract.name} implemented over subsystem functions.")
            for binding in bindings:
                w.blank()
                if binding.candidate is not None:
                    self._write_bound(w, module, binding, binding.candidate, aliases)
                else:
                    self._write_unbound(w, module, binding, facade_name)

        return [
            Artifact(
                name=self.artifact_name(contract),
                text=module.render(),
                pattern=self.pattern,
                type_names=(facade_name,),
            )
        ]

    def _write_bound(
        self,
        w: SourceWriter,
        module: ModuleBuilder,
        binding: Binding,
        candidate: CandidateImplementation,
        aliases: Dict[str, str],
    ) -> None:
        descriptor = binding.member.descriptor
        arguments = render_arguments(descriptor.parameters, candidate.member.parameters)
        call = f"{aliases[candidate.module]}.{candidate.name}({arguments})"
        if binding.adaptation is Adaptation.AWAIT:
            call = f"await {call}"
        elif binding.adaptation is Adaptation.COMPLETE:
            call = f"{module.use_helper('_completed')}({call})"
        elif binding.adaptation is Adaptation.BLOCK:
            call = f"{module.use_helper('_run_blocking')}({call})"
        with w.block(render_def(descriptor, coroutine=descriptor.coroutine)):
            w.line(f"return {call}")

    def _write_unbound(self, w: SourceWriter, module: ModuleBuilder, binding: Binding, facade_name: str) -> None:
        member = binding.member
        descriptor = member.descriptor
        with w.block(render_def(descriptor, coroutine=descriptor.coroutine)):
            if binding.fallback is MissingMapPolicy.STUB:
                w.line(f'raise NotImplementedError("{facade_name}.{descriptor.name} is not mapped to an implementation")')
            elif member.async_kind.is_async and not descriptor.coroutine:
                w.line(f"return {module.use_helper('_completed')}(None)")
            else:
                w.line("return None")

    # ---- host-first --------------------------------------------------------

    def _exposed(self, request: SynthesisRequest) -> List[ExposedMember]:
        contract = request.contract
        if not request.exposes:
            return [
                ExposedMember(member)
                for member in contract.declared_members()
                if member.kind is MemberKind.METHOD
                and member.static
                and member.accessibility is Accessibility.PUBLIC
                and not (member.special or member.is_dunder)
            ]

        exposed: List[ExposedMember] = []
        for entry in request.exposes:
            member = entry.member
            anchor = member_anchor(contract, member)
            if member.kind is not MemberKind.METHOD:
                self.sink.report(catalog.UNSUPPORTED_FACADE_MEMBER, anchor, member.name, member.kind.value)
            elif not member.static:
                self.sink.report(catalog.EXPOSED_MEMBER_NOT_STATIC, anchor, member.name, contract.name)
            else:
                exposed.append(entry)
        return exposed

    def _select(self, request: SynthesisRequest, exposed: List[ExposedMember]) -> List[ExposedMember]:
        """Apply the ``include`` / ``exclude`` filters (by host member name)."""
        contract = request.contract
        if self.options.include:
            available = {entry.member.name for entry in exposed}
            for name in self.options.include:
                if name not in available:
                    self.sink.report(
                        catalog.INCLUDED_MEMBER_NOT_FOUND, request.anchor or contract.anchor, name, contract.name
                    )
            return [entry for entry in exposed if entry.member.name in self.options.include]
        if self.options.exclude:
            return [entry for entry in exposed if entry.member.name not in self.options.exclude]
        return exposed

    def _build_host(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        contract = request.contract
        selected = self._select(request, self._exposed(request))
        if self.sink.has_errors:
            return []
        if not selected:
            self.sink.report(catalog.EMPTY_SURFACE, contract.anchor, contract.name)
            return []

        prefix = self.options.member_prefix
        methods = sorted(((prefix + entry.name, entry.member) for entry in selected), key=lambda item: item[0])
        sources: Dict[str, List[str]] = {}
        for name, member in methods:
            sources.setdefault(name, []).append(member.name)
        for name, members in sources.items():
            if len(members) > 1:
                self.sink.report(catalog.DUPLICATE_FACADE_MEMBER, contract.anchor, name, ", ".join(members))
        if self.sink.has_errors:
            return []

        dependencies = host_dependencies([member for _, member in methods])
        module = self.new_module(f"Facade over {contract.qualified_name}")
        module.import_type(contract.namespace, contract.name)

        facade_name = names["facade_type_name"]
        w = module.body
        with w.block(f"class {facade_name}:"):
            w.docstring(f"Entry points over the static operations of {contract.name}.")
            if dependencies:
                w.blank()
                params = ", ".join(f"{d.argument}: {annotation(d.type)}" for d in dependencies.values())
                with w.block(f"def __init__(self, {params}) -> None:"):
                    for dependency in dependencies.values():
                        w.line(f"self.{dependency.field} = {dependency.argument}")
            for name, member in methods:
                w.blank()
                self._write_exposed(w, contract, name, member, dependencies)

        return [
            Artifact(
                name=self.artifact_name(contract),
                text=module.render(),
                pattern=self.pattern,
                type_names=(facade_name,),
            )
        ]

    def _write_exposed(
        self,
        w: SourceWriter,
        contract: ContractSurface,
        name: str,
        member: MemberDescriptor,
        dependencies: Dict[str, Dependency],
    ) -> None:
        arguments: List[str] = []
        for parameter in member.parameters:
            value = f"self.{dependencies[parameter.type.render()].field}" if parameter.inject else parameter.name
            if parameter.kind is ParameterKind.VAR_POSITIONAL:
                value = f"*{value}"
            elif parameter.kind is ParameterKind.VAR_KEYWORD:
                value = f"**{value}"
            elif parameter.kind is ParameterKind.KEYWORD_ONLY:
                value = f"{parameter.name}={value}"
            arguments.append(value)
        call = f"{contract.name}.{member.name}({', '.join(arguments)})"

        coroutine = member.coroutine or self.options.async_mode is AsyncMode.ON
        returns = member.returns
        if member.coroutine:
            call = f"await {call}"
        elif coroutine and self.handles.classify(member).is_async:
            call = f"await {call}"
            returns = self.handles.result_type(member)

        signature = replace(member, name=name, parameters=tuple(p for p in member.parameters if not p.inject))
        with w.block(render_def(signature, coroutine=coroutine, returns=returns)):
            w.line(f"return {call}")


__all__ = ["FacadeGenerator", "host_dependencies", "module_aliases"]
