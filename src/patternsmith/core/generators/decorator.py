"""Decorator generator.

Emits a forwarding base class that implements the contract by delegating
every member to a wrapped ``inner`` instance, plus an optional helper class
that stacks decorators around a component.
"""
from __future__ import annotations

from typing import Dict, List

from patternsmith.core.config.options import DecoratorComposition, WrapOrder
from patternsmith.core.surface.model import ClassifiedMember, ContractSurface, ContractVariant

from .base import Artifact, PatternGenerator, SynthesisRequest
from .writer import SourceWriter, annotation, render_arguments, render_def


class DecoratorGenerator(PatternGenerator):
    pattern = "decorator"
    type_name_keys = ("base_type_name", "helpers_type_name")

    def default_names(self, contract: ContractSurface) -> Dict[str, str]:
        stem = self.stem(contract)
        return {
            "base_type_name": f"{stem}DecoratorBase",
            "helpers_type_name": f"{stem}Decorators",
        }

    def build(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        contract = request.contract
        members = self.surface(contract)
        if self.sink.has_errors:
            return []

        module = self.new_module(f"Decorator support for {contract.qualified_name}")
        module.import_type(contract.namespace, contract.name)
        w = module.body
        base_name = names["base_type_name"]
        self._write_base(w, contract, base_name, members)
        type_names = [base_name]
        if self.options.composition is DecoratorComposition.HELPERS:
            module.import_stdlib("from typing import Callable")
            w.blank(2)
            self._write_helpers(w, contract, names["helpers_type_name"])
            type_names.append(names["helpers_type_name"])

        return [
            Artifact(
                name=self.artifact_name(contract),
                text=module.render(),
                pattern=self.pattern,
                type_names=tuple(type_names),
            )
        ]

    def _write_base(
        self, w: SourceWriter, contract: ContractSurface, base_name: str, members: tuple
    ) -> None:
        with w.block(f"class {base_name}({contract.name}):"):
            doc = [
                f"Forwarding base for {contract.name} decorators.",
                "",
                "Every member delegates to the wrapped instance; subclasses override",
                "only the members they decorate.",
            ]
            if contract.variant is ContractVariant.PARTIAL_BASE:
                doc += ["", f"{contract.name}.__init__ is not called; state lives on the wrapped instance."]
            w.docstring("\n".join(doc))
            w.blank()
            with w.block(f"def __init__(self, inner: {contract.name}) -> None:"):
                with w.block("if inner is None:"):
                    w.line('raise TypeError("inner must not be None")')
                w.line("self._inner = inner")

            if not any(m.name == "inner" for m in members):
                w.blank()
                w.line("@property")
                with w.block(f"def inner(self) -> {contract.name}:"):
                    w.docstring("The wrapped instance.")
                    w.line("return self._inner")

            for member in members:
                if member.ignored:
                    continue
                w.blank()
                write_forwarding_member(w, member, "self._inner")

    def _write_helpers(self, w: SourceWriter, contract: ContractSurface, helpers_name: str) -> None:
        outer_first = self.options.wrap_order is WrapOrder.OUTER_FIRST
        factory = f"Callable[[{contract.name}], {contract.name}]"
        with w.block(f"class {helpers_name}:"):
            w.docstring(f"Helpers for stacking {contract.name} decorators.")
            w.blank()
            w.line("@staticmethod")
            with w.block(f"def compose(inner: {contract.name}, *decorators: {factory}) -> {contract.name}:"):
                position = "outermost" if outer_first else "innermost"
                w.docstring(f"Wrap ``inner`` in ``decorators``; the first decorator ends up {position}.")
                with w.block("if inner is None:"):
                    w.line('raise TypeError("inner must not be None")')
                w.line("result = inner")
                loop = "reversed(decorators)" if outer_first else "decorators"
                with w.block(f"for decorator in {loop}:"):
                    w.line("result = decorator(result)")
                w.line("return result")


def write_forwarding_member(w: SourceWriter, member: ClassifiedMember, target: str) -> None:
    """Write a method or property that delegates ``member`` to ``target``."""
    descriptor = member.descriptor
    if descriptor.is_data:
        value_type = annotation(descriptor.returns)
        w.line("@property")
        with w.block(f"def {descriptor.name}(self) -> {value_type}:"):
            w.line(f"return {target}.{descriptor.name}")
        if descriptor.setter is not None:
            w.blank()
            w.line(f"@{descriptor.name}.setter")
            with w.block(f"def {descriptor.name}(self, value: {value_type}) -> None:"):
                w.line(f"{target}.{descriptor.name} = value")
        return

    call = f"{target}.{descriptor.name}({render_arguments(descriptor.parameters)})"
    if descriptor.coroutine:
        with w.block(render_def(descriptor, coroutine=True)):
            w.line(f"return await {call}")
    else:
        with w.block(render_def(descriptor)):
            w.line(f"return {call}")


__all__ = ["DecoratorGenerator", "write_forwarding_member"]
