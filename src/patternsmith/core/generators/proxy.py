"""Proxy generator.

Emits, in one module, a method-context record, an interceptor base class
with no-op hooks and a proxy implementing the contract. Every forwarded
method builds a context, runs ``before`` hooks outermost first, calls the
wrapped instance and runs ``after`` (or ``on_exception``) hooks innermost
first. Properties are forwarded without interception.
"""
from __future__ import annotations

from typing import Dict, List, Sequence

from patternsmith.core.config.options import AsyncMode, ExceptionPolicy, InterceptorMode
from patternsmith.core.diagnostics import catalog
from patternsmith.core.surface.classifier import member_anchor
from patternsmith.core.surface.model import ClassifiedMember, ContractSurface
from patternsmith.core.surface.types import TypeRef

from .base import Artifact, PatternGenerator, SynthesisRequest
from .decorator import write_forwarding_member
from .writer import SourceWriter, argument_dict, render_arguments, render_def


class ProxyGenerator(PatternGenerator):
    pattern = "proxy"
    type_name_keys = ("proxy_type_name", "interceptor_type_name", "context_type_name")

    def default_names(self, contract: ContractSurface) -> Dict[str, str]:
        stem = self.stem(contract)
        return {
            "proxy_type_name": f"{stem}Proxy",
            "interceptor_type_name": f"{stem}Interceptor",
            "context_type_name": f"{stem}MethodContext",
        }

    def build(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        contract = request.contract
        members = [m for m in self.surface(contract) if not m.ignored]
        if self.sink.has_errors:
            return []

        intercepting = self.options.interceptor_mode is not InterceptorMode.NONE
        async_members = [m for m in members if m.async_kind.is_async and not m.descriptor.is_data]
        async_enabled = self.options.async_mode is not AsyncMode.OFF
        if not async_enabled and intercepting:
            for member in async_members:
                self.sink.report(catalog.ASYNC_SURFACE_DISABLED, member_anchor(contract, member.descriptor), member.name)
        async_hooks = async_enabled and (bool(async_members) or self.options.async_mode is AsyncMode.ON)

        module = self.new_module(f"Proxy for {contract.qualified_name}")
        module.import_type(contract.namespace, contract.name)
        w = module.body
        type_names = [names["proxy_type_name"]]
        if intercepting:
            if self.options.interceptor_mode is InterceptorMode.PIPELINE:
                module.import_stdlib("from typing import Any, Dict, Iterable, Optional")
            else:
                module.import_stdlib("from typing import Any, Dict, Optional")
            self._write_context(w, contract, names["context_type_name"])
            w.blank(2)
            self._write_interceptor(w, contract, names, async_hooks)
            w.blank(2)
            type_names = [names["context_type_name"], names["interceptor_type_name"], *type_names]
        self._write_proxy(w, contract, names, members, async_enabled)

        return [
            Artifact(
                name=self.artifact_name(contract),
                text=module.render(),
                pattern=self.pattern,
                type_names=tuple(type_names),
            )
        ]

    def _write_context(self, w: SourceWriter, contract: ContractSurface, name: str) -> None:
        with w.block(f"class {name}:"):
            w.docstring(f"Details of one intercepted {contract.name} call.")
            w.blank()
            w.line('__slots__ = ("member", "arguments", "result", "exception")')
            w.blank()
            with w.block("def __init__(self, member: str, arguments: Dict[str, Any]) -> None:"):
                w.line("self.member = member")
                w.line("self.arguments = arguments")
                w.line("self.result: Any = None")
                w.line("self.exception: Optional[BaseException] = None")

    def _write_interceptor(self, w: SourceWriter, contract: ContractSurface, names: Dict[str, str], async_hooks: bool) -> None:
        context = names["context_type_name"]
        with w.block(f"class {names['interceptor_type_name']}:"):
            w.docstring(
                f"Hooks around {contract.name} calls made through {names['proxy_type_name']}.\n\n"
                "All hooks are no-ops; override the ones you need."
            )
            for hook, extra in (("before", ""), ("after", ""), ("on_exception", ", error: BaseException")):
                w.blank()
                with w.block(f"def {hook}(self, context: {context}{extra}) -> None:"):
                    w.line("pass")
            if async_hooks:
                for hook, extra, call_extra in (
                    ("before", "", ""),
                    ("after", "", ""),
                    ("on_exception", ", error: BaseException", ", error"),
                ):
                    w.blank()
                    with w.block(f"async def {hook}_async(self, context: {context}{extra}) -> None:"):
                        w.line(f"self.{hook}(context{call_extra})")

    def _write_proxy(
        self,
        w: SourceWriter,
        contract: ContractSurface,
        names: Dict[str, str],
        members: Sequence[ClassifiedMember],
        async_enabled: bool,
    ) -> None:
        mode = self.options.interceptor_mode
        interceptor = names["interceptor_type_name"]
        with w.block(f"class {names['proxy_type_name']}({contract.name}):"):
            if mode is InterceptorMode.NONE:
                w.docstring(f"Forwarding proxy for {contract.name}.")
            elif mode is InterceptorMode.SINGLE:
                w.docstring(f"Proxy for {contract.name} with an optional interceptor.")
            else:
                w.docstring(
                    f"Proxy for {contract.name} running a pipeline of interceptors.\n\n"
                    "The first interceptor is outermost: its ``before`` runs first and its\n"
                    "``after`` runs last."
                )
            w.blank()
            if mode is InterceptorMode.NONE:
                signature = f"def __init__(self, inner: {contract.name}) -> None:"
            elif mode is InterceptorMode.SINGLE:
                signature = (
                    f"def __init__(self, inner: {contract.name}, interceptor: Optional[{interceptor}] = None) -> None:"
                )
            else:
                signature = f"def __init__(self, inner: {contract.name}, interceptors: Iterable[{interceptor}] = ()) -> None:"
            with w.block(signature):
                with w.block("if inner is None:"):
                    w.line('raise TypeError("inner must not be None")')
                w.line("self._inner = inner")
                if mode is InterceptorMode.SINGLE:
                    w.line("self._interceptors = (interceptor,) if interceptor is not None else ()")
                elif mode is InterceptorMode.PIPELINE:
                    w.line("self._interceptors = tuple(interceptors)")

            for member in members:
                w.blank()
                if mode is InterceptorMode.NONE or member.descriptor.is_data:
                    write_forwarding_member(w, member, "self._inner")
                else:
                    use_async = async_enabled and member.async_kind.is_async
                    self._write_intercepted(w, member, names["context_type_name"], use_async)

    def _write_intercepted(self, w: SourceWriter, member: ClassifiedMember, context: str, use_async: bool) -> None:
        descriptor = member.descriptor
        call = f"self._inner.{descriptor.name}({render_arguments(descriptor.parameters)})"
        hook_await = "await " if use_async else ""
        suffix = "_async" if use_async else ""
        if use_async:
            header = render_def(descriptor, coroutine=True, returns=member.result)
        elif descriptor.coroutine:
            # Sync interception of a coroutine method hands back the coroutine object.
            header = render_def(descriptor, returns=_awaitable_of(member))
        else:
            header = render_def(descriptor)

        with w.block(header):
            w.line(f'_context = {context}("{descriptor.name}", {argument_dict(descriptor.parameters)})')
            with w.block("for _interceptor in self._interceptors:"):
                w.line(f"{hook_await}_interceptor.before{suffix}(_context)")
            with w.block("try:"):
                w.line(f"_result = {'await ' if use_async else ''}{call}")
            with w.block("except Exception as _error:"):
                w.line("_context.exception = _error")
                with w.block("for _interceptor in reversed(self._interceptors):"):
                    w.line(f"{hook_await}_interceptor.on_exception{suffix}(_context, _error)")
                if self.options.exception_policy is ExceptionPolicy.SWALLOW:
                    w.line("return None")
                else:
                    w.line("raise")
            w.line("_context.result = _result")
            with w.block("for _interceptor in reversed(self._interceptors):"):
                w.line(f"{hook_await}_interceptor.after{suffix}(_context)")
            w.line("return _result")


def _awaitable_of(member: ClassifiedMember) -> TypeRef:
    return TypeRef("Awaitable", (member.result,))


__all__ = ["ProxyGenerator"]
