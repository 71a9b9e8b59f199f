"""Render a ``ContinuationChain`` as the body of a pipeline entry method."""
from __future__ import annotations

from typing import List, Optional

from patternsmith.core.composition.chain import Bridge, ContinuationChain, HostCapture, NextBridge
from patternsmith.core.composition.planner import CompositionPlan
from patternsmith.core.composition.steps import PlannedStep
from patternsmith.core.surface.model import ParameterKind
from patternsmith.core.surface.types import TypeRef

from .writer import ModuleBuilder, SourceWriter, annotation


def cancellation_parameter(plan: CompositionPlan) -> Optional[str]:
    """Entry-point parameter text for the cancellation signal, if any step takes one."""
    for step in plan.members:
        if step.cancellation is not None:
            return f"cancellation: {annotation(_without_none(step.cancellation.type))} | None = None"
    return None


def _without_none(type_ref: TypeRef) -> TypeRef:
    if type_ref.name == "Optional" and len(type_ref.args) == 1:
        return type_ref.args[0]
    if type_ref.name == "|":
        rest = tuple(arg for arg in type_ref.args if not arg.is_none)
        return rest[0] if len(rest) == 1 else TypeRef("|", rest)
    return type_ref


def entry_signature(
    name: str,
    *,
    is_async: bool,
    input_type: TypeRef,
    output_type: TypeRef,
    cancellation: Optional[str],
) -> str:
    keyword = "async def" if is_async else "def"
    params = ["self", f"request: {annotation(input_type)}"]
    if cancellation:
        params.append(cancellation)
    return f"{keyword} {name}({', '.join(params)}) -> {annotation(output_type)}:"


def call_arguments(step: PlannedStep, value: str, next_expr: Optional[str]) -> List[str]:
    args = [value]
    if next_expr is not None:
        args.append(next_expr)
    if step.cancellation is not None:
        if step.cancellation.kind is ParameterKind.KEYWORD_ONLY:
            args.append(f"{step.cancellation.name}=cancellation")
        else:
            args.append("cancellation")
    return args


def write_host_capture(w: SourceWriter, module: ModuleBuilder, capture: HostCapture) -> None:
    if capture is HostCapture.SNAPSHOT:
        module.import_stdlib("import copy")
        w.line("host = copy.copy(self)")
    else:
        w.line("host = self")


def write_chain_body(w: SourceWriter, module: ModuleBuilder, chain: ContinuationChain) -> None:
    """Write the continuations and the entry call (inside an entry method)."""
    write_host_capture(w, module, chain.capture)
    for link in chain.links:
        w.blank()
        next_expr: Optional[str] = None
        if link.next_name is not None:
            next_expr = link.next_name
            if link.next_bridge is NextBridge.BLOCKING:
                next_expr = f"lambda next_value: {module.use_helper('_run_blocking')}({link.next_name}(next_value))"
            elif link.next_bridge is NextBridge.COMPLETED:
                next_expr = f"lambda next_value: {module.use_helper('_completed')}({link.next_name}(next_value))"
        call = f"host.{link.target.method}({', '.join(call_arguments(link.target, 'value', next_expr))})"
        keyword = "async def" if chain.is_async else "def"
        with w.block(f"{keyword} {link.name}(value):"):
            if link.bridge is Bridge.AWAIT:
                w.line(f"return await {call}")
            elif link.bridge is Bridge.BLOCKING:
                w.line(f"return {module.use_helper('_run_blocking')}({call})")
            else:
                w.line(f"return {call}")
    w.blank()
    w.line(f"return {'await ' if chain.is_async else ''}{chain.entry}(request)")


def describe_order(plan: CompositionPlan) -> str:
    parts = [f"{step.name} (rank {step.rank})" for step in plan.steps]
    if plan.terminal is not None:
        parts.append(plan.terminal.name)
    return " -> ".join(parts)


__all__ = [
    "cancellation_parameter",
    "entry_signature",
    "call_arguments",
    "write_host_capture",
    "write_chain_body",
    "describe_order",
]
