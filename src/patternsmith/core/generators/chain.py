"""Chain generator.

Two models share one entry point shape:

* ``pipeline``: ranked steps wrap a terminal exactly like the composer.
* ``responsibility``: ranked handlers are offered the request in order;
  each returns ``(handled, result)`` and the first that handles it wins.
  An optional default handler (the terminal) answers unhandled requests.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from patternsmith.core.composition.chain import capture_for
from patternsmith.core.composition.planner import CompositionPlan, CompositionPlanner, TerminalRule
from patternsmith.core.composition.steps import PlannedStep
from patternsmith.core.config.options import ChainModel
from patternsmith.core.surface.model import ContractSurface
from patternsmith.core.surface.types import TypeRef

from .base import Artifact, PatternGenerator, SynthesisRequest
from .composer import ALL_VARIANTS, entry_modes, write_pipeline_entries
from .continuations import call_arguments, cancellation_parameter, describe_order, write_host_capture
from .writer import ModuleBuilder, SourceWriter, annotation


class ChainGenerator(PatternGenerator):
    pattern = "chain"
    variants = ALL_VARIANTS
    requires_extensible = True
    type_name_keys = ("chain_type_name",)

    def default_names(self, contract: ContractSurface) -> Dict[str, str]:
        return {
            "chain_type_name": f"{contract.name}Chain",
            "handle_method_name": "handle",
            "handle_async_method_name": "handle_async",
            "try_handle_method_name": "try_handle",
            "try_handle_async_method_name": "try_handle_async",
        }

    def build(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        host = request.contract
        responsibility = self.options.chain_model is ChainModel.RESPONSIBILITY
        planner = CompositionPlanner(
            self.handles,
            self.sink,
            cancellation_types=self.context.cancellation_types,
            terminal_rule=TerminalRule.AT_MOST_ONE if responsibility else TerminalRule.EXACTLY_ONE,
            step_arity=1 if responsibility else 2,
        )
        plan = planner.plan(
            host,
            request.steps,
            request.terminals,
            wrap_order=self.options.wrap_order,
            async_mode=self.options.async_mode,
        )
        if plan is None:
            return []

        model = "responsibility chain" if responsibility else "pipeline"
        module = self.new_module(f"Chain ({model}) for {host.qualified_name}")
        w = module.body
        type_name = names["chain_type_name"]
        with w.block(f"class {type_name}:"):
            if responsibility:
                w.docstring(
                    f"Chain of responsibility over {host.name} handlers.\n\n"
                    f"Handlers are tried in order: {describe_order(plan)}."
                )
            else:
                w.docstring(f"Pipeline entry points for {host.name}.")
            w.blank()
            if responsibility:
                self._write_responsibility(w, module, plan, names)
            else:
                write_pipeline_entries(
                    w,
                    module,
                    plan,
                    sync_name=names["handle_method_name"],
                    async_name=names["handle_async_method_name"],
                    blocking_entry=self.options.blocking_entry,
                )

        return [
            Artifact(
                name=self.artifact_name(host),
                text=module.render(),
                pattern=self.pattern,
                type_names=(type_name,),
            )
        ]

    def _write_responsibility(
        self, w: SourceWriter, module: ModuleBuilder, plan: CompositionPlan, names: Dict[str, str]
    ) -> None:
        cancellation = cancellation_parameter(plan)
        for index, is_async in enumerate(entry_modes(plan, self.options.blocking_entry)):
            if index:
                w.blank()
            suffix = "_async" if is_async else ""
            try_name = names[f"try_handle{suffix}_method_name"]
            handle_name = names[f"handle{suffix}_method_name"]
            self._write_try_handle(w, module, plan, try_name, is_async, cancellation)
            w.blank()
            self._write_handle_via_try(w, module, plan, handle_name, try_name, is_async, cancellation)

    def _signature(
        self, name: str, plan: CompositionPlan, is_async: bool, returns: str, cancellation: Optional[str]
    ) -> str:
        keyword = "async def" if is_async else "def"
        params = ["self", f"request: {annotation(plan.input_type)}"]
        if cancellation:
            params.append(cancellation)
        return f"{keyword} {name}({', '.join(params)}) -> {returns}:"

    def _invoke(self, module: ModuleBuilder, step: PlannedStep, is_async: bool, target: str) -> str:
        call = f"{target}.{step.method}({', '.join(call_arguments(step, 'request', None))})"
        if is_async and step.is_async:
            return f"await {call}"
        if not is_async and step.is_async:
            return f"{module.use_helper('_run_blocking')}({call})"
        return call

    def _write_try_handle(
        self,
        w: SourceWriter,
        module: ModuleBuilder,
        plan: CompositionPlan,
        name: str,
        is_async: bool,
        cancellation: Optional[str],
    ) -> None:
        result = TypeRef("tuple", (TypeRef("bool"), TypeRef("|", (plan.output_type, TypeRef("None")))))
        with w.block(self._signature(name, plan, is_async, annotation(result), cancellation)):
            w.docstring("Offer ``request`` to each handler in order; ``(False, None)`` when none handles it.")
            write_host_capture(w, module, capture_for(plan.host))
            for step in plan.steps:
                w.line(f"_handled, _result = {self._invoke(module, step, is_async, 'host')}")
                with w.block("if _handled:"):
                    w.line("return True, _result")
            w.line("return False, None")

    def _write_handle_via_try(
        self,
        w: SourceWriter,
        module: ModuleBuilder,
        plan: CompositionPlan,
        name: str,
        try_name: str,
        is_async: bool,
        cancellation: Optional[str],
    ) -> None:
        with w.block(self._signature(name, plan, is_async, annotation(plan.output_type), cancellation)):
            if plan.terminal is not None:
                w.docstring(f"Handle ``request``, falling back to {plan.terminal.name} when no handler accepts it.")
            else:
                w.docstring("Handle ``request``; raises ``LookupError`` when no handler accepts it.")
            forwarded = "request, cancellation" if cancellation else "request"
            awaiting = "await " if is_async else ""
            w.line(f"_handled, _result = {awaiting}self.{try_name}({forwarded})")
            with w.block("if _handled:"):
                w.line("return _result")
            if plan.terminal is not None:
                w.line(f"return {self._invoke(module, plan.terminal, is_async, 'self')}")
            else:
                w.line(f'raise LookupError("No {plan.host.name} handler accepted the request")')


__all__ = ["ChainGenerator"]
