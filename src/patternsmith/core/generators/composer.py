"""Composer generator.

Emits a mixin for the host type whose entry points run the host's ranked
steps around its terminal. The host inherits the mixin, which is how the
generated fragment is merged into the host's declaration.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from patternsmith.core.composition.chain import ChainSynthesizer
from patternsmith.core.composition.planner import CompositionPlan, CompositionPlanner
from patternsmith.core.surface.model import ContractSurface, ContractVariant

from .base import Artifact, PatternGenerator, SynthesisRequest
from .continuations import cancellation_parameter, describe_order, entry_signature, write_chain_body
from .writer import ModuleBuilder, SourceWriter

ALL_VARIANTS = frozenset(ContractVariant)


def entry_modes(plan: CompositionPlan, blocking_entry: bool) -> Tuple[bool, ...]:
    """Which entry points to emit: ``False`` for sync, ``True`` for async.

    A sync plan gets a sync entry. An async plan gets an async entry, plus a
    sync one when every member is synchronous (async was forced on) or when a
    blocking sync entry was requested.
    """
    if not plan.is_async:
        return (False,)
    if plan.all_sync or blocking_entry:
        return (False, True)
    return (True,)


def write_pipeline_entries(
    w: SourceWriter,
    module: ModuleBuilder,
    plan: CompositionPlan,
    *,
    sync_name: str,
    async_name: str,
    blocking_entry: bool,
) -> None:
    synthesizer = ChainSynthesizer()
    cancellation = cancellation_parameter(plan)
    for index, is_async in enumerate(entry_modes(plan, blocking_entry)):
        if index:
            w.blank()
        chain = synthesizer.synthesize(plan, is_async=is_async)
        name = async_name if is_async else sync_name
        signature = entry_signature(
            name,
            is_async=is_async,
            input_type=plan.input_type,
            output_type=plan.output_type,
            cancellation=cancellation,
        )
        with w.block(signature):
            if is_async or plan.all_sync:
                w.docstring(f"Run ``request`` through the pipeline: {describe_order(plan)}.")
            else:
                w.docstring(
                    f"Run ``request`` through the pipeline, blocking on asynchronous steps.\n\n"
                    f"Order: {describe_order(plan)}."
                )
            write_chain_body(w, module, chain)


class ComposerGenerator(PatternGenerator):
    pattern = "composer"
    variants = ALL_VARIANTS
    requires_extensible = True
    type_name_keys = ("mixin_type_name",)

    def default_names(self, contract: ContractSurface) -> Dict[str, str]:
        return {
            "mixin_type_name": f"{contract.name}Composer",
            "invoke_method_name": "invoke",
            "invoke_async_method_name": "invoke_async",
        }

    def build(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        host = request.contract
        planner = CompositionPlanner(self.handles, self.sink, cancellation_types=self.context.cancellation_types)
        plan = planner.plan(
            host,
            request.steps,
            request.terminals,
            wrap_order=self.options.wrap_order,
            async_mode=self.options.async_mode,
        )
        if plan is None:
            return []

        module = self.new_module(f"Pipeline composition for {host.qualified_name}")
        w = module.body
        mixin = names["mixin_type_name"]
        with w.block(f"class {mixin}:"):
            w.docstring(
                f"Pipeline entry points for {host.name}.\n\n"
                f"Mix into {host.name}; every call builds a fresh continuation chain."
            )
            w.blank()
            write_pipeline_entries(
                w,
                module,
                plan,
                sync_name=names["invoke_method_name"],
                async_name=names["invoke_async_method_name"],
                blocking_entry=self.options.blocking_entry,
            )

        return [
            Artifact(
                name=self.artifact_name(host),
                text=module.render(),
                pattern=self.pattern,
                type_names=(mixin,),
            )
        ]


__all__ = ["ComposerGenerator", "entry_modes", "write_pipeline_entries", "ALL_VARIANTS"]
