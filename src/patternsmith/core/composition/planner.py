"""Composition planner: validate declared steps and fix their order.

A plan needs at least one step, a terminal (exactly one for pipelines, at
most one default handler for responsibility chains) and unique ranks. Its
async mode is forced on by configuration or inferred from any asynchronous
step or terminal; async members under a forced-off configuration are
errors. Steps are ordered by rank (ascending when the lowest rank is
outermost, descending otherwise) with the step name as tie-break.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from patternsmith.core.config.options import AsyncMode, WrapOrder
from patternsmith.core.diagnostics import DiagnosticSink, catalog
from patternsmith.core.surface.handles import CompletionHandles
from patternsmith.core.surface.model import ContractSurface, MemberDescriptor, Parameter, ParameterKind
from patternsmith.core.surface.types import NONE, TypeRef

from .steps import CompositionStep, PlannedStep, TerminalStep

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_TYPES = ("CancellationToken", "asyncio.Event", "threading.Event")


class TerminalRule(str, Enum):
    EXACTLY_ONE = "exactly_one"
    AT_MOST_ONE = "at_most_one"


@dataclass(frozen=True)
class CompositionPlan:
    host: ContractSurface
    steps: Tuple[PlannedStep, ...]
    terminal: Optional[PlannedStep]
    is_async: bool
    input_type: TypeRef
    output_type: TypeRef
    wrap_order: WrapOrder

    @property
    def members(self) -> Tuple[PlannedStep, ...]:
        return self.steps + ((self.terminal,) if self.terminal is not None else ())

    @property
    def all_sync(self) -> bool:
        return not any(step.is_async for step in self.members)

    @property
    def threads_cancellation(self) -> bool:
        return any(step.cancellation is not None for step in self.members)


class CompositionPlanner:
    """Build a ``CompositionPlan`` from declared steps, reporting composition errors.

    Args:
        handles: Completion-handle classifier.
        sink: Diagnostic sink for the host being composed.
        cancellation_types: Parameter type names recognized as a cancellation signal.
        terminal_rule: Terminal cardinality rule.
        step_arity: Positional parameters of a step (2 for ``(input, next)``,
            1 for chain handlers that only see the input).
    """

    def __init__(
        self,
        handles: CompletionHandles,
        sink: DiagnosticSink,
        *,
        cancellation_types: Iterable[str] = DEFAULT_CANCELLATION_TYPES,
        terminal_rule: TerminalRule = TerminalRule.EXACTLY_ONE,
        step_arity: int = 2,
    ) -> None:
        self.handles = handles
        self.sink = sink
        names = tuple(cancellation_types)
        self.cancellation_names = frozenset(names) | {name.rsplit(".", 1)[-1] for name in names}
        self.terminal_rule = terminal_rule
        self.step_arity = step_arity

    def plan(
        self,
        host: ContractSurface,
        steps: Sequence[CompositionStep],
        terminals: Sequence[TerminalStep],
        *,
        wrap_order: WrapOrder = WrapOrder.OUTER_FIRST,
        async_mode: AsyncMode = AsyncMode.AUTO,
    ) -> Optional[CompositionPlan]:
        anchor = host.anchor
        if not steps:
            self.sink.report(catalog.NO_STEPS, anchor, host.name)
            return None

        mark = self.sink.mark()
        self._check_terminals(host, terminals)
        self._check_ranks(host, steps)

        planned_steps = [self._plan_step(step) for step in steps]
        planned_terminal = self._plan_terminal(terminals[0]) if len(terminals) == 1 else None

        members = [p for p in planned_steps if p is not None]
        if planned_terminal is not None:
            members.append(planned_terminal)
        async_members = [m for m in members if m.is_async]
        if async_mode is AsyncMode.OFF:
            for member in async_members:
                self.sink.report(catalog.ASYNC_DISABLED, member.member.anchor or anchor, host.name, member.name)
        if any(m.cancellation is not None for m in members):
            for member in async_members:
                if member.cancellation is None and not member.is_terminal:
                    self.sink.report(catalog.MISSING_CANCELLATION, member.member.anchor or anchor, member.name)

        if self.sink.errors_since(mark):
            logger.info("composition of %s aborted with errors", host.qualified_name)
            return None

        ordered = self._order([p for p in planned_steps if p is not None], wrap_order)
        is_async = async_mode is AsyncMode.ON or bool(async_members)
        plan = CompositionPlan(
            host=host,
            steps=tuple(ordered),
            terminal=planned_terminal,
            is_async=is_async,
            input_type=self._input_type(ordered, planned_terminal),
            output_type=self._output_type(ordered, planned_terminal),
            wrap_order=wrap_order,
        )
        logger.debug(
            "planned %s: %s -> %s (%s)",
            host.name,
            " -> ".join(step.name for step in plan.steps),
            planned_terminal.name if planned_terminal else "<none>",
            "async" if is_async else "sync",
        )
        return plan

    def _check_terminals(self, host: ContractSurface, terminals: Sequence[TerminalStep]) -> None:
        names = ", ".join(t.name for t in terminals)
        if self.terminal_rule is TerminalRule.EXACTLY_ONE:
            if not terminals:
                self.sink.report(catalog.MISSING_TERMINAL, host.anchor, host.name)
            elif len(terminals) > 1:
                self.sink.report(catalog.MULTIPLE_TERMINALS, host.anchor, host.name, len(terminals), names)
        else:
            if not terminals:
                self.sink.report(catalog.MISSING_DEFAULT, host.anchor, host.name)
            elif len(terminals) > 1:
                self.sink.report(catalog.MULTIPLE_DEFAULTS, host.anchor, host.name, len(terminals), names)

    def _check_ranks(self, host: ContractSurface, steps: Sequence[CompositionStep]) -> None:
        by_rank: Dict[int, List[str]] = defaultdict(list)
        for step in steps:
            by_rank[step.rank].append(step.name)
        for rank in sorted(by_rank):
            names = by_rank[rank]
            if len(names) > 1:
                listed = ", ".join(f"'{name}'" for name in sorted(names))
                self.sink.report(catalog.DUPLICATE_RANK, host.anchor, host.name, listed, rank)

    def _plan_step(self, step: CompositionStep) -> Optional[PlannedStep]:
        cancellation, problem = self._split_signature(step.member, self.step_arity)
        if problem:
            self.sink.report(catalog.INVALID_STEP_SIGNATURE, step.anchor, step.name, problem)
            return None
        return PlannedStep(
            member=step.member,
            name=step.name,
            rank=step.rank,
            async_kind=self.handles.classify(step.member),
            cancellation=cancellation,
        )

    def _plan_terminal(self, terminal: TerminalStep) -> Optional[PlannedStep]:
        cancellation, problem = self._split_signature(terminal.member, 1)
        if problem:
            self.sink.report(catalog.INVALID_TERMINAL_SIGNATURE, terminal.anchor, terminal.name, problem)
            return None
        return PlannedStep(
            member=terminal.member,
            name=terminal.name,
            rank=None,
            async_kind=self.handles.classify(terminal.member),
            cancellation=cancellation,
        )

    def _split_signature(self, member: MemberDescriptor, arity: int) -> Tuple[Optional[Parameter], str]:
        params = list(member.parameters)
        cancellation = None
        if params and self.is_cancellation(params[-1].type):
            cancellation = params.pop()
        if len(params) != arity:
            return None, f"expected {arity} parameter(s) besides cancellation, found {len(params)}"
        for param in params:
            if param.kind is not ParameterKind.POSITIONAL:
                return None, f"parameter '{param.name}' must be positional"
        return cancellation, ""

    def is_cancellation(self, type_ref: TypeRef) -> bool:
        if type_ref.name == "Optional" and len(type_ref.args) == 1:
            type_ref = type_ref.args[0]
        elif type_ref.name == "|":
            rest = [arg for arg in type_ref.args if not arg.is_none]
            if len(rest) == 1:
                type_ref = rest[0]
        return type_ref.name in self.cancellation_names

    def _order(self, steps: List[PlannedStep], wrap_order: WrapOrder) -> List[PlannedStep]:
        if wrap_order is WrapOrder.OUTER_FIRST:
            return sorted(steps, key=lambda s: (s.rank, s.name))
        return sorted(steps, key=lambda s: (-(s.rank or 0), s.name))

    def _input_type(self, ordered: Sequence[PlannedStep], terminal: Optional[PlannedStep]) -> TypeRef:
        source = terminal or (ordered[0] if ordered else None)
        if source is None or not source.member.parameters:
            return NONE
        return source.member.parameters[0].type

    def _output_type(self, ordered: Sequence[PlannedStep], terminal: Optional[PlannedStep]) -> TypeRef:
        if terminal is not None:
            return self.handles.result_type(terminal.member)
        if not ordered:
            return NONE
        result = self.handles.result_type(ordered[0].member)
        # Chain handlers report (handled, value).
        if result.base_name in ("tuple", "Tuple") and len(result.args) == 2:
            return result.args[1]
        return result


__all__ = ["CompositionPlanner", "CompositionPlan", "TerminalRule", "DEFAULT_CANCELLATION_TYPES"]
