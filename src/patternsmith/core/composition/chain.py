"""Chain synthesizer: fold a plan into nested continuations.

The terminal is the innermost continuation. Steps are folded from the
innermost ordered step to the outermost; each continuation calls its step
with the input and the continuation built just before it, and the last one
built is the entry point. Every continuation gets its own name, so closures
never observe a later rebinding.

When a step's async shape differs from the chain's, the continuation is
bridged:

* a sync step in an async chain runs inside a coroutine (its result becomes
  an already-completed handle) and receives a ``next`` that blocks on the
  async continuation;
* an async step in a sync chain is driven to completion by blocking, and
  receives a ``next`` that wraps the sync continuation in a completed
  handle.

Blocking from inside a running event loop runs the awaitable on a worker
thread with its own loop; awaitables bound to the caller's loop will
deadlock there.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from patternsmith.core.surface.model import ContractSurface, HostSemantics

from .planner import CompositionPlan
from .steps import PlannedStep

TERMINAL_NAME = "_terminal"


class HostCapture(str, Enum):
    """How continuations capture the host."""

    REFERENCE = "reference"
    SNAPSHOT = "snapshot"


class Bridge(str, Enum):
    DIRECT = "direct"
    AWAIT = "await"
    COMPLETED = "completed"
    BLOCKING = "blocking"


class NextBridge(str, Enum):
    DIRECT = "direct"
    BLOCKING = "blocking"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Continuation:
    name: str
    target: PlannedStep
    next_name: Optional[str]
    bridge: Bridge
    next_bridge: NextBridge = NextBridge.DIRECT


@dataclass(frozen=True)
class ContinuationChain:
    """Continuations innermost first; ``entry`` names the outermost one."""

    links: Tuple[Continuation, ...]
    entry: str
    is_async: bool
    capture: HostCapture

    @property
    def needs_blocking(self) -> bool:
        return any(
            link.bridge is Bridge.BLOCKING or link.next_bridge is NextBridge.BLOCKING for link in self.links
        )

    @property
    def needs_completed(self) -> bool:
        return any(link.next_bridge is NextBridge.COMPLETED for link in self.links)

    @property
    def order(self) -> List[str]:
        """Method names in execution order, entry first."""
        return [link.target.method for link in reversed(self.links)]


def capture_for(host: ContractSurface) -> HostCapture:
    return HostCapture.SNAPSHOT if host.semantics is HostSemantics.VALUE else HostCapture.REFERENCE


class ChainSynthesizer:
    def synthesize(self, plan: CompositionPlan, *, is_async: Optional[bool] = None) -> ContinuationChain:
        """Build the continuation chain for ``plan``.

        ``is_async`` selects the chain's own mode; it defaults to the plan's
        mode. A sync chain over an async plan bridges every async member by
        blocking.
        """
        if plan.terminal is None:
            raise ValueError(f"Plan for '{plan.host.name}' has no terminal to build a chain around")
        chain_async = plan.is_async if is_async is None else is_async

        links: List[Continuation] = [
            Continuation(
                name=TERMINAL_NAME,
                target=plan.terminal,
                next_name=None,
                bridge=self._bridge(plan.terminal, chain_async),
            )
        ]
        previous = TERMINAL_NAME
        for index in range(len(plan.steps) - 1, -1, -1):
            step = plan.steps[index]
            name = f"_step{index}"
            links.append(
                Continuation(
                    name=name,
                    target=step,
                    next_name=previous,
                    bridge=self._bridge(step, chain_async),
                    next_bridge=self._next_bridge(step, chain_async),
                )
            )
            previous = name

        return ContinuationChain(
            links=tuple(links),
            entry=previous,
            is_async=chain_async,
            capture=capture_for(plan.host),
        )

    def _bridge(self, step: PlannedStep, chain_async: bool) -> Bridge:
        if chain_async:
            return Bridge.AWAIT if step.is_async else Bridge.COMPLETED
        return Bridge.BLOCKING if step.is_async else Bridge.DIRECT

    def _next_bridge(self, step: PlannedStep, chain_async: bool) -> NextBridge:
        if chain_async and not step.is_async:
            return NextBridge.BLOCKING
        if not chain_async and step.is_async:
            return NextBridge.COMPLETED
        return NextBridge.DIRECT


__all__ = [
    "ChainSynthesizer",
    "ContinuationChain",
    "Continuation",
    "Bridge",
    "NextBridge",
    "HostCapture",
    "capture_for",
    "TERMINAL_NAME",
]
