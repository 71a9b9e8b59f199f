"""Tests for folding a composition plan into continuations."""
from __future__ import annotations

from helpers.builders import contract, method, param


def _plan(*ranked, terminal_async=False, host=None):
    from patternsmith.core.composition import CompositionPlanner, CompositionStep, TerminalStep
    from patternsmith.core.diagnostics import DiagnosticSink
    from patternsmith.core.surface.handles import CompletionHandles

    steps = [
        CompositionStep(
            member=method(name, param("request", "str"), param("next", "Any"), returns="str", coroutine=is_async),
            rank=rank,
        )
        for name, rank, is_async in ranked
    ]
    terminal = TerminalStep(member=method("run", param("request", "str"), returns="str", coroutine=terminal_async))
    sink = DiagnosticSink()
    plan = CompositionPlanner(CompletionHandles(), sink).plan(host or contract("Service"), steps, [terminal])
    assert plan is not None, [d.render() for d in sink.diagnostics]
    return plan


class TestChainSynthesizer:
    def test_lower_rank_is_outermost(self) -> None:
        from patternsmith.core.composition import ChainSynthesizer

        chain = ChainSynthesizer().synthesize(_plan(("slow", 10, False), ("fast", 5, False)))

        assert chain.order == ["fast", "slow", "run"]
        assert chain.entry == "_step0"
        assert [link.name for link in chain.links] == ["_terminal", "_step1", "_step0"]
        assert chain.links[1].next_name == "_terminal"
        assert chain.links[2].next_name == "_step1"

    def test_sync_plan_has_no_bridges(self) -> None:
        from patternsmith.core.composition import Bridge, ChainSynthesizer, NextBridge

        chain = ChainSynthesizer().synthesize(_plan(("audit", 1, False)))

        assert chain.is_async is False
        assert {link.bridge for link in chain.links} == {Bridge.DIRECT}
        assert {link.next_bridge for link in chain.links} == {NextBridge.DIRECT}
        assert not chain.needs_blocking

    def test_sync_step_in_async_chain_is_bridged(self) -> None:
        from patternsmith.core.composition import Bridge, ChainSynthesizer, NextBridge

        chain = ChainSynthesizer().synthesize(_plan(("audit", 1, False), terminal_async=True))
        terminal, audit = chain.links

        assert chain.is_async is True
        assert terminal.bridge is Bridge.AWAIT
        assert audit.bridge is Bridge.COMPLETED
        assert audit.next_bridge is NextBridge.BLOCKING
        assert chain.needs_blocking

    def test_async_step_in_sync_chain_blocks(self) -> None:
        from patternsmith.core.composition import Bridge, ChainSynthesizer, NextBridge

        chain = ChainSynthesizer().synthesize(_plan(("audit", 1, True)), is_async=False)
        terminal, audit = chain.links

        assert terminal.bridge is Bridge.DIRECT
        assert audit.bridge is Bridge.BLOCKING
        assert audit.next_bridge is NextBridge.COMPLETED
        assert chain.needs_completed

    def test_value_host_is_snapshotted(self) -> None:
        from patternsmith.core.composition import ChainSynthesizer, HostCapture
        from patternsmith.core.surface.model import HostSemantics

        plan = _plan(("audit", 1, False), host=contract("Money", semantics=HostSemantics.VALUE))

        assert ChainSynthesizer().synthesize(plan).capture is HostCapture.SNAPSHOT

    def test_plan_without_terminal_is_rejected(self) -> None:
        import dataclasses

        import pytest

        from patternsmith.core.composition import ChainSynthesizer

        plan = dataclasses.replace(_plan(("audit", 1, False)), terminal=None)

        with pytest.raises(ValueError):
            ChainSynthesizer().synthesize(plan)
