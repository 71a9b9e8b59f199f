"""Tests for the chain generator (pipeline and responsibility models)."""
from __future__ import annotations

import asyncio

import pytest

from helpers.builders import contract, ids, load_artifact, make_context, method, param


def _handler(name, rank, *, coroutine=False):
    from patternsmith.core.composition import CompositionStep

    member = method(name, param("request", "str"), returns="tuple[bool, str]", coroutine=coroutine)
    return CompositionStep(member=member, rank=rank)


def _fallback(*, coroutine=False):
    from patternsmith.core.composition import TerminalStep

    return TerminalStep(member=method("fallback", param("request", "str"), returns="str", coroutine=coroutine))


def _generate(steps, terminals, **options):
    from patternsmith.core.generators import ChainGenerator, SynthesisRequest
    from patternsmith.core.surface.model import ContractVariant

    host = contract("Payments", namespace="shop.payments", variant=ContractVariant.CONCRETE)
    context = make_context(**options)
    request = SynthesisRequest(pattern="chain", contract=host, steps=tuple(steps), terminals=tuple(terminals))
    return ChainGenerator(context).generate(request), context.sink


def _load(monkeypatch, steps, terminals, **options):
    artifacts, sink = _generate(steps, terminals, **options)
    assert len(artifacts) == 1, [d.render() for d in sink.diagnostics]
    return load_artifact(monkeypatch, artifacts[0]), sink


class TestResponsibilityChain:
    def test_first_accepting_handler_wins(self, monkeypatch) -> None:
        module, sink = _load(
            monkeypatch, [_handler("by_wallet", 2), _handler("by_card", 1)], [_fallback()], chain_model="responsibility"
        )
        tried = []

        class Payments(module.PaymentsChain):
            def by_card(self, request):
                tried.append("card")
                return request.startswith("card"), "card ok"

            def by_wallet(self, request):
                tried.append("wallet")
                return request.startswith("wallet"), "wallet ok"

            def fallback(self, request):
                return "manual"

        payments = Payments()

        assert payments.handle("card 1") == "card ok"
        assert tried == ["card"]
        assert payments.handle("wallet 1") == "wallet ok"
        assert payments.handle("cash") == "manual"
        assert payments.try_handle("cash") == (False, None)
        assert len(sink) == 0

    def test_no_default_handler_raises_lookup_error(self, monkeypatch) -> None:
        module, sink = _load(monkeypatch, [_handler("by_card", 1)], [], chain_model="responsibility")

        class Payments(module.PaymentsChain):
            def by_card(self, request):
                return False, None

        with pytest.raises(LookupError):
            Payments().handle("cash")
        assert ids(sink) == {"PS0409": 1}

    def test_async_handlers(self, monkeypatch) -> None:
        module, _ = _load(
            monkeypatch, [_handler("by_card", 1, coroutine=True)], [_fallback()], chain_model="responsibility"
        )

        class Payments(module.PaymentsChain):
            async def by_card(self, request):
                return request == "card", "card ok"

            def fallback(self, request):
                return "manual"

        assert asyncio.run(Payments().handle_async("card")) == "card ok"
        assert asyncio.run(Payments().handle_async("cash")) == "manual"
        assert asyncio.run(Payments().try_handle_async("cash")) == (False, None)

    def test_two_defaults_are_an_error(self) -> None:
        from patternsmith.core.composition import TerminalStep

        other = TerminalStep(member=method("manual", param("request", "str"), returns="str"))

        artifacts, sink = _generate([_handler("by_card", 1)], [_fallback(), other], chain_model="responsibility")

        assert artifacts == ()
        assert ids(sink) == {"PS0410": 1}


class TestPipelineChain:
    def test_pipeline_model_uses_handle(self, monkeypatch) -> None:
        from patternsmith.core.composition import CompositionStep

        step = CompositionStep(
            member=method("trim", param("request", "str"), param("next", "Any"), returns="str"), rank=1
        )
        module, _ = _load(monkeypatch, [step], [_fallback()])

        class Payments(module.PaymentsChain):
            def trim(self, request, next):
                return next(request.strip())

            def fallback(self, request):
                return f"<{request}>"

        assert Payments().handle("  a ") == "<a>"

    def test_pipeline_requires_terminal(self) -> None:
        from patternsmith.core.composition import CompositionStep

        step = CompositionStep(
            member=method("trim", param("request", "str"), param("next", "Any"), returns="str"), rank=1
        )

        artifacts, sink = _generate([step], [])

        assert artifacts == ()
        assert ids(sink) == {"PS0402": 1}
