"""Tests for the synthesis engine."""
from __future__ import annotations

import copy

from helpers.builders import contract, method, param
from patternsmith.core.surface.model import Accessibility

BASE_CONFIG = {
    "synthesis": {
        "defaults": {"wrap_order": "outer_first", "missing_map": "error"},
        "severity": {},
    },
    "output": {"directory": "generated", "header": "# generated for tests"},
}


def _engine(**synthesis):
    from patternsmith.core.engine import SynthesisEngine

    config = copy.deepcopy(BASE_CONFIG)
    config["synthesis"].update(synthesis)
    return SynthesisEngine(config=config)


STORAGE = contract("IStorage", method("get", param("key", "str"), returns="bytes"))


def _request(pattern="decorator", target=STORAGE, **options):
    from patternsmith.core.generators import SynthesisRequest

    return SynthesisRequest(pattern=pattern, contract=target, options=options)


class TestSynthesisEngine:
    def test_successful_request(self) -> None:
        outcome = _engine().synthesize(_request())

        assert outcome.succeeded
        assert [a.name for a in outcome.artifacts] == ["storage_decorator.py"]
        assert outcome.artifacts[0].text.startswith("# generated for tests\n")

    def test_unknown_pattern(self) -> None:
        outcome = _engine().synthesize(_request("adapter"))

        assert not outcome.succeeded
        assert outcome.artifacts == ()
        assert [d.id for d in outcome.errors] == ["PS0901"]
        assert "chain, composer, decorator" in outcome.errors[0].message

    def test_invalid_options_stop_before_generation(self) -> None:
        outcome = _engine().synthesize(_request(wrap_order="sideways", capacity=-5))

        assert [d.id for d in outcome.diagnostics] == ["PS0103", "PS0103"]
        assert outcome.artifacts == ()

    def test_request_options_override_configured_defaults(self) -> None:
        from patternsmith.core.config.options import WrapOrder

        engine = _engine(defaults={"wrap_order": "inner_first"})

        merged = engine.raw_options(_request(wrap_order="outer_first"))

        assert WrapOrder(merged["wrap_order"]) is WrapOrder.OUTER_FIRST

    def test_configured_severity_applies(self) -> None:
        from patternsmith.core.diagnostics import Severity

        target = contract("IStorage", method("get"), method("_compact", accessibility=Accessibility.PROTECTED))
        quiet = _engine(severity={"PS0203": "info"}).synthesize(_request(target=target))
        loud = _engine(severity={"PS0203": "error"}).synthesize(_request(target=target))

        assert quiet.succeeded
        assert [d.severity for d in quiet.diagnostics] == [Severity.INFO]
        assert not loud.succeeded
        assert loud.artifacts == ()

    def test_request_severity_overrides_configured(self) -> None:
        target = contract("IStorage", method("get"), method("_compact", accessibility=Accessibility.PROTECTED))

        outcome = _engine(severity={"PS0203": "error"}).synthesize(
            _request(target=target, severity={"PS0203": "warning"})
        )

        assert outcome.succeeded
        assert [d.id for d in outcome.warnings] == ["PS0203"]

    def test_requests_are_independent(self) -> None:
        bad = contract("IBroken", method("convert", generic_arity=1))

        outcomes = _engine().synthesize_all([_request(target=bad), _request()])

        assert [o.succeeded for o in outcomes] == [False, True]
        assert len(outcomes[1].artifacts) == 1

    def test_output_is_deterministic(self) -> None:
        first = _engine().synthesize(_request())
        second = _engine().synthesize(_request())

        assert first.artifacts == second.artifacts
        assert first.diagnostics == second.diagnostics
