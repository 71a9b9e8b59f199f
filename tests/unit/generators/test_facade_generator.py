"""Tests for the facade generator."""
from __future__ import annotations

import asyncio

import pytest

from helpers.builders import contract, ids, install_module, load_artifact, make_context, method, param, prop


class IPayments:
    pass


PAYMENTS = contract(
    "IPayments",
    method("charge", param("amount", "int"), returns="bool"),
    method("balance", param("account", "str"), returns="int", coroutine=True),
    method("refund", param("amount", "int"), param("reason", "str"), returns="None"),
)


def _candidate(module, descriptor, order=0, target=None):
    from patternsmith.core.surface.binding import CandidateImplementation

    return CandidateImplementation(member=descriptor, module=module, target=target, order=order)


CANDIDATES = (
    _candidate("shop.billing.cards", method("authorize", param("cents", "int"), returns="bool")),
    _candidate("shop.ledger.accounts", method("lookup", param("account_id", "str"), returns="int", coroutine=True), 1),
    _candidate("shop.billing.refunds", method("refund_order", param("cents", "int"), param("note", "str")), 2),
)


def _generate(target=PAYMENTS, candidates=CANDIDATES, **options):
    from patternsmith.core.generators import FacadeGenerator, SynthesisRequest

    context = make_context(**options)
    request = SynthesisRequest(pattern="facade", contract=target, candidates=tuple(candidates))
    return FacadeGenerator(context).generate(request), context.sink


def _install_subsystems(monkeypatch, log):
    async def lookup(account_id):
        return len(account_id)

    install_module(monkeypatch, "shop.contracts", IPayments=IPayments)
    install_module(monkeypatch, "shop.billing.cards", authorize=lambda cents: cents > 0)
    install_module(monkeypatch, "shop.ledger.accounts", lookup=lookup)
    install_module(monkeypatch, "shop.billing.refunds", refund_order=lambda cents, note: log.append((cents, note)))


class TestFacadeGenerator:
    def test_binds_every_method(self, monkeypatch) -> None:
        log = []
        _install_subsystems(monkeypatch, log)
        artifacts, sink = _generate()
        assert len(sink) == 0

        facade = load_artifact(monkeypatch, artifacts[0]).PaymentsFacade()

        assert facade.charge(5) is True
        assert asyncio.run(facade.balance("abc")) == 3
        assert facade.refund(5, "damaged") is None
        assert log == [(5, "damaged")]

    def test_modules_are_imported_under_private_aliases(self) -> None:
        artifacts, _ = _generate()

        text = artifacts[0].text
        assert "import shop.billing.cards as _cards" in text
        assert "return _cards.authorize(amount)" in text
        assert "return await _accounts.lookup(account)" in text

    def test_alias_collisions_get_suffixes(self) -> None:
        from patternsmith.core.generators.facade import module_aliases

        assert module_aliases(["shop.b.util", "shop.a.util", "shop.a.util"]) == {
            "shop.a.util": "_util",
            "shop.b.util": "_util2",
        }

    def test_unmapped_member_is_an_error_by_default(self) -> None:
        artifacts, sink = _generate(candidates=CANDIDATES[:2])

        assert artifacts == ()
        assert ids(sink) == {"PS0301": 1}

    def test_stub_policy_raises_not_implemented(self, monkeypatch) -> None:
        _install_subsystems(monkeypatch, [])
        artifacts, sink = _generate(candidates=CANDIDATES[:2], missing_map="stub")
        facade = load_artifact(monkeypatch, artifacts[0]).PaymentsFacade()

        with pytest.raises(NotImplementedError):
            facade.refund(1, "x")
        assert len(sink) == 0

    def test_ignore_policy_returns_default(self, monkeypatch) -> None:
        _install_subsystems(monkeypatch, [])
        artifacts, _ = _generate(candidates=CANDIDATES[:2], missing_map="ignore")
        facade = load_artifact(monkeypatch, artifacts[0]).PaymentsFacade()

        assert facade.refund(1, "x") is None

    def test_keyword_only_candidate_is_called_by_name(self, monkeypatch) -> None:
        from patternsmith.core.surface.model import ParameterKind

        def authorize(*, cents):
            return cents > 10

        install_module(monkeypatch, "shop.contracts", IPayments=IPayments)
        install_module(monkeypatch, "shop.cards", authorize=authorize)
        target = contract("IPayments", method("charge", param("amount", "int"), returns="bool"))
        candidate = _candidate(
            "shop.cards", method("authorize", param("cents", "int", kind=ParameterKind.KEYWORD_ONLY), returns="bool")
        )

        artifacts, _ = _generate(target, [candidate])
        facade = load_artifact(monkeypatch, artifacts[0]).PaymentsFacade()

        assert facade.charge(11) is True

    def test_ambiguity_can_be_downgraded(self) -> None:
        target = contract("IPayments", method("charge", param("amount", "int"), returns="bool"))
        candidates = [
            _candidate("shop.cards", method("pay", param("a", "int"), returns="bool"), 0),
            _candidate("shop.wallet", method("pay", param("a", "int"), returns="bool"), 1),
        ]

        failed, failed_sink = _generate(target, candidates)
        passed, passed_sink = _generate(target, candidates, severity={"PS0302": "warning"})

        assert failed == ()
        assert ids(failed_sink) == {"PS0302": 1}
        assert "return _cards.pay(amount)" in passed[0].text
        assert [d.severity.value for d in passed_sink.diagnostics] == ["warning"]

    def test_properties_are_skipped_with_warning(self) -> None:
        target = contract("IPayments", method("charge", param("amount", "int"), returns="bool"), prop("currency", "str"))

        artifacts, sink = _generate(target, CANDIDATES[:1])

        assert len(artifacts) == 1
        assert ids(sink) == {"PS0305": 1}
        assert "currency" not in artifacts[0].text

    def test_async_candidate_for_sync_member_warns_when_async_is_off(self, monkeypatch) -> None:
        async def authorize(cents):
            return cents > 0

        install_module(monkeypatch, "shop.contracts", IPayments=IPayments)
        install_module(monkeypatch, "shop.cards", authorize=authorize)
        target = contract("IPayments", method("charge", param("amount", "int"), returns="bool"))
        candidate = _candidate("shop.cards", method("authorize", param("cents", "int"), returns="bool", coroutine=True))

        artifacts, sink = _generate(target, [candidate], async_mode="off", adapt_async=True)

        assert len(artifacts) == 1
        assert ids(sink) == {"PS0304": 1}
        assert [d.severity.value for d in sink.diagnostics] == ["warning"]
        assert "return _run_blocking(_cards.authorize(amount))" in artifacts[0].text
        facade = load_artifact(monkeypatch, artifacts[0]).PaymentsFacade()
        assert facade.charge(3) is True


class Connection:
    def __init__(self, name):
        self.name = name


class OrderService:
    @staticmethod
    def place(connection, sku, quantity):
        return f"{connection.name}:{sku}x{quantity}"

    @staticmethod
    async def status(connection, order_id):
        return f"{connection.name}:{order_id}:open"

    @staticmethod
    def ping():
        return "pong"


def _orders():
    from patternsmith.core.surface.model import ContractVariant

    return contract(
        "OrderService",
        method(
            "place", param("connection", "Connection", inject=True), param("sku", "str"), param("quantity", "int"),
            returns="str", static=True,
        ),
        method(
            "status", param("connection", "Connection", inject=True), param("order_id", "int"),
            returns="str", coroutine=True, static=True,
        ),
        method("ping", returns="str", static=True),
        method("describe", returns="str"),
        variant=ContractVariant.CONCRETE,
    )


def _generate_host(exposes=(), **options):
    from patternsmith.core.generators import FacadeGenerator, SynthesisRequest

    context = make_context(**options)
    request = SynthesisRequest(pattern="facade", contract=_orders(), exposes=tuple(exposes))
    return FacadeGenerator(context).generate(request), context.sink


def _expose(name, alias=None):
    from patternsmith.core.surface.binding import ExposedMember

    member = next(m for m in _orders().members if m.name == name)
    return ExposedMember(member, alias)


def _load_host(monkeypatch, artifacts):
    install_module(monkeypatch, "shop.contracts", OrderService=OrderService)
    assert len(artifacts) == 1
    return load_artifact(monkeypatch, artifacts[0]).OrderServiceFacade(Connection("main"))


class TestHostFirstFacade:
    def test_public_static_methods_are_exposed(self, monkeypatch) -> None:
        artifacts, sink = _generate_host()
        assert len(sink) == 0

        facade = _load_host(monkeypatch, artifacts)

        assert facade.place("sku1", 2) == "main:sku1x2"
        assert asyncio.run(facade.status(7)) == "main:7:open"
        assert facade.ping() == "pong"
        assert not hasattr(facade, "describe")

    def test_methods_are_ordered_by_name_and_share_one_dependency(self) -> None:
        artifacts, _ = _generate_host()

        text = artifacts[0].text
        assert "class OrderServiceFacade:" in text
        assert "def __init__(self, connection: Connection) -> None:" in text
        assert text.count("self._connection = connection") == 1
        assert text.index("def ping(") < text.index("def place(") < text.index("async def status(")
        assert "return OrderService.place(self._connection, sku, quantity)" in text

    def test_marked_members_use_alias_and_prefix(self, monkeypatch) -> None:
        artifacts, sink = _generate_host([_expose("place", "submit")], member_prefix="api_")
        assert len(sink) == 0

        facade = _load_host(monkeypatch, artifacts)

        assert facade.api_submit("a", 1) == "main:ax1"
        assert not hasattr(facade, "ping")

    def test_exposed_instance_member_is_an_error(self) -> None:
        artifacts, sink = _generate_host([_expose("place"), _expose("describe")])

        assert artifacts == ()
        assert ids(sink) == {"PS0306": 1}

    def test_duplicate_exposed_names_are_an_error(self) -> None:
        artifacts, sink = _generate_host([_expose("place", "go"), _expose("ping", "go")])

        assert artifacts == ()
        assert ids(sink) == {"PS0309": 1}

    def test_include_keeps_listed_members_and_reports_unknown_names(self) -> None:
        artifacts, sink = _generate_host(include=["ping", "refund"])

        text = artifacts[0].text
        assert "def ping(self) -> str:" in text
        assert "def place(" not in text
        assert "__init__" not in text
        assert ids(sink) == {"PS0307": 1}

    def test_exclude_drops_listed_members(self) -> None:
        artifacts, sink = _generate_host(exclude=["status", "ping"])

        text = artifacts[0].text
        assert "def place(" in text
        assert "status" not in text and "ping" not in text
        assert len(sink) == 0

    def test_nothing_left_to_expose(self) -> None:
        artifacts, sink = _generate_host(exclude=["place", "status", "ping"])

        assert artifacts == ()
        assert ids(sink) == {"PS0206": 1}

    def test_async_mode_on_makes_every_method_a_coroutine(self, monkeypatch) -> None:
        artifacts, _ = _generate_host(async_mode="on")

        facade = _load_host(monkeypatch, artifacts)

        assert "async def place(" in artifacts[0].text
        assert asyncio.run(facade.ping()) == "pong"
        assert asyncio.run(facade.place("b", 3)) == "main:bx3"
        assert asyncio.run(facade.status(1)) == "main:1:open"

    def test_host_only_options_warn_on_contract_first_facades(self) -> None:
        artifacts, sink = _generate(include=["charge"], async_mode="on")

        assert len(artifacts) == 1
        assert ids(sink) == {"PS0308": 2}
        assert {d.severity.value for d in sink.diagnostics} == {"warning"}

    def test_dependency_names_get_counters(self) -> None:
        from patternsmith.core.generators.facade import host_dependencies

        dependencies = host_dependencies(
            [
                method("a", param("c", "db.Connection", inject=True)),
                method("b", param("c", "Connection", inject=True), param("d", "Connection", inject=True)),
            ]
        )

        assert list(dependencies) == ["Connection", "db.Connection"]
        assert [d.field for d in dependencies.values()] == ["_connection", "_connection2"]
