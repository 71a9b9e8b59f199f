"""Tests for the decorator generator."""
from __future__ import annotations

import abc
import asyncio

from helpers.builders import contract, ids, install_module, load_artifact, make_context, method, param, prop


class IStorage(abc.ABC):
    @abc.abstractmethod
    def get(self, key):
        ...

    @abc.abstractmethod
    async def fetch(self, key):
        ...


class MemoryStorage(IStorage):
    def __init__(self) -> None:
        self.size = 0

    def get(self, key):
        return b"v:" + key.encode()

    async def fetch(self, key):
        return b"f:" + key.encode()


STORAGE = contract(
    "IStorage",
    method("get", param("key", "str"), returns="bytes"),
    method("fetch", param("key", "str"), returns="bytes", coroutine=True),
    prop("size"),
)


def _generate(target=STORAGE, **options):
    from patternsmith.core.generators import DecoratorGenerator, SynthesisRequest

    context = make_context(**options)
    artifacts = DecoratorGenerator(context).generate(SynthesisRequest(pattern="decorator", contract=target))
    return artifacts, context.sink


def _load(monkeypatch, **options):
    install_module(monkeypatch, "shop.contracts", IStorage=IStorage)
    artifacts, sink = _generate(**options)
    assert len(artifacts) == 1, [d.render() for d in sink.diagnostics]
    return load_artifact(monkeypatch, artifacts[0])


class TestDecoratorGenerator:
    def test_artifact_names_and_types(self) -> None:
        artifacts, sink = _generate()

        assert [a.name for a in artifacts] == ["storage_decorator.py"]
        assert artifacts[0].type_names == ("StorageDecoratorBase", "StorageDecorators")
        assert len(sink) == 0

    def test_base_forwards_every_member(self, monkeypatch) -> None:
        module = _load(monkeypatch)
        inner = MemoryStorage()

        decorated = module.StorageDecoratorBase(inner)
        decorated.size = 7

        assert decorated.get("a") == b"v:a"
        assert asyncio.run(decorated.fetch("b")) == b"f:b"
        assert inner.size == 7
        assert decorated.inner is inner

    def test_inner_must_not_be_none(self, monkeypatch) -> None:
        import pytest

        module = _load(monkeypatch)

        with pytest.raises(TypeError):
            module.StorageDecoratorBase(None)
        with pytest.raises(TypeError):
            module.StorageDecorators.compose(None)

    def test_compose_outer_first(self, monkeypatch) -> None:
        module = _load(monkeypatch)
        calls = []

        class Tag(module.StorageDecoratorBase):
            def __init__(self, inner, label):
                super().__init__(inner)
                self.label = label

            def get(self, key):
                calls.append(self.label)
                return self.inner.get(key)

        stacked = module.StorageDecorators.compose(MemoryStorage(), lambda i: Tag(i, "a"), lambda i: Tag(i, "b"))

        assert stacked.get("k") == b"v:k"
        assert calls == ["a", "b"]

    def test_compose_inner_first(self, monkeypatch) -> None:
        module = _load(monkeypatch, wrap_order="inner_first")
        calls = []

        class Tag(module.StorageDecoratorBase):
            def __init__(self, inner, label):
                super().__init__(inner)
                self.label = label

            def get(self, key):
                calls.append(self.label)
                return self.inner.get(key)

        module.StorageDecorators.compose(MemoryStorage(), lambda i: Tag(i, "a"), lambda i: Tag(i, "b")).get("k")

        assert calls == ["b", "a"]

    def test_helpers_can_be_disabled(self) -> None:
        artifacts, _ = _generate(composition="none")

        assert artifacts[0].type_names == ("StorageDecoratorBase",)
        assert "class StorageDecorators" not in artifacts[0].text

    def test_naming_override(self) -> None:
        artifacts, sink = _generate(naming={"base_type_name": "StorageWrapper"})

        assert artifacts[0].type_names[0] == "StorageWrapper"
        assert len(sink) == 0

    def test_unused_naming_key_warns(self) -> None:
        artifacts, sink = _generate(naming={"proxy_type_name": "StorageProxy"})

        assert len(artifacts) == 1
        assert ids(sink) == {"PS0104": 1}

    def test_generic_member_blocks_emission(self) -> None:
        target = contract("IStorage", method("get"), method("convert", generic_arity=1))

        artifacts, sink = _generate(target)

        assert artifacts == ()
        assert ids(sink) == {"PS0201": 1}

    def test_generated_name_conflict(self) -> None:
        target = contract("IStorage", method("get"), namespace_types=frozenset({"StorageDecoratorBase"}))

        artifacts, sink = _generate(target)

        assert artifacts == ()
        assert ids(sink) == {"PS0005": 1}

    def test_concrete_type_is_rejected(self) -> None:
        from patternsmith.core.surface.model import ContractVariant

        artifacts, sink = _generate(contract("Storage", method("get"), variant=ContractVariant.CONCRETE))

        assert artifacts == ()
        assert ids(sink) == {"PS0001": 1}

    def test_generic_contract_is_rejected(self) -> None:
        artifacts, sink = _generate(contract("IStorage", method("get"), generic_arity=1))

        assert artifacts == ()
        assert ids(sink) == {"PS0002": 1}

    def test_nested_contract_is_rejected(self) -> None:
        artifacts, sink = _generate(contract("IStorage", method("get"), nesting_depth=1))

        assert artifacts == ()
        assert ids(sink) == {"PS0003": 1}

    def test_partial_base_note(self) -> None:
        from patternsmith.core.surface.model import ContractVariant

        target = contract("StorageBase", method("get", virtual=True), variant=ContractVariant.PARTIAL_BASE)

        artifacts, _ = _generate(target)

        assert "StorageBase.__init__ is not called" in artifacts[0].text

    def test_output_is_independent_of_member_order(self) -> None:
        members = list(STORAGE.members)
        reordered = contract("IStorage", *reversed(members))

        first, _ = _generate(STORAGE)
        second, _ = _generate(reordered)

        assert first[0].text == second[0].text
