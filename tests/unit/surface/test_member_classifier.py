"""Tests for member classification rules."""
from __future__ import annotations

from helpers.builders import contract, ids, method, param, prop


def _classify(target):
    from patternsmith.core.diagnostics import DiagnosticSink
    from patternsmith.core.surface.classifier import MemberClassifier
    from patternsmith.core.surface.handles import CompletionHandles
    from patternsmith.core.surface.walker import SurfaceWalker

    sink = DiagnosticSink()
    members = MemberClassifier(CompletionHandles(), sink).classify(target, SurfaceWalker().walk(target))
    return members, sink


class TestMemberClassifier:
    def test_static_and_special_members_are_skipped_silently(self) -> None:
        storage = contract(
            "IStorage",
            method("create", static=True),
            method("__len__", returns="int"),
            method("get", param("key", "str"), returns="bytes"),
        )

        members, sink = _classify(storage)

        assert [m.name for m in members] == ["get"]
        assert len(sink) == 0

    def test_members_are_sorted_by_signature_key(self) -> None:
        storage = contract("IStorage", prop("size"), method("put"), method("delete"), method("get"))

        members, _ = _classify(storage)

        assert [m.key for m in members] == ["M:delete()", "M:get()", "M:put()", "P:size"]

    def test_generic_member_fails_whole_contract(self) -> None:
        """One unforwardable member means no members at all."""
        storage = contract("IStorage", method("get"), method("convert", generic_arity=1))

        members, sink = _classify(storage)

        assert members == ()
        assert ids(sink) == {"PS0201": 1}

    def test_event_and_indexer_are_errors(self) -> None:
        from patternsmith.core.surface.model import MemberDescriptor, MemberKind

        storage = contract(
            "IStorage",
            MemberDescriptor(name="changed", kind=MemberKind.EVENT),
            method("item", param("index", "int"), indexer=True),
        )

        members, sink = _classify(storage)

        assert members == ()
        assert ids(sink) == {"PS0202": 2}

    def test_inaccessible_member_is_dropped_with_warning(self) -> None:
        from patternsmith.core.surface.model import Accessibility

        storage = contract("IStorage", method("get"), method("_compact", accessibility=Accessibility.PROTECTED))

        members, sink = _classify(storage)

        assert [m.name for m in members] == ["get"]
        assert ids(sink) == {"PS0203": 1}
        assert not sink.has_errors

    def test_private_setter_drops_property(self) -> None:
        from patternsmith.core.surface.model import Accessibility, MemberDescriptor, MemberKind
        from patternsmith.core.surface.types import TypeRef

        storage = contract(
            "IStorage",
            MemberDescriptor(
                name="size",
                kind=MemberKind.PROPERTY,
                returns=TypeRef("int"),
                getter=Accessibility.PUBLIC,
                setter=Accessibility.PRIVATE,
            ),
            method("get"),
        )

        members, sink = _classify(storage)

        assert [m.name for m in members] == ["get"]
        assert ids(sink) == {"PS0204": 1}

    def test_partial_base_keeps_only_overridable_members(self) -> None:
        from patternsmith.core.surface.model import ContractVariant

        base = contract(
            "StorageBase",
            method("get", virtual=True),
            method("put", abstract=True),
            method("describe"),
            variant=ContractVariant.PARTIAL_BASE,
        )

        members, sink = _classify(base)

        assert [m.name for m in members] == ["get", "put"]
        assert len(sink) == 0

    def test_partial_base_skips_sealed_protected_member_without_warning(self) -> None:
        from patternsmith.core.surface.model import Accessibility, ContractVariant

        base = contract(
            "OrderBase",
            method("place", virtual=True),
            method("_audit", accessibility=Accessibility.PROTECTED),
            variant=ContractVariant.PARTIAL_BASE,
        )

        members, sink = _classify(base)

        assert [m.name for m in members] == ["place"]
        assert ids(sink) == {}

    def test_ignore_marker_keeps_member_but_flags_it(self) -> None:
        storage = contract("IStorage", method("get"), method("debug_dump", markers=frozenset({"ignore"})))

        members, _ = _classify(storage)

        ignored = {m.name: m.ignored for m in members}
        assert ignored == {"debug_dump": True, "get": False}

    def test_async_shapes(self) -> None:
        from patternsmith.core.surface.model import AsyncKind

        storage = contract(
            "IStorage",
            method("fetch", returns="bytes", coroutine=True),
            method("flush", coroutine=True),
            method("load", returns="Awaitable[int]"),
            method("size", returns="int"),
        )

        members, _ = _classify(storage)

        shapes = {m.name: (m.async_kind, m.result.render()) for m in members}
        assert shapes == {
            "fetch": (AsyncKind.ASYNC_WITH_RESULT, "bytes"),
            "flush": (AsyncKind.ASYNC_NO_RESULT, "None"),
            "load": (AsyncKind.ASYNC_WITH_RESULT, "int"),
            "size": (AsyncKind.SYNC, "int"),
        }

    def test_by_reference_parameter_is_informational(self) -> None:
        from patternsmith.core.surface.model import RefMode

        storage = contract("IStorage", method("try_get", param("value", "bytes", mode=RefMode.OUT)))

        members, sink = _classify(storage)

        assert len(members) == 1
        assert ids(sink) == {"PS0205": 1}
        assert not sink.has_errors
