"""Tests for naming and merge helpers."""
from __future__ import annotations


class TestNaming:
    def test_strip_interface_prefix(self) -> None:
        from patternsmith.core.utils.text import strip_interface_prefix

        assert strip_interface_prefix("IStorage") == "Storage"
        assert strip_interface_prefix("Index") == "Index"
        assert strip_interface_prefix("I") == "I"

    def test_to_snake_case(self) -> None:
        from patternsmith.core.utils.text import to_snake_case

        assert to_snake_case("OrderPipeline") == "order_pipeline"
        assert to_snake_case("HTTPClient") == "http_client"
        assert to_snake_case("Glyph") == "glyph"

    def test_is_identifier_rejects_keywords(self) -> None:
        from patternsmith.core.utils.text import is_identifier

        assert is_identifier("StorageProxy")
        assert not is_identifier("class")
        assert not is_identifier("Order Proxy")
        assert not is_identifier("")


class TestDeepMerge:
    def test_nested_merge_does_not_mutate_inputs(self) -> None:
        from patternsmith.core.utils.merge import deep_merge

        base = {"a": {"b": 1, "c": [1]}}
        override = {"a": {"c": ["+", 2], "d": 3}}

        merged = deep_merge(base, override)

        assert merged == {"a": {"b": 1, "c": [1, 2], "d": 3}}
        assert base == {"a": {"b": 1, "c": [1]}}

    def test_lists_are_replaced_without_marker(self) -> None:
        from patternsmith.core.utils.merge import deep_merge

        assert deep_merge({"x": [1, 2]}, {"x": [3]}) == {"x": [3]}
