"""Tests for type expression parsing and rendering."""
from __future__ import annotations

import pytest


class TestTypeRefParse:
    def test_parses_nested_generics(self) -> None:
        """Nested arguments are parsed into a tree and rendered canonically."""
        from patternsmith.core.surface.types import TypeRef

        ref = TypeRef.parse("dict[str,  list[int]]")

        assert ref.name == "dict"
        assert ref.args == (TypeRef("str"), TypeRef("list", (TypeRef("int"),)))
        assert ref.render() == "dict[str, list[int]]"

    def test_parses_union_and_bracket_list(self) -> None:
        """Unions and Callable-style argument lists keep their shape."""
        from patternsmith.core.surface.types import TypeRef

        assert TypeRef.parse("int | None").render() == "int | None"
        assert TypeRef.parse("Callable[[int, str], bool]").render() == "Callable[[int, str], bool]"

    def test_empty_text_is_none(self) -> None:
        from patternsmith.core.surface.types import NONE, TypeRef

        assert TypeRef.parse(None) is NONE
        assert TypeRef.parse("  ") is NONE
        assert NONE.is_none

    def test_base_name_drops_module_path(self) -> None:
        from patternsmith.core.surface.types import TypeRef

        assert TypeRef.parse("asyncio.Task[int]").base_name == "Task"

    @pytest.mark.parametrize("text", ["list[int", "dict[str,]", "]", "int int"])
    def test_malformed_expressions_raise(self, text: str) -> None:
        from patternsmith.core.surface.types import TypeRef

        with pytest.raises(ValueError):
            TypeRef.parse(text)

    def test_equal_text_gives_equal_refs(self) -> None:
        """Structural comparison ignores whitespace."""
        from patternsmith.core.surface.types import TypeRef

        assert TypeRef.parse("Mapping[str,int]") == TypeRef.parse("Mapping[str, int]")
