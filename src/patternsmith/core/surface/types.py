"""Type expressions as written in contracts.

Member return and parameter types are compared structurally, so they are
parsed into a small tree (``TypeRef``) with one canonical text rendering.
Only the shape matters; names are never resolved to runtime objects.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

_TOKEN = re.compile(r"\s*(?:([\[\],|])|([^\s\[\],|]+))")

UNION = "|"
NONE_NAMES = frozenset({"None", "NoneType", "type(None)"})


@dataclass(frozen=True)
class TypeRef:
    """A parsed type expression such as ``dict[str, list[int]]``.

    ``name`` is empty for a bare bracketed argument list (the first argument
    of ``Callable[[int], str]``) and ``"|"`` for a union.
    """

    name: str
    args: Tuple["TypeRef", ...] = ()

    @classmethod
    def parse(cls, text: Optional[str]) -> "TypeRef":
        if text is None or not str(text).strip():
            return NONE
        tokens = list(_tokenize(str(text)))
        parser = _Parser(tokens, str(text))
        result = parser.union()
        if parser.pos != len(tokens):
            raise ValueError(f"Unexpected '{tokens[parser.pos]}' in type expression '{text}'")
        return result

    @property
    def base_name(self) -> str:
        """Last dotted segment of the name (``asyncio.Task`` -> ``Task``)."""
        return self.name.rsplit(".", 1)[-1]

    @property
    def is_none(self) -> bool:
        return not self.args and self.name in NONE_NAMES

    def render(self) -> str:
        if self.name == UNION:
            return " | ".join(arg.render() for arg in self.args)
        inner = ", ".join(arg.render() for arg in self.args)
        if not self.name:
            return f"[{inner}]"
        if self.args:
            return f"{self.name}[{inner}]"
        return self.name

    def __str__(self) -> str:
        return self.render()


NONE = TypeRef("None")
ANY = TypeRef("Any")


def _tokenize(text: str) -> Iterator[str]:
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise ValueError(f"Cannot tokenize type expression '{text}'")
        token = match.group(1) or match.group(2)
        yield token.strip("'\"") if match.group(2) else token
        pos = match.end()


class _Parser:
    def __init__(self, tokens: List[str], source: str) -> None:
        self.tokens = tokens
        self.source = source
        self.pos = 0

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise ValueError(f"Unexpected end of type expression '{self.source}'")
        self.pos += 1
        return token

    def union(self) -> TypeRef:
        items = [self.atom()]
        while self._peek() == "|":
            self._take()
            items.append(self.atom())
        return items[0] if len(items) == 1 else TypeRef(UNION, tuple(items))

    def atom(self) -> TypeRef:
        token = self._take()
        if token == "[":
            return TypeRef("", self.arguments())
        if token in ("]", ",", "|"):
            raise ValueError(f"Unexpected '{token}' in type expression '{self.source}'")
        if self._peek() == "[":
            self._take()
            return TypeRef(token, self.arguments())
        return TypeRef(token)

    def arguments(self) -> Tuple[TypeRef, ...]:
        args: List[TypeRef] = []
        if self._peek() == "]":
            self._take()
            return ()
        while True:
            args.append(self.union())
            token = self._take()
            if token == "]":
                return tuple(args)
            if token != ",":
                raise ValueError(f"Expected ',' or ']' in type expression '{self.source}'")


__all__ = ["TypeRef", "ANY", "NONE", "NONE_NAMES"]
