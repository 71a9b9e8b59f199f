"""Python source emission helpers.

``SourceWriter`` tracks indentation; ``ModuleBuilder`` assembles a generated
module (header, imports, private helpers, body) in a fixed layout so the
same input always renders the same bytes.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence, Set

from patternsmith.core.surface.model import MemberDescriptor, Parameter, ParameterKind
from patternsmith.core.surface.types import TypeRef

INDENT = "    "

COMPLETED_HELPER = '''\
async def _completed(value):
    """Already-completed handle for ``value``."""
    return value'''

RUN_BLOCKING_HELPER = '''\
def _run_blocking(awaitable):
    """Wait for ``awaitable`` from synchronous code.

    Inside a running event loop the awaitable is driven on a worker thread
    with its own loop; awaitables bound to the calling loop deadlock there.
    """
    async def _drive():
        return await awaitable

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_drive())
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, _drive()).result()'''

_HELPERS: Dict[str, tuple] = {
    "_completed": (COMPLETED_HELPER, ()),
    "_run_blocking": (RUN_BLOCKING_HELPER, ("import asyncio", "import concurrent.futures")),
}


class SourceWriter:
    def __init__(self) -> None:
        self._lines: List[str] = []
        self._level = 0

    def line(self, text: str = "") -> None:
        self._lines.append(f"{INDENT * self._level}{text}" if text else "")

    def lines(self, texts: Sequence[str]) -> None:
        for text in texts:
            self.line(text)

    def blank(self, count: int = 1) -> None:
        """Ensure exactly ``count`` blank lines end the output so far."""
        if not self._lines:
            return
        while self._lines and self._lines[-1] == "":
            self._lines.pop()
        self._lines.extend([""] * count)

    @contextmanager
    def indented(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        self.line(header)
        with self.indented():
            yield

    def docstring(self, text: str) -> None:
        parts = text.strip().splitlines()
        if len(parts) == 1:
            self.line(f'"""{parts[0]}"""')
            return
        self.line(f'"""{parts[0]}')
        for part in parts[1:]:
            self.line(part)
        self.line('"""')

    def render(self) -> str:
        lines = list(self._lines)
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines)


class ModuleBuilder:
    """Collects imports and helpers while a generator writes the body."""

    def __init__(self, header: str, summary: str) -> None:
        self.header = header
        self.summary = summary
        self.stdlib_imports: Set[str] = set()
        self.project_imports: Set[str] = set()
        self.helpers: List[str] = []
        self.body = SourceWriter()

    def import_stdlib(self, line: str) -> None:
        self.stdlib_imports.add(line)

    def import_project(self, line: str) -> None:
        self.project_imports.add(line)

    def import_type(self, namespace: str, name: str) -> None:
        if namespace:
            self.project_imports.add(f"from {namespace} import {name}")

    def use_helper(self, name: str) -> str:
        text, imports = _HELPERS[name]
        for line in imports:
            self.import_stdlib(line)
        if name not in self.helpers:
            self.helpers.append(name)
        return name

    def render(self) -> str:
        out = SourceWriter()
        for line in self.header.strip().splitlines():
            out.line(line)
        out.line(f"# {self.summary}")
        out.blank()
        out.line("from __future__ import annotations")
        out.blank()
        for group in (self.stdlib_imports, self.project_imports):
            if group:
                out.lines(sorted(group, key=_import_sort_key))
                out.blank()
        for name in sorted(self.helpers):
            out.blank(2)
            out.lines(_HELPERS[name][0].splitlines())
        out.blank(2)
        out.lines(self.body.render().splitlines())
        return out.render() + "\n"


def _import_sort_key(line: str) -> tuple:
    # "import x" before "from x import y", then alphabetical.
    return (line.startswith("from "), line)


def annotation(type_ref: TypeRef) -> str:
    return type_ref.render()


def render_parameters(parameters: Sequence[Parameter], *, receiver: Optional[str] = "self") -> str:
    parts: List[str] = [receiver] if receiver else []
    star_emitted = False
    for param in parameters:
        text = f"{param.name}: {annotation(param.type)}"
        if param.kind is ParameterKind.VAR_POSITIONAL:
            parts.append(f"*{text}")
            star_emitted = True
            continue
        if param.kind is ParameterKind.VAR_KEYWORD:
            parts.append(f"**{text}")
            continue
        if param.kind is ParameterKind.KEYWORD_ONLY and not star_emitted:
            parts.append("*")
            star_emitted = True
        if param.default is not None:
            text = f"{text} = {param.default}"
        parts.append(text)
    return ", ".join(parts)


def render_arguments(parameters: Sequence[Parameter], targets: Optional[Sequence[Parameter]] = None) -> str:
    """Arguments forwarding ``parameters`` to a callee declaring ``targets``.

    ``targets`` defaults to ``parameters``; keyword-only callee parameters are
    passed by the callee's own parameter name.
    """
    targets = targets if targets is not None else parameters
    parts: List[str] = []
    for param, target in zip(parameters, targets):
        if target.kind is ParameterKind.VAR_POSITIONAL:
            parts.append(f"*{param.name}")
        elif target.kind is ParameterKind.VAR_KEYWORD:
            parts.append(f"**{param.name}")
        elif target.kind is ParameterKind.KEYWORD_ONLY:
            parts.append(f"{target.name}={param.name}")
        else:
            parts.append(param.name)
    return ", ".join(parts)


def render_def(
    member: MemberDescriptor,
    *,
    coroutine: bool = False,
    returns: Optional[TypeRef] = None,
) -> str:
    keyword = "async def" if coroutine else "def"
    result = annotation(returns if returns is not None else member.returns)
    return f"{keyword} {member.name}({render_parameters(member.parameters)}) -> {result}:"


def argument_dict(parameters: Sequence[Parameter]) -> str:
    """Literal mapping of parameter names to their values (``{"key": key}``)."""
    return "{" + ", ".join(f'"{p.name}": {p.name}' for p in parameters) + "}"


__all__ = [
    "SourceWriter",
    "ModuleBuilder",
    "render_parameters",
    "render_arguments",
    "render_def",
    "argument_dict",
    "annotation",
]
