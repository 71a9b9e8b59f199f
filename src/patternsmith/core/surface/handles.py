"""Completion-handle recognition and async classification.

A member is asynchronous when it is a coroutine (``async def``) or when its
declared return type is one of the configured completion-handle types. The
value a handle eventually produces is its last type argument
(``Coroutine[Any, Any, T]`` and ``Awaitable[T]`` both carry ``T``).
"""
from __future__ import annotations

from typing import FrozenSet, Iterable

from .model import AsyncKind, MemberDescriptor
from .types import NONE, TypeRef

DEFAULT_HANDLE_NAMES = (
    "Awaitable",
    "Coroutine",
    "Future",
    "Task",
    "asyncio.Future",
    "asyncio.Task",
    "typing.Awaitable",
    "typing.Coroutine",
    "collections.abc.Awaitable",
    "collections.abc.Coroutine",
    "concurrent.futures.Future",
)


class CompletionHandles:
    """Classifies return shapes against a fixed set of handle type names."""

    def __init__(self, names: Iterable[str] = DEFAULT_HANDLE_NAMES) -> None:
        self.names: FrozenSet[str] = frozenset(names)

    def is_handle(self, type_ref: TypeRef) -> bool:
        return type_ref.name in self.names

    def unwrap(self, type_ref: TypeRef) -> TypeRef:
        """Result type carried by a handle, ``None`` for a bare handle, else unchanged."""
        if not self.is_handle(type_ref):
            return type_ref
        return type_ref.args[-1] if type_ref.args else NONE

    def result_type(self, member: MemberDescriptor) -> TypeRef:
        """What awaiting (or calling, for sync members) the member produces."""
        if member.coroutine:
            return self.unwrap(member.returns) if self.is_handle(member.returns) else member.returns
        return self.unwrap(member.returns)

    def classify(self, member: MemberDescriptor) -> AsyncKind:
        if member.is_data:
            return AsyncKind.SYNC
        if not (member.coroutine or self.is_handle(member.returns)):
            return AsyncKind.SYNC
        if self.result_type(member).is_none:
            return AsyncKind.ASYNC_NO_RESULT
        return AsyncKind.ASYNC_WITH_RESULT


__all__ = ["CompletionHandles", "DEFAULT_HANDLE_NAMES"]
