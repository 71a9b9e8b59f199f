"""Declared composition steps and their planned form."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from patternsmith.core.diagnostics import SourceAnchor
from patternsmith.core.surface.model import AsyncKind, MemberDescriptor, Parameter


@dataclass(frozen=True)
class CompositionStep:
    """A host method declared as a wrapping step with an explicit rank."""

    member: MemberDescriptor
    rank: int
    label: str = ""

    @property
    def name(self) -> str:
        return self.label or self.member.name

    @property
    def anchor(self) -> Optional[SourceAnchor]:
        return self.member.anchor


@dataclass(frozen=True)
class TerminalStep:
    """The host method at the center of a pipeline (or a chain's default handler)."""

    member: MemberDescriptor
    label: str = ""

    @property
    def name(self) -> str:
        return self.label or self.member.name

    @property
    def anchor(self) -> Optional[SourceAnchor]:
        return self.member.anchor


@dataclass(frozen=True)
class PlannedStep:
    """A validated step or terminal with its async shape resolved."""

    member: MemberDescriptor
    name: str
    rank: Optional[int]
    async_kind: AsyncKind
    cancellation: Optional[Parameter] = None

    @property
    def is_async(self) -> bool:
        return self.async_kind.is_async

    @property
    def is_terminal(self) -> bool:
        return self.rank is None

    @property
    def method(self) -> str:
        return self.member.name


__all__ = ["CompositionStep", "TerminalStep", "PlannedStep"]
