"""Signature keys: member identity and emission order.

A key is ``<kind code>:<name>`` followed, for methods, by the parenthesised
list of parameter shapes (by-reference mode and type, in order). Parameter
names and return types are not part of the key. Keys compare ordinally, so
sorting by key gives the same order on every run and every machine.
"""
from __future__ import annotations

from typing import Iterable

from .model import MemberDescriptor, MemberKind, Parameter, ParameterKind, RefMode

_VARIADIC_PREFIX = {
    ParameterKind.VAR_POSITIONAL: "*",
    ParameterKind.VAR_KEYWORD: "**",
}


def parameter_shape(parameter: Parameter) -> str:
    text = _VARIADIC_PREFIX.get(parameter.kind, "") + parameter.type.render()
    if parameter.mode is not RefMode.NONE:
        return f"{parameter.mode.value} {text}"
    return text


def parameters_key(parameters: Iterable[Parameter]) -> str:
    return "(" + ",".join(parameter_shape(p) for p in parameters) + ")"


def signature_key(member: MemberDescriptor) -> str:
    prefix = f"{member.kind.code}:{member.name}"
    if member.kind is MemberKind.METHOD:
        return prefix + parameters_key(member.parameters)
    return prefix


__all__ = ["parameter_shape", "parameters_key", "signature_key"]
