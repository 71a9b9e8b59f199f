"""Typed synthesis options and their validation.

Options arrive as a plain mapping (bundled defaults merged with the
request's ``options`` block). ``parse_options`` turns that mapping into a
``SynthesisOptions`` record and reports every configuration problem as a
diagnostic, before any contract analysis starts.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

from patternsmith.core.diagnostics import DiagnosticSink, Severity, SourceAnchor, catalog
from patternsmith.core.utils.text import is_identifier


class WrapOrder(str, Enum):
    """Whether the lowest rank (or first decorator) ends up outermost."""

    OUTER_FIRST = "outer_first"
    INNER_FIRST = "inner_first"


class AsyncMode(str, Enum):
    AUTO = "auto"
    ON = "on"
    OFF = "off"


class MissingMapPolicy(str, Enum):
    ERROR = "error"
    STUB = "stub"
    IGNORE = "ignore"


class DecoratorComposition(str, Enum):
    NONE = "none"
    HELPERS = "helpers"


class InterceptorMode(str, Enum):
    NONE = "none"
    SINGLE = "single"
    PIPELINE = "pipeline"


class ExceptionPolicy(str, Enum):
    RETHROW = "rethrow"
    SWALLOW = "swallow"


class ChainModel(str, Enum):
    RESPONSIBILITY = "responsibility"
    PIPELINE = "pipeline"


class Eviction(str, Enum):
    NONE = "none"
    LRU = "lru"


class Threading(str, Enum):
    SINGLE = "single"
    LOCKING = "locking"


@dataclass(frozen=True)
class SynthesisOptions:
    naming: Mapping[str, str] = field(default_factory=dict)
    wrap_order: WrapOrder = WrapOrder.OUTER_FIRST
    async_mode: AsyncMode = AsyncMode.AUTO
    missing_map: MissingMapPolicy = MissingMapPolicy.ERROR
    composition: DecoratorComposition = DecoratorComposition.HELPERS
    interceptor_mode: InterceptorMode = InterceptorMode.PIPELINE
    exception_policy: ExceptionPolicy = ExceptionPolicy.RETHROW
    chain_model: ChainModel = ChainModel.PIPELINE
    capacity: int = 0
    eviction: Eviction = Eviction.NONE
    threading: Threading = Threading.LOCKING
    generate_try_get: bool = True
    adapt_async: bool = False
    blocking_entry: bool = False
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    member_prefix: str = ""
    severity_overrides: Mapping[str, Severity] = field(default_factory=dict)

    def name(self, key: str, default: str) -> str:
        """Configured override for a generated name, or ``default``."""
        return self.naming.get(key) or default


_ENUM_FIELDS: Dict[str, Type[Enum]] = {
    "wrap_order": WrapOrder,
    "async_mode": AsyncMode,
    "missing_map": MissingMapPolicy,
    "composition": DecoratorComposition,
    "interceptor_mode": InterceptorMode,
    "exception_policy": ExceptionPolicy,
    "chain_model": ChainModel,
    "eviction": Eviction,
    "threading": Threading,
}
_BOOL_FIELDS = ("generate_try_get", "adapt_async", "blocking_entry")

E = TypeVar("E", bound=Enum)


def _parse_enum(
    enum_type: Type[E], key: str, raw: Any, default: E, sink: DiagnosticSink, anchor: Optional[SourceAnchor]
) -> E:
    if raw is None:
        return default
    if isinstance(raw, bool):
        # YAML reads bare on/off as booleans.
        raw = "on" if raw else "off"
    try:
        return enum_type(str(raw).strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        sink.report(catalog.INVALID_OPTION, anchor, key, raw, choices)
        return default


def _parse_names(key: str, raw: Any, sink: DiagnosticSink, anchor: Optional[SourceAnchor]) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str) or not isinstance(raw, (list, tuple)) or not all(isinstance(n, str) for n in raw):
        sink.report(catalog.INVALID_OPTION, anchor, key, raw, "a list of member names")
        return ()
    return tuple(dict.fromkeys(raw))


def parse_options(
    raw: Mapping[str, Any],
    sink: DiagnosticSink,
    anchor: Optional[SourceAnchor] = None,
) -> SynthesisOptions:
    """Build ``SynthesisOptions`` from a mapping, reporting configuration errors.

    Invalid values fall back to the default so that every problem in the
    mapping is reported in one pass; the caller must check the sink before
    using the result.
    """
    defaults = SynthesisOptions()
    values: Dict[str, Any] = {}

    for key, enum_type in _ENUM_FIELDS.items():
        values[key] = _parse_enum(enum_type, key, raw.get(key), getattr(defaults, key), sink, anchor)

    for key in _BOOL_FIELDS:
        value = raw.get(key, getattr(defaults, key))
        if not isinstance(value, bool):
            sink.report(catalog.INVALID_OPTION, anchor, key, value, "true, false")
            value = getattr(defaults, key)
        values[key] = value

    capacity = raw.get("capacity", defaults.capacity)
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 0:
        sink.report(catalog.INVALID_OPTION, anchor, "capacity", capacity, "a non-negative integer")
        capacity = defaults.capacity
    values["capacity"] = capacity

    for key in ("include", "exclude"):
        values[key] = _parse_names(key, raw.get(key), sink, anchor)

    prefix = raw.get("member_prefix") or ""
    if not isinstance(prefix, str) or (prefix and not is_identifier(f"{prefix}x")):
        sink.report(catalog.INVALID_OPTION, anchor, "member_prefix", prefix, "an identifier prefix")
        prefix = ""
    values["member_prefix"] = prefix

    naming: Dict[str, str] = {}
    for key, name in sorted((raw.get("naming") or {}).items()):
        if not isinstance(name, str) or not is_identifier(name):
            sink.report(catalog.INVALID_NAME, anchor, name, key)
            continue
        naming[str(key)] = name
    values["naming"] = naming

    overrides: Dict[str, Severity] = {}
    for diagnostic_id, level in sorted((raw.get("severity") or {}).items()):
        if diagnostic_id not in catalog.ALL_DESCRIPTORS:
            sink.report(catalog.INVALID_OPTION, anchor, "severity", diagnostic_id, "a known diagnostic id")
            continue
        severity = _parse_enum(Severity, f"severity.{diagnostic_id}", level, None, sink, anchor)  # type: ignore[arg-type]
        if severity is not None:
            overrides[diagnostic_id] = severity
    values["severity_overrides"] = overrides

    options = SynthesisOptions(**values)
    _check_conflicts(options, sink, anchor)
    return options


def _check_conflicts(options: SynthesisOptions, sink: DiagnosticSink, anchor: Optional[SourceAnchor]) -> None:
    if options.eviction is Eviction.LRU and options.capacity <= 0:
        sink.report(
            catalog.CONFLICTING_OPTIONS, anchor, "eviction", "capacity",
            "lru eviction requires a positive capacity",
        )
    if options.exception_policy is ExceptionPolicy.SWALLOW and options.interceptor_mode is InterceptorMode.NONE:
        sink.report(
            catalog.CONFLICTING_OPTIONS, anchor, "exception_policy", "interceptor_mode",
            "swallowing exceptions requires at least one interceptor",
        )
    if options.include and options.exclude:
        sink.report(
            catalog.CONFLICTING_OPTIONS, anchor, "include", "exclude",
            "a facade either lists the members it keeps or the members it drops",
        )
    seen: Dict[str, str] = {}
    for key, name in sorted(options.naming.items()):
        if name in seen:
            sink.report(
                catalog.CONFLICTING_OPTIONS, anchor, f"naming.{key}", f"naming.{seen[name]}",
                f"both generate '{name}'",
            )
        else:
            seen[name] = key


__all__ = [
    "WrapOrder",
    "AsyncMode",
    "MissingMapPolicy",
    "DecoratorComposition",
    "InterceptorMode",
    "ExceptionPolicy",
    "ChainModel",
    "Eviction",
    "Threading",
    "SynthesisOptions",
    "parse_options",
]
