"""Catalog of every diagnostic the engine can report.

Ids are stable and never reused. Templates take positional arguments.
"""
from __future__ import annotations

from typing import Dict

from .model import Category, DiagnosticDescriptor, Severity

_E, _W, _I = Severity.ERROR, Severity.WARNING, Severity.INFO


def _d(id: str, kind: str, category: Category, severity: Severity, template: str) -> DiagnosticDescriptor:
    return DiagnosticDescriptor(id=id, kind=kind, category=category, severity=severity, template=template)


# Structural
INVALID_VARIANT = _d(
    "PS0001", "invalid-variant", Category.STRUCTURAL, _E,
    "Type '{0}' must be a capability set or a partially-implemented base to generate a {1}",
)
GENERIC_CONTRACT = _d(
    "PS0002", "generic-contract", Category.STRUCTURAL, _E,
    "Type '{0}' declares {1} type parameter(s); generic contracts are not supported",
)
NESTED_CONTRACT = _d(
    "PS0003", "nested-contract", Category.STRUCTURAL, _E,
    "Type '{0}' is nested inside another type; declare it at module level",
)
NOT_EXTENSIBLE = _d(
    "PS0004", "not-extensible", Category.STRUCTURAL, _E,
    "Type '{0}' does not permit a generated extension for {1}",
)
NAME_CONFLICT = _d(
    "PS0005", "name-conflict", Category.STRUCTURAL, _E,
    "Generated type name '{0}' conflicts with an existing type in '{1}'",
)

# Configuration
INVALID_NAME = _d(
    "PS0101", "invalid-name", Category.CONFIGURATION, _E,
    "Configured name '{0}' for '{1}' is not a valid Python identifier",
)
CONFLICTING_OPTIONS = _d(
    "PS0102", "conflicting-options", Category.CONFIGURATION, _E,
    "Option '{0}' conflicts with '{1}': {2}",
)
INVALID_OPTION = _d(
    "PS0103", "invalid-option", Category.CONFIGURATION, _E,
    "Option '{0}' has invalid value '{1}' (expected one of: {2})",
)
UNKNOWN_NAMING_KEY = _d(
    "PS0104", "unknown-naming-key", Category.CONFIGURATION, _W,
    "Naming override '{0}' is not used by the {1} generator",
)

# Surface
GENERIC_MEMBER = _d(
    "PS0201", "generic-member", Category.SURFACE, _E,
    "Member '{0}' is generic; generic members cannot be forwarded",
)
UNSUPPORTED_MEMBER = _d(
    "PS0202", "unsupported-member", Category.SURFACE, _E,
    "Member '{0}' is a {1}, which cannot be forwarded",
)
INACCESSIBLE_MEMBER = _d(
    "PS0203", "inaccessible-member", Category.SURFACE, _W,
    "Member '{0}' is {1} and cannot be reached from a generated type; it is skipped",
)
INACCESSIBLE_ACCESSOR = _d(
    "PS0204", "inaccessible-accessor", Category.SURFACE, _W,
    "Property '{0}' has a {1} {2} accessor; the property is skipped",
)
BY_REFERENCE_PARAMETER = _d(
    "PS0205", "by-reference-parameter", Category.SURFACE, _I,
    "Parameter '{1}' of '{0}' is declared '{2}'; it is forwarded as an object reference",
)
EMPTY_SURFACE = _d(
    "PS0206", "empty-surface", Category.SURFACE, _I,
    "Type '{0}' exposes no members to forward",
)
ASYNC_SURFACE_DISABLED = _d(
    "PS0207", "async-surface-disabled", Category.SURFACE, _W,
    "Member '{0}' is asynchronous but async generation is disabled; it is intercepted synchronously",
)

# Binding
UNMAPPED_MEMBER = _d(
    "PS0301", "unmapped-member", Category.BINDING, _E,
    "No implementation found for contract member '{0}'",
)
AMBIGUOUS_BINDING = _d(
    "PS0302", "ambiguous-binding", Category.BINDING, _E,
    "Contract member '{0}' matches {1} implementations ({2}); '{3}' is bound",
)
BINDING_SIGNATURE_MISMATCH = _d(
    "PS0303", "binding-signature-mismatch", Category.BINDING, _E,
    "Implementation '{1}' targets '{0}' but its signature does not match: {2}",
)
ASYNC_BINDING_WIDENED = _d(
    "PS0304", "async-binding-widened", Category.BINDING, _W,
    "Implementation '{1}' bound to '{0}' is asynchronous while async generation is disabled",
)
UNSUPPORTED_FACADE_MEMBER = _d(
    "PS0305", "unsupported-facade-member", Category.BINDING, _W,
    "Member '{0}' is a {1}; facades bind methods only and it is skipped",
)
EXPOSED_MEMBER_NOT_STATIC = _d(
    "PS0306", "exposed-member-not-static", Category.BINDING, _E,
    "Member '{0}' of host '{1}' is exposed but is not static",
)
INCLUDED_MEMBER_NOT_FOUND = _d(
    "PS0307", "included-member-not-found", Category.BINDING, _W,
    "Included member '{0}' is not an exposable method of host '{1}'",
)
FACADE_OPTION_IGNORED = _d(
    "PS0308", "facade-option-ignored", Category.BINDING, _W,
    "Option '{0}' has no effect on contract-first facade '{1}': {2}",
)
DUPLICATE_FACADE_MEMBER = _d(
    "PS0309", "duplicate-facade-member", Category.BINDING, _E,
    "Facade method '{0}' is exposed by more than one host member ({1})",
)

# Composition
NO_STEPS = _d(
    "PS0401", "no-steps", Category.COMPOSITION, _E,
    "Type '{0}' declares no composition steps",
)
MISSING_TERMINAL = _d(
    "PS0402", "missing-terminal", Category.COMPOSITION, _E,
    "Type '{0}' declares no terminal step",
)
MULTIPLE_TERMINALS = _d(
    "PS0403", "multiple-terminals", Category.COMPOSITION, _E,
    "Type '{0}' declares {1} terminal steps ({2}); exactly one is required",
)
DUPLICATE_RANK = _d(
    "PS0404", "duplicate-rank", Category.COMPOSITION, _E,
    "Steps {1} of type '{0}' share rank {2}; ranks must be unique",
)
ASYNC_DISABLED = _d(
    "PS0405", "async-disabled", Category.COMPOSITION, _E,
    "Step '{1}' of type '{0}' is asynchronous but async generation is disabled",
)
INVALID_STEP_SIGNATURE = _d(
    "PS0406", "invalid-step-signature", Category.COMPOSITION, _E,
    "Step '{0}' must accept (input, next) and optionally a cancellation signal: {1}",
)
INVALID_TERMINAL_SIGNATURE = _d(
    "PS0407", "invalid-terminal-signature", Category.COMPOSITION, _E,
    "Terminal '{0}' must accept (input) and optionally a cancellation signal: {1}",
)
MISSING_CANCELLATION = _d(
    "PS0408", "missing-cancellation", Category.COMPOSITION, _W,
    "Asynchronous step '{0}' does not accept a cancellation signal; cancellation stops at this step",
)
MISSING_DEFAULT = _d(
    "PS0409", "missing-default", Category.COMPOSITION, _W,
    "Chain '{0}' has no default handler; unhandled input raises at runtime",
)
MULTIPLE_DEFAULTS = _d(
    "PS0410", "multiple-defaults", Category.COMPOSITION, _E,
    "Chain '{0}' declares {1} default handlers ({2}); at most one is allowed",
)
NO_FACTORY = _d(
    "PS0501", "no-factory", Category.COMPOSITION, _E,
    "Type '{0}' declares no factory for cached construction",
)
MULTIPLE_FACTORIES = _d(
    "PS0502", "multiple-factories", Category.COMPOSITION, _E,
    "Type '{0}' declares {1} factories ({2}); exactly one is required",
)
INVALID_FACTORY_SIGNATURE = _d(
    "PS0503", "invalid-factory-signature", Category.COMPOSITION, _E,
    "Factory '{0}' must be a static method taking one key argument: {1}",
)

# Engine
UNKNOWN_PATTERN = _d(
    "PS0901", "unknown-pattern", Category.CONFIGURATION, _E,
    "No generator is registered for pattern '{0}' (available: {1})",
)

ALL_DESCRIPTORS: Dict[str, DiagnosticDescriptor] = {
    d.id: d for d in (value for value in dict(globals()).values() if isinstance(value, DiagnosticDescriptor))
}


def get_descriptor(diagnostic_id: str) -> DiagnosticDescriptor:
    """Look up a descriptor by id. Raises ``KeyError`` when unknown."""
    return ALL_DESCRIPTORS[diagnostic_id]
