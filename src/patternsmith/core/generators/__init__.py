"""Pattern generators and their registry."""
from __future__ import annotations

from typing import Dict, List, Optional, Type

from patternsmith.core.exceptions import UnknownPatternError

from .base import Artifact, GenerationContext, PatternGenerator, SynthesisRequest
from .chain import ChainGenerator
from .composer import ComposerGenerator
from .decorator import DecoratorGenerator
from .facade import FacadeGenerator
from .flyweight import FlyweightGenerator
from .proxy import ProxyGenerator

# Registry of pattern generators
_GENERATOR_REGISTRY: Dict[str, Type[PatternGenerator]] = {}


def register_generator(generator_class: Type[PatternGenerator]) -> None:
    """Register a generator under its ``pattern`` name.

    Args:
        generator_class: Generator class to register
    """
    raw_name = getattr(generator_class, "pattern", "")
    name = raw_name.strip().lower() if isinstance(raw_name, str) else ""
    if not name:
        raise ValueError(f"Cannot register generator {generator_class.__name__} with empty pattern")
    _GENERATOR_REGISTRY[name] = generator_class


def available_patterns() -> List[str]:
    return sorted(_GENERATOR_REGISTRY)


def find_generator(pattern: str) -> Optional[Type[PatternGenerator]]:
    return _GENERATOR_REGISTRY.get(str(pattern or "").strip().lower())


def get_generator(pattern: str) -> Type[PatternGenerator]:
    """Get the generator class for ``pattern``.

    Raises:
        UnknownPatternError: If no generator is registered under that name
    """
    generator = find_generator(pattern)
    if generator is None:
        raise UnknownPatternError(pattern, available=available_patterns())
    return generator


for _generator in (
    DecoratorGenerator,
    ProxyGenerator,
    FacadeGenerator,
    ComposerGenerator,
    ChainGenerator,
    FlyweightGenerator,
):
    register_generator(_generator)


__all__ = [
    "Artifact",
    "GenerationContext",
    "PatternGenerator",
    "SynthesisRequest",
    "DecoratorGenerator",
    "ProxyGenerator",
    "FacadeGenerator",
    "ComposerGenerator",
    "ChainGenerator",
    "FlyweightGenerator",
    "register_generator",
    "available_patterns",
    "find_generator",
    "get_generator",
]
