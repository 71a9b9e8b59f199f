"""Configuration: layered YAML loading, section accessors and synthesis options."""
from __future__ import annotations

from .base import BaseDomainConfig
from .domains import LoggingConfig, OutputConfig, SynthesisConfig
from .manager import ConfigManager, clear_config_cache, get_cached_config
from .options import (
    AsyncMode,
    ChainModel,
    DecoratorComposition,
    Eviction,
    ExceptionPolicy,
    InterceptorMode,
    MissingMapPolicy,
    SynthesisOptions,
    Threading,
    WrapOrder,
    parse_options,
)

__all__ = [
    "BaseDomainConfig",
    "ConfigManager",
    "clear_config_cache",
    "get_cached_config",
    "LoggingConfig",
    "OutputConfig",
    "SynthesisConfig",
    "AsyncMode",
    "ChainModel",
    "DecoratorComposition",
    "Eviction",
    "ExceptionPolicy",
    "InterceptorMode",
    "MissingMapPolicy",
    "SynthesisOptions",
    "Threading",
    "WrapOrder",
    "parse_options",
]
