"""
patternsmith configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from patternsmith.core.exceptions import ConfigurationError
from patternsmith.core.utils.io import read_yaml_file
from patternsmith.core.utils.merge import deep_merge as _deep_merge
from patternsmith.data import get_data_path, list_files

logger = logging.getLogger(__name__)

try:
    import yaml
except Exception as err:  # pragma: no cover - surfaced at import time
    raise RuntimeError("PyYAML is required: pip install pyyaml") from err

try:
    from jsonschema import Draft202012Validator
except Exception as err:  # pragma: no cover - surfaced at import time
    raise RuntimeError("jsonschema is required: pip install jsonschema") from err

ENV_PREFIX = "PATTERNSMITH_"
PROJECT_CONFIG_DIR = ".patternsmith"


class ConfigManager:
    """Load, merge, and validate patternsmith configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: PATTERNSMITH_<SECTION>__<KEY>
    2. Project config: <repo>/.patternsmith/config/*.yaml (alphabetical order)
    3. Bundled defaults: patternsmith.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else Path.cwd()
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = self.repo_root / PROJECT_CONFIG_DIR / "config"
        self.schemas_dir = get_data_path("schemas")

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            data = read_yaml_file(path, default={}, raise_on_error=True)
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Invalid YAML in {path}: {exc}", context={"path": str(path)}
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {path} must contain a mapping", context={"path": str(path)}
            )
        return data

    def validate_schema(self, config: Dict[str, Any], schema_name: str = "config.schema.yaml") -> None:
        """Validate ``config`` against a bundled schema, raising ``ConfigurationError``."""
        schema = self.load_yaml(self.schemas_dir / schema_name)
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(config), key=lambda e: list(e.absolute_path))
        if errors:
            details = [
                f"{'.'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
                for err in errors
            ]
            raise ConfigurationError(
                "Configuration failed schema validation:\n  " + "\n  ".join(details),
                context={"errors": details, "schema": schema_name},
            )

    # ---- environment overrides -------------------------------------------

    def parse_env_key(self, raw: str) -> Optional[List[str]]:
        """Config path for the part of a variable name after ``PATTERNSMITH_``.

        Path segments are separated by ``__``; a single underscore belongs to
        the key (``SYNTHESIS__DEFAULTS__WRAP_ORDER`` is
        ``synthesis.defaults.wrap_order``). Names without ``__`` do not address
        a setting and yield None.
        """
        if "__" not in raw:
            return None
        segments = raw.split("__")
        for segment in segments:
            if not segment or segment.startswith("_") or segment.endswith("_"):
                raise ConfigurationError(
                    f"Malformed {ENV_PREFIX}* key '{ENV_PREFIX}{raw}': "
                    "segments are separated by exactly two underscores",
                    context={"key": raw},
                )
        return [segment.lower() for segment in segments]

    def parse_env_value(self, value: str) -> Any:
        """Read an override the way the YAML layers would read it.

        ``64`` is an int, ``true`` a bool and ``[a, b]`` a list; anything that
        is not a YAML scalar or flow collection stays a string.
        """
        text = value.strip()
        if not text:
            return ""
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError:
            logger.debug("environment value %r is not YAML; using it as text", text)
            return text

    def iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ):
            if not key.startswith(ENV_PREFIX):
                continue
            path = self.parse_env_key(key[len(ENV_PREFIX):])
            if path is None:
                logger.warning("ignoring %s: expected %s<SECTION>__<KEY>", key, ENV_PREFIX)
                continue
            yield path, self.parse_env_value(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        current: Any = root
        for part in path[:-1]:
            nxt = current.get(part)
            if nxt is None:
                nxt = current[part] = {}
            if not isinstance(nxt, dict):
                raise ConfigurationError(
                    f"Environment override path '{'.'.join(path)}' traverses a non-mapping value",
                    context={"path": path},
                )
            current = nxt
        current[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, value in self.iter_env_overrides():
            logger.debug("config override from environment: %s", ".".join(path))
            self._set_nested(cfg, path, value)

    # ---- loading -----------------------------------------------------------

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        if not directory.exists():
            return cfg
        for path in sorted(directory.glob("*.y*ml")):
            cfg = self.deep_merge(cfg, self.load_yaml(path))
        return cfg

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load the merged configuration.

        The returned dict is a fresh copy; callers may mutate it.
        """
        cfg: Dict[str, Any] = {}
        for path in list_files("config"):
            cfg = self.deep_merge(cfg, self.load_yaml(path))
        cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)
        if validate:
            self.validate_schema(cfg)
        return cfg

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> ConfigManager().get("synthesis.defaults.wrap_order")
            'outer_first'
        """
        current: Any = self.load_config(validate=False)
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


_cache: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], Dict[str, Any]] = {}


def _cache_key(repo_root: Optional[Path]) -> Tuple[str, Tuple[Tuple[str, str], ...]]:
    root = str((Path(repo_root) if repo_root is not None else Path.cwd()).expanduser().resolve())
    env = tuple(sorted((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX)))
    return root, env


def get_cached_config(repo_root: Optional[Path] = None) -> Dict[str, Any]:
    """Return the validated configuration for ``repo_root``, loading it once.

    The cache is keyed by repository root and the current PATTERNSMITH_*
    environment, so changing an override yields a fresh load.
    """
    key = _cache_key(repo_root)
    if key not in _cache:
        _cache[key] = ConfigManager(repo_root).load_config(validate=True)
    return _cache[key]


def clear_config_cache() -> None:
    _cache.clear()


__all__ = ["ConfigManager", "get_cached_config", "clear_config_cache", "ENV_PREFIX"]

