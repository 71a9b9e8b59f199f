"""
patternsmith config show command.

SUMMARY: Show current configuration

Displays the merged configuration from bundled defaults, project overrides,
and environment variables.
"""

from __future__ import annotations

import argparse

import yaml

from patternsmith.cli import OutputFormatter, add_json_flag, add_repo_root_flag, get_repo_root
from patternsmith.core.config import ConfigManager
from patternsmith.core.exceptions import ConfigurationError

SUMMARY = "Show current configuration"


def _nest_key(key: str, value):
    """Nest a dot-notation key into a YAML/JSON-friendly mapping."""
    parts = [p for p in str(key).split(".") if p]
    out = value
    for part in reversed(parts):
        out = {part: out}
    return out


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "key",
        nargs="?",
        help="Specific configuration key to show (e.g., 'synthesis.defaults.wrap_order')",
    )
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Show configuration - delegates to ConfigManager."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config = ConfigManager(get_repo_root(args)).load_config(validate=True)
    except ConfigurationError as e:
        formatter.error(e)
        return 1

    value = config
    if args.key:
        for part in args.key.split("."):
            if not isinstance(value, dict) or part not in value:
                formatter.error(KeyError(args.key), f"Key not found: {args.key}", error_code="not_found")
                return 1
            value = value[part]
        value = _nest_key(args.key, value)

    formatter.emit(value, yaml.safe_dump(value, default_flow_style=False, sort_keys=True).rstrip())
    return 0
