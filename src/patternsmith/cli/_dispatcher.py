"""
Command dispatcher for the ``patternsmith`` executable.

Every subpackage of ``patternsmith.cli`` is a domain and every public module
inside it is a command. A command module provides ``SUMMARY``,
``register_args(parser)`` and ``main(args) -> int``; dropping a new module
into a domain package is all it takes to expose it.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import pkgutil
import sys
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from types import ModuleType

import patternsmith.cli as cli_package

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class Command:
    domain: str
    name: str
    module: ModuleType

    @property
    def summary(self) -> str:
        return getattr(self.module, "SUMMARY", f"{self.domain} {self.name}")

    @property
    def flag_name(self) -> str:
        return self.name.replace("_", "-")


def _public_modules(package_path):
    for info in pkgutil.iter_modules(package_path):
        if not info.name.startswith("_"):
            yield info


@lru_cache(maxsize=1)
def discover_commands() -> dict[str, tuple[Command, ...]]:
    """Map each domain name to its commands, both sorted by name."""
    domains: dict[str, tuple[Command, ...]] = {}
    for domain in sorted(_public_modules(cli_package.__path__), key=lambda i: i.name):
        if not domain.ispkg:
            continue
        package = importlib.import_module(f"patternsmith.cli.{domain.name}")
        commands = []
        for info in sorted(_public_modules(package.__path__), key=lambda i: i.name):
            module = importlib.import_module(f"patternsmith.cli.{domain.name}.{info.name}")
            if not callable(getattr(module, "main", None)):
                logger.debug("skipping %s.%s: no main()", domain.name, info.name)
                continue
            commands.append(Command(domain.name, info.name, module))
        if commands:
            domains[domain.name] = tuple(commands)
    return domains


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patternsmith",
        description="Generate design-pattern code (decorators, proxies, facades, pipelines) from contract documents.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_version()}")

    domains = parser.add_subparsers(dest="domain", title="domains", metavar="<domain>")
    for domain, commands in discover_commands().items():
        domain_parser = domains.add_parser(domain, help=f"{domain.title()} commands")
        domain_parser.set_defaults(_domain_help=domain_parser.print_help)
        command_parsers = domain_parser.add_subparsers(dest="command", title="commands", metavar="<command>")
        for command in commands:
            aliases = [command.name] if command.flag_name != command.name else []
            command_parser = command_parsers.add_parser(command.flag_name, aliases=aliases, help=command.summary)
            register: Callable[[argparse.ArgumentParser], None] | None = getattr(
                command.module, "register_args", None
            )
            if register is not None:
                register(command_parser)
            command_parser.set_defaults(_func=command.module.main)
    return parser


def _get_version() -> str:
    from patternsmith import __version__

    return __version__


def main(argv: list[str] | None = None) -> int:
    """Run the command named by ``argv`` (``sys.argv[1:]`` by default) and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if not args.domain:
        parser.print_help()
        return EXIT_OK

    func: Callable[[argparse.Namespace], int] | None = getattr(args, "_func", None)
    if func is None:
        args._domain_help()
        return EXIT_OK

    try:
        return func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.debug("%s %s failed", args.domain, args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
