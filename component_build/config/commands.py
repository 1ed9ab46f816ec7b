"""Command vocabulary recognised by the CLI"""
from enum import Enum
from typing import Dict, Optional, Tuple

from component_build.core.errors import ConfigError


class Command(Enum):
    """Canonical command names"""
    BUILD = "build"
    BUILD_DOCS = "build-docs"
    LINT = "lint"
    ANALYZE = "generate-auto-analysis"
    TEST = "test"
    HELP = "help"


COMMAND_ALIASES: Dict[Command, Tuple[str, ...]] = {
    Command.BUILD: ("build",),
    Command.BUILD_DOCS: ("build-docs", "buildDocs", "docs"),
    Command.LINT: ("lint",),
    Command.ANALYZE: ("generate-auto-analysis", "generateAutoAnalysis", "analyze"),
    Command.TEST: ("test",),
    Command.HELP: ("help", "--help", "-h", "-?"),
}

_LOOKUP: Dict[str, Command] = {
    alias: command
    for command, aliases in COMMAND_ALIASES.items()
    for alias in aliases
}


def resolve_command(name: Optional[str]) -> Command:
    """
    Map a command string onto its canonical command

    Args:
        name: Command as typed by the user; ``None`` means help

    Raises:
        ConfigError: If the name is not a known command
    """
    if name is None:
        return Command.HELP
    try:
        return _LOOKUP[name]
    except KeyError:
        raise ConfigError(
            f"Unknown command: {name}",
            hint="Known commands: " + ", ".join(sorted(_LOOKUP)),
        ) from None


def needs_build_config(command: Optional[Command]) -> bool:
    """Build and test runs (or an unknown upcoming command) need the build section"""
    return command is None or command in (Command.BUILD, Command.TEST)
