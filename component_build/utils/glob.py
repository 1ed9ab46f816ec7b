"""Glob matching with brace alternation and multiple patterns"""
import asyncio
import glob as _glob
import os
import re
from pathlib import Path
from typing import List, Optional, Sequence, Union

from component_build.core.errors import ConfigError

_BRACE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """
    Expand ``{a,b}`` alternations into separate patterns

    Example:
        expand_braces("**/*{.ts,.js}") -> ["**/*.ts", "**/*.js"]
    """
    match = _BRACE.search(pattern)
    if match is None:
        return [pattern]

    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def _match(patterns: Sequence[str], cwd: Optional[Path]) -> List[str]:
    found = set()
    for pattern in patterns:
        for alternative in expand_braces(pattern):
            for path in _glob.glob(alternative, root_dir=cwd, recursive=True):
                found.add(path.replace(os.sep, "/"))
    return sorted(found)


async def glob(pattern: Union[str, Sequence[str]], cwd: Optional[Path] = None) -> List[str]:
    """
    Match files against one or more glob patterns

    Args:
        pattern: A pattern or a list of patterns (matches are unioned)
        cwd: Folder patterns are relative to (defaults to the working dir)

    Returns:
        Sorted, de-duplicated matches using ``/`` separators

    Raises:
        ConfigError: If an empty list of patterns is given
    """
    patterns = [pattern] if isinstance(pattern, str) else list(pattern)
    if not patterns:
        raise ConfigError("No glob patterns given.")

    return await asyncio.to_thread(_match, patterns, cwd)
