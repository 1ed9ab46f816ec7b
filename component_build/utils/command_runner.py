"""Run external tools as async subprocesses"""
import asyncio
import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from component_build.core.errors import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of an executed command"""
    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner:
    """Executes commands with :func:`asyncio.create_subprocess_exec`"""

    def __init__(self, cwd: Optional[Path] = None, env: Optional[Mapping[str, str]] = None):
        """
        Args:
            cwd: Working directory for every command
            env: Extra environment variables layered over the process environment
        """
        self.cwd = cwd
        self.env = env

    def _merge_environment(self) -> Optional[Dict[str, str]]:
        if self.env is None:
            return None
        merged = os.environ.copy()
        merged.update(self.env)
        return merged

    @staticmethod
    def format_command(command: Sequence[str]) -> str:
        return " ".join(shlex.quote(part) for part in command)

    async def run(self, command: Sequence[str], check: bool = True) -> CommandResult:
        """
        Run a command to completion and capture its output

        Args:
            command: Program and arguments
            check: Raise when the exit code is non-zero

        Raises:
            CommandError: If ``check`` is set and the command failed
        """
        logger.debug(f"Running: {self.format_command(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(self.cwd) if self.cwd else None,
                env=self._merge_environment(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise CommandError(command, 127, stderr=f"{command[0]}: command not found") from None
        stdout, stderr = await process.communicate()

        result = CommandResult(
            command=list(command),
            returncode=process.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

        if check and result.returncode != 0:
            raise CommandError(result.command, result.returncode, result.stdout, result.stderr)
        return result
