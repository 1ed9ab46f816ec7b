"""
Custom Error Classes

Every error raised by the build tool is one of a closed set of variants.
Each variant carries a ``kind`` discriminant so callers can match on it
without relying on subclass checks.
"""

from enum import Enum
from typing import Any, List, Optional, Sequence


class ErrorKind(Enum):
    """Discriminant for build tool errors"""
    CONFIG = "config"
    ENVIRONMENT = "environment"
    AGGREGATE = "aggregate"
    INTERNAL = "internal"
    COMMAND = "command"


class BuildToolError(Exception):
    """Base exception for every build tool error"""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, hint: str = None):
        """
        Initialize build tool error

        Args:
            message: Error message
            hint: Optional hint for resolving the error
        """
        self.message = message
        self.hint = hint
        super().__init__(self.message)

    def __str__(self):
        """Format error message with hint"""
        if self.hint:
            return f"{self.message}\n[HINT] {self.hint}"
        return self.message


class ConfigError(BuildToolError):
    """Raised when a required config field is missing or a value is invalid"""

    kind = ErrorKind.CONFIG


class BuildEnvironmentError(BuildToolError):
    """Raised when the runtime environment is unset or not the one required"""

    kind = ErrorKind.ENVIRONMENT

    def __init__(self, environment: Optional[str], message: str = "Unknown environment"):
        self.environment = environment
        hint = "Use one of: development, production, test (set NODE_ENV or pass --production)"
        super().__init__(f'{message} "{environment}".', hint)


class InternalError(BuildToolError):
    """Raised when an invariant the caller should have guaranteed is violated"""

    kind = ErrorKind.INTERNAL


class CommandError(BuildToolError):
    """Raised when an external tool exits with a non-zero status"""

    kind = ErrorKind.COMMAND

    def __init__(self, command: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

        message = f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class AggregateTaskError(BuildToolError):
    """Raised when one or more tasks of a concurrent batch failed"""

    kind = ErrorKind.AGGREGATE

    def __init__(self, total_count: int, errors: Sequence[BaseException], labels: Sequence[Any] = None):
        """
        Args:
            total_count: Number of tasks in the batch
            errors: Errors of the failed tasks, in submission order
            labels: Optional labels of the failed tasks, aligned with ``errors``
        """
        self.total_count = total_count
        self.errors: List[BaseException] = list(errors)
        self.labels: List[Any] = list(labels) if labels is not None else []

        super().__init__(self._summary())

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    def _summary(self) -> str:
        lines = [f"{self.failed_count} out of {self.total_count} tasks failed.", "Failed tasks:"]
        for index, error in enumerate(self.errors):
            detail = str(error) or type(error).__name__
            if index < len(self.labels) and self.labels[index] is not None:
                detail = f"{self.labels[index]}: {detail}"
            lines.append(f"  - {detail}")
        return "\n".join(lines)


def format_error_for_cli(error: Exception) -> str:
    """
    Format error for CLI display

    Args:
        error: Exception to format

    Returns:
        Formatted error string
    """
    if isinstance(error, BuildToolError):
        return f"[{error.kind.value.upper()}] {error}"
    else:
        return f"[ERROR] {str(error)}"
