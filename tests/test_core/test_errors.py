"""
Unit tests for error variants
"""
from component_build.core.errors import (
    AggregateTaskError,
    BuildEnvironmentError,
    BuildToolError,
    CommandError,
    ConfigError,
    ErrorKind,
    InternalError,
    format_error_for_cli,
)


def test_error_kinds():
    assert ConfigError("x").kind is ErrorKind.CONFIG
    assert BuildEnvironmentError("staging").kind is ErrorKind.ENVIRONMENT
    assert InternalError("x").kind is ErrorKind.INTERNAL
    assert CommandError(["rollup"], 1).kind is ErrorKind.COMMAND
    assert AggregateTaskError(1, [ValueError("x")]).kind is ErrorKind.AGGREGATE


def test_hint_in_str():
    error = ConfigError("Broken", hint="Fix it")
    assert str(error) == "Broken\n[HINT] Fix it"
    assert str(ConfigError("Broken")) == "Broken"


def test_environment_error_messages():
    assert BuildEnvironmentError(None).message == 'Unknown environment "None".'
    error = BuildEnvironmentError("production", "Invalid testing environment")
    assert error.message == 'Invalid testing environment "production".'


def test_command_error_message():
    error = CommandError(["rollup", "src/a.ts"], 2, stderr="  oops \n")
    assert error.message == "Command failed with exit code 2: rollup src/a.ts\noops"
    assert error.command == ["rollup", "src/a.ts"]


def test_aggregate_error_message():
    error = AggregateTaskError(3, [ValueError("first"), KeyError()], labels=["a", None])

    assert error.failed_count == 2
    assert error.message == (
        "2 out of 3 tasks failed.\n"
        "Failed tasks:\n"
        "  - a: first\n"
        "  - KeyError"
    )


def test_format_error_for_cli():
    assert format_error_for_cli(ConfigError("bad")) == "[CONFIG] bad"
    assert format_error_for_cli(RuntimeError("boom")) == "[ERROR] boom"
    assert isinstance(ConfigError("x"), BuildToolError)
