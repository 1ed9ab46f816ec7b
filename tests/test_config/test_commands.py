"""
Unit tests for command names and build environment selection
"""
import pytest

from component_build.config.commands import Command, needs_build_config, resolve_command
from component_build.core.errors import BuildEnvironmentError, ConfigError, ErrorKind
from component_build.models.options import BuildEnv, Options, select_environment


@pytest.mark.parametrize("name,expected", [
    ("build", Command.BUILD),
    ("buildDocs", Command.BUILD_DOCS),
    ("docs", Command.BUILD_DOCS),
    ("lint", Command.LINT),
    ("analyze", Command.ANALYZE),
    ("generateAutoAnalysis", Command.ANALYZE),
    ("test", Command.TEST),
    ("-h", Command.HELP),
    ("-?", Command.HELP),
])
def test_resolve_command_aliases(name, expected):
    assert resolve_command(name) is expected


def test_resolve_command_none_is_help():
    assert resolve_command(None) is Command.HELP


def test_resolve_command_unknown():
    with pytest.raises(ConfigError) as exc_info:
        resolve_command("deploy")

    assert exc_info.value.kind is ErrorKind.CONFIG
    assert "deploy" in exc_info.value.message
    assert "build" in exc_info.value.hint


def test_needs_build_config():
    assert needs_build_config(None)
    assert needs_build_config(Command.BUILD)
    assert needs_build_config(Command.TEST)
    assert not needs_build_config(Command.LINT)
    assert not needs_build_config(Command.BUILD_DOCS)


def test_select_environment_defaults():
    """Without flags, test runs in test and everything else in development"""
    assert select_environment(Command.BUILD) is BuildEnv.DEVELOPMENT
    assert select_environment(Command.TEST) is BuildEnv.TEST


def test_select_environment_production_flag_wins():
    assert select_environment(Command.BUILD, production=True, node_env="test") is BuildEnv.PRODUCTION


def test_select_environment_from_node_env():
    assert select_environment(Command.BUILD, node_env="production") is BuildEnv.PRODUCTION
    assert select_environment(Command.TEST, node_env="development") is BuildEnv.DEVELOPMENT


def test_select_environment_unknown_node_env():
    with pytest.raises(BuildEnvironmentError) as exc_info:
        select_environment(Command.BUILD, node_env="staging")

    assert exc_info.value.environment == "staging"
    assert exc_info.value.message == 'Unknown environment "staging".'


def test_options_defaults_and_frozen():
    options = Options()
    assert options.env is BuildEnv.DEVELOPMENT
    assert options.debug is False
    assert options.user_config_file is None
    assert options.compile_only is False

    with pytest.raises(Exception):
        options.debug = True
