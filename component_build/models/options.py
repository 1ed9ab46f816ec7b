"""Run options that are not part of the configuration tree"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from component_build.config.commands import Command
from component_build.core.errors import BuildEnvironmentError


class BuildEnv(Enum):
    """Build environment"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class Options(BaseModel):
    """Options taken from the command line"""
    model_config = ConfigDict(frozen=True)

    env: BuildEnv = Field(BuildEnv.DEVELOPMENT, description="Build environment")
    debug: bool = Field(False, description="Verbose logging")
    user_config_file: Optional[str] = Field(None, description="User config file (YAML or JSON)")
    compile_only: bool = Field(False, description="Only compile the tests, don't run them")


def select_environment(
    command: Command,
    production: bool = False,
    node_env: Optional[str] = None,
) -> BuildEnv:
    """
    Pick the build environment

    ``--production`` wins, then ``NODE_ENV``; otherwise the test command runs
    in ``test`` and everything else in ``development``.

    Raises:
        BuildEnvironmentError: If ``NODE_ENV`` holds an unknown value
    """
    if production:
        return BuildEnv.PRODUCTION

    if node_env is None:
        return BuildEnv.TEST if command is Command.TEST else BuildEnv.DEVELOPMENT

    try:
        return BuildEnv(node_env)
    except ValueError:
        raise BuildEnvironmentError(node_env) from None
