"""Process-level settings, read once at the CLI boundary"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class BuildSettings(BaseSettings):
    """Environment driven settings

    These are the only values taken from the process environment. They are
    passed explicitly into config resolution, which never reads the
    environment itself.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # CI marker; unset or "false" means a local run
    ci: Optional[str] = None

    # Build environment: development, production or test
    node_env: Optional[str] = None

    log_level: str = "INFO"
