"""
Runtime configuration through environment variables.
All variables carry the HCL_ prefix.

Variables:
    HCL_HOME        installation home; standard modules live in <home>/std
    HCL_LOG_LEVEL   logging level name (default WARNING)
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .tokens import SOURCE_SUFFIX


class Settings(BaseSettings):
    # Installation home
    home: Path = Field(default_factory=lambda: Path.home() / ".hcl")

    # Logging
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="HCL_", extra="ignore", frozen=True)

    @field_validator("home")
    @classmethod
    def _expand_home(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.upper()

    @property
    def std_dir(self) -> Path:
        return self.home / "std"

    def std_module_path(self, name: str) -> Path:
        """Location of a standard-library source module."""
        return self.std_dir / f"{name}{SOURCE_SUFFIX}"


def configure_logging(settings: Settings) -> None:
    """Apply the configured level to the root logger."""
    logging.basicConfig(level=settings.log_level)
