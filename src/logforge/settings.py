"""
Environment-driven logger settings.

``LOGFORGE_CONFIG_FILE`` points at a TOML/JSON configuration document; when
it is unset a terminal logger is configured from the remaining variables::

    LOGFORGE_LEVEL=debug
    LOGFORGE_DESTINATION=stderr
    LOGFORGE_FORMAT=compact
    LOGFORGE_CHANNEL_SIZE=0
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import LoggerConfig, load_config_file
from .enums import Destination, Format, Severity
from .terminal import TerminalLoggerConfig
from .types import always_pass_on_severity_at_least


class LoggingSettings(BaseSettings):
    """Logger settings read from ``LOGFORGE_*`` variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="LOGFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    config_file: Optional[str] = Field(default=None, description="Path to a TOML or JSON logger configuration")
    level: Severity = Field(default=Severity.INFO, description="Minimum severity for the terminal logger")
    destination: Destination = Field(default=Destination.STDOUT, description="Terminal stream")
    format: Format = Field(default=Format.FULL, description="Record layout")
    channel_size: int = Field(default=1024, ge=0, description="Asynchronous channel size (0 = synchronous)")

    def to_logger_config(self) -> LoggerConfig:
        if self.config_file:
            return load_config_file(self.config_file)
        return LoggerConfig(
            TerminalLoggerConfig(
                format=self.format,
                destination=self.destination,
                channel_size=self.channel_size,
                filter_config=always_pass_on_severity_at_least(self.level),
            )
        )


def logger_config_from_settings(settings: Optional[LoggingSettings] = None) -> LoggerConfig:
    return (settings or LoggingSettings()).to_logger_config()
