"""
logforge: build structured loggers from code or from configuration documents.

Three logger variants exist:
- terminal: stdout/stderr, colored when the stream is a terminal
- file: rotating log file
- null: discards everything

Each has a fluent builder and a serializable config (TOML/JSON). Loggers
built with ``channel_size > 0`` write from a background worker owned by the
returned :class:`WorkerGuard`.

Library: structlog for records + pydantic for configuration.
"""

from .config import (
    LoggerBuilder,
    LoggerConfig,
    from_json_str,
    from_toml_str,
    load_config,
    load_config_file,
    to_json_str,
    to_toml_str,
)
from .drains import WorkerGuard
from .errors import ErrorKind, InvalidConfigError, LogforgeError, SinkError
from .file import FileLoggerBuilder, FileLoggerConfig
from .interceptors import set_stdlib_logger
from .null import NullLoggerBuilder, NullLoggerConfig
from .pipeline import BuildResult, Logger
from .registry import get_global_logger, set_global_logger
from .settings import LoggingSettings, logger_config_from_settings
from .terminal import TerminalLoggerBuilder, TerminalLoggerConfig
from .types import (
    Custom,
    Destination,
    EvaluationOrder,
    FilterConfig,
    Format,
    OverflowStrategy,
    PassIfMatch,
    PassOnAnyOf,
    Severity,
    SourceLocation,
    TimeZone,
    always_pass_on_severity_at_least,
)

__all__ = [
    "BuildResult",
    "Custom",
    "Destination",
    "ErrorKind",
    "EvaluationOrder",
    "FileLoggerBuilder",
    "FileLoggerConfig",
    "FilterConfig",
    "Format",
    "InvalidConfigError",
    "LogforgeError",
    "Logger",
    "LoggerBuilder",
    "LoggerConfig",
    "LoggingSettings",
    "NullLoggerBuilder",
    "NullLoggerConfig",
    "OverflowStrategy",
    "PassIfMatch",
    "PassOnAnyOf",
    "Severity",
    "SinkError",
    "SourceLocation",
    "TerminalLoggerBuilder",
    "TerminalLoggerConfig",
    "TimeZone",
    "WorkerGuard",
    "always_pass_on_severity_at_least",
    "from_json_str",
    "from_toml_str",
    "get_global_logger",
    "load_config",
    "load_config_file",
    "logger_config_from_settings",
    "set_global_logger",
    "set_stdlib_logger",
    "to_json_str",
    "to_toml_str",
]
