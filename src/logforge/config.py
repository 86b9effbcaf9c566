"""
Serializable logger configuration.

A configuration document is a mapping tagged with ``type`` (``file``,
``null`` or ``terminal``); every other field is optional. In TOML::

    type = "terminal"
    format = "full"
    source_location = "module_and_line"
    timezone = "local"
    destination = "stdout"
    channel_size = 0
    evaluation_order = "LoggerAndMessage"

    [filter_config]
    type = "PassOnAnyOf"
    always_pass_on_severity_at_least = "debug"

    [[filter_config.passes]]
    keys_and_values = [["system", "SystemA"], ["subsystem", "SubsystemAB"]]
    severity_at_least = "trace"
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Annotated, Any, Mapping, Union

import orjson
import tomli_w
from pydantic import Field, RootModel, ValidationError

from .build import Build
from .errors import ErrorKind, InvalidConfigError, LogforgeError
from .file import FileLoggerBuilder, FileLoggerConfig
from .null import NullLoggerBuilder, NullLoggerConfig
from .pipeline import BuildResult
from .terminal import TerminalLoggerBuilder, TerminalLoggerConfig

LoggerBuilder = Union[FileLoggerBuilder, NullLoggerBuilder, TerminalLoggerBuilder]

AnyLoggerConfig = Annotated[
    Union[FileLoggerConfig, NullLoggerConfig, TerminalLoggerConfig],
    Field(discriminator="type"),
]


class LoggerConfig(RootModel[AnyLoggerConfig]):
    """The configuration of any logger builder; the unit of (de)serialization."""

    @classmethod
    def default(cls) -> "LoggerConfig":
        return cls(TerminalLoggerConfig())

    def try_to_builder(self) -> Build:
        return self.root.try_to_builder()

    def build_logger(self) -> BuildResult:
        return self.try_to_builder().build()

    def to_toml(self) -> str:
        return tomli_w.dumps(self.model_dump(mode="json"))

    def to_json(self) -> str:
        return orjson.dumps(self.model_dump(mode="json"), option=orjson.OPT_INDENT_2).decode()


def _invalid_config(exc: ValidationError) -> InvalidConfigError:
    errors = exc.errors(include_url=False)
    first = errors[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    literal = first.get("input")
    scalar = literal if isinstance(literal, (str, int, float, bool)) else None
    message = f"Invalid logger configuration at {location}: {first['msg']} (got {literal!r})"
    details = {"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors]}
    return InvalidConfigError(message, literal=scalar, details=details)


def load_config(data: Union[Mapping[str, Any], LoggerConfig]) -> LoggerConfig:
    """Validate a decoded configuration document."""
    if isinstance(data, LoggerConfig):
        return data
    try:
        return LoggerConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise _invalid_config(exc) from exc


def from_toml_str(text: str) -> LoggerConfig:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfigError(f"Invalid TOML configuration: {exc}") from exc
    return load_config(data)


def from_json_str(text: Union[str, bytes]) -> LoggerConfig:
    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        raise InvalidConfigError(f"Invalid JSON configuration: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidConfigError(f"Logger configuration must be an object, got {type(data).__name__}")
    return load_config(data)


def load_config_file(path: Union[str, Path]) -> LoggerConfig:
    """Load a ``.toml`` or ``.json`` configuration document."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".toml", ".json"):
        raise InvalidConfigError(f"Unsupported configuration file type: {suffix!r}", literal=suffix)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LogforgeError(
            f"Cannot read logger configuration {path}: {exc}",
            kind=ErrorKind.OTHER,
            details={"path": str(path)},
        ) from exc
    if suffix == ".toml":
        return from_toml_str(text)
    return from_json_str(text)


def to_toml_str(config: LoggerConfig) -> str:
    return config.to_toml()


def to_json_str(config: LoggerConfig) -> str:
    return config.to_json()
