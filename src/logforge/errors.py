"""
logforge 统一异常体系

Two kinds of failure exist: a configuration value that cannot be
understood (``Invalid``) and everything that goes wrong while touching the
outside world, such as opening a log file (``Other``).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INVALID = "Invalid"
    OTHER = "Other"


class LogforgeError(Exception):
    """logforge 基础异常类

    所有 logforge 相关异常的根节点，便于统一捕获和处理。
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.details = details or {}


class InvalidConfigError(LogforgeError):
    """无效配置异常

    当配置值无法识别（未定义的级别、格式、时区等）或过滤规则结构不合法时抛出。
    """

    def __init__(
        self,
        message: str,
        *,
        literal: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if literal is not None:
            details["literal"] = literal
        super().__init__(message, kind=ErrorKind.INVALID, details=details)


def undefined_literal(what: str, literal: Any) -> InvalidConfigError:
    """Build the error raised when ``literal`` names no known ``what``."""
    return InvalidConfigError(f"Undefined {what}: {literal!r}", literal=literal)


class SinkError(LogforgeError):
    """日志输出端异常

    当日志文件无法打开、写入或轮转时抛出。
    """

    def __init__(
        self,
        *,
        operation: str,
        target: str,
        reason: str,
    ) -> None:
        message = f"Sink error during {operation} on {target}: {reason}"
        details = {
            "operation": operation,
            "target": target,
            "reason": reason,
        }
        super().__init__(message, kind=ErrorKind.OTHER, details=details)
