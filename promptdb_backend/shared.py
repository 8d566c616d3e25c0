"""Backend-facing alias for shared utilities."""

from __future__ import annotations

from promptdb_shared import (
    ContainerFormat,
    ErrorCode,
    FileKind,
    Result,
    classify_file,
    get_logger,
    log_structured,
    log_success,
    request_id_var,
    sanitize_error_message,
)
from promptdb_shared.types import EXTENSIONS

__all__ = [
    "Result",
    "ErrorCode",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "classify_file",
    "FileKind",
    "ContainerFormat",
    "EXTENSIONS",
    "sanitize_error_message",
]
