"""Shared utilities for the PromptDB metadata engine."""
from .errors import sanitize_error_message
from .log import get_logger, log_structured, log_success, request_id_var
from .result import Result
from .types import ContainerFormat, ErrorCode, FileKind, classify_file

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "sanitize_error_message",
    "ErrorCode",
    "FileKind",
    "ContainerFormat",
    "classify_file",
]
