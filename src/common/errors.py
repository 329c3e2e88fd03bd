"""Shared error codes and exceptions for the ingestion pipeline."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    IO_ERROR = "IO_ERROR"
    STATE_ERROR = "STATE_ERROR"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"


class BackendError(RuntimeError):
    """Exception carrying a structured error code for CLI/callers."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value


class MalformedInputError(BackendError):
    """Raised when a file does not have the structure its component type requires."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(ErrorCode.MALFORMED_INPUT, message, context=context)


class UnsupportedFormatError(BackendError):
    """Raised when a declared format has no reader behind it."""

    def __init__(self, format_name: str) -> None:
        super().__init__(
            ErrorCode.UNSUPPORTED_FORMAT,
            f"Format '{format_name}' is declared but has no reader",
            context={"format": format_name},
        )
        self.format_name = format_name
