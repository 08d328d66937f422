"""Error codes and domain-specific errors for radiocode."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Mapping


class ErrorCode(IntEnum):
    """Outcome codes shared by offline validation and the web API."""

    CONNECTION_ERROR = -1
    SUCCESS = 0
    INVALID_INPUT = 1
    INVALID_COMMAND = 2
    INVALID_MODEL = 3
    INVALID_SERIAL_LENGTH = 4
    INVALID_SERIAL_PATTERN = 5
    INVALID_SERIAL_UNSUPPORTED = 6
    INVALID_EXTRA_LENGTH = 7
    INVALID_EXTRA_PATTERN = 8
    INVALID_LICENSE = 100

    @classmethod
    def coerce(cls, value: int) -> ErrorCode | int:
        """Map a wire value onto the enum, keeping unknown server codes as ints."""
        try:
            return cls(value)
        except ValueError:
            return int(value)


_DESCRIPTIONS = {
    ErrorCode.CONNECTION_ERROR: "Cannot connect to the Web API interface (network error)",
    ErrorCode.SUCCESS: "Success",
    ErrorCode.INVALID_INPUT: "Invalid input data",
    ErrorCode.INVALID_COMMAND: "Invalid command sent to the Web API interface",
    ErrorCode.INVALID_MODEL: "Invalid radio model (not supported)",
    ErrorCode.INVALID_SERIAL_LENGTH: "Invalid serial number length",
    ErrorCode.INVALID_SERIAL_PATTERN: "Invalid serial number regular expression pattern",
    ErrorCode.INVALID_SERIAL_UNSUPPORTED: "This serial number is not supported",
    ErrorCode.INVALID_EXTRA_LENGTH: "Invalid extra data length",
    ErrorCode.INVALID_EXTRA_PATTERN: "Invalid extra data regular expression pattern",
    ErrorCode.INVALID_LICENSE: "Invalid license key",
}


def describe_error(code: ErrorCode | int) -> str:
    if isinstance(code, ErrorCode):
        return _DESCRIPTIONS[code]
    return f"Unexpected error code {code}"


class RadioCodeError(Exception):
    """Base error for radiocode."""


class ModelDefinitionError(RadioCodeError):
    """Raised when a radio model table or regex pattern is malformed."""


class TransportError(RadioCodeError):
    """Raised by transports on connection, protocol or decoding failures."""


class ConfigError(RadioCodeError):
    """Raised when a RADIOCODE_* setting cannot be parsed."""


class ApiError(RadioCodeError):
    """Raised when a web API command does not succeed.

    `error` is the authoritative code (an `ErrorCode`, or a plain int for codes
    the server defines but this client does not know). `response` holds the
    server payload verbatim, or a minimal ``{"error": ...}`` payload when the
    failure was detected locally.
    """

    def __init__(
        self,
        error: ErrorCode | int,
        response: Mapping[str, Any] | None = None,
        *,
        error_message: str | None = None,
    ) -> None:
        self.error = error
        self.response = dict(response) if response is not None else {"error": int(error)}
        self.error_message = error_message
        message = describe_error(error)
        if error_message:
            message = f"{message}: {error_message}"
        super().__init__(message)


class ApiConnectionError(ApiError):
    """Raised when the web API cannot be reached or answers with garbage."""

    def __init__(self, error_message: str) -> None:
        super().__init__(
            ErrorCode.CONNECTION_ERROR,
            {"error": int(ErrorCode.CONNECTION_ERROR), "error_message": error_message},
            error_message=error_message,
        )
