"""
Standardized error handling for the registry server.
Provides consistent error codes, HTTP status mapping and response helpers.
"""
from enum import Enum
from typing import Any

from config import REMEDIATION_HINT
from lib.common import ng


class ConfigurationError(RuntimeError):
    """A required credential or spreadsheet identifier is missing."""


class ErrorCode(str, Enum):
    """Standardized error codes used across the server."""
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    CONFIG_ERROR = "CONFIG_ERROR"
    SHEET_ERROR = "SHEET_ERROR"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"


HTTP_STATUS: dict[str, int] = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.CONFIG_ERROR: 500,
    ErrorCode.SHEET_ERROR: 500,
}


def http_status(code: str) -> int:
    """HTTP status for an error code; unknown codes are server errors."""
    return HTTP_STATUS.get(code, 500)


def bad_request(op: str, message: str) -> dict[str, Any]:
    """Create a BAD_REQUEST error response."""
    return ng(op, ErrorCode.BAD_REQUEST, message)


def not_found(op: str, message: str) -> dict[str, Any]:
    """Create a NOT_FOUND error response."""
    return ng(op, ErrorCode.NOT_FOUND, message)


def config_error(op: str, message: str = "Missing configuration") -> dict[str, Any]:
    """Create a CONFIG_ERROR error response."""
    return ng(op, ErrorCode.CONFIG_ERROR, message)


def sheet_error(
    op: str,
    message: str,
    service_account: str = "",
    spreadsheet_id: str | None = None,
) -> dict[str, Any]:
    """
    Create a SHEET_ERROR error response.

    Carries the backing store's message, the remediation hint naming the
    service account, and the spreadsheet the request was working against.
    """
    extra: dict[str, Any] = {
        "details": REMEDIATION_HINT.format(email=service_account or "the service account"),
        "serviceAccount": service_account,
    }
    if spreadsheet_id:
        extra["spreadsheetId"] = spreadsheet_id
    return ng(op, ErrorCode.SHEET_ERROR, f"Google Sheets Error: {message}", extra)
