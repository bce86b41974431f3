"""Error taxonomy for extraction and clipboard serialization.

Every failure that crosses a public entry point is one ErrorKind plus a
message. ExtractionError is raised inside the engine (fetcher, config
validation) and converted into a result object by the orchestrator and
the service; callers never see it raised.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_CONFIGURATION = "invalid_configuration"
    AUTHENTICATION_FAILED = "authentication_failed"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"
    NO_USABLE_DATA = "no_usable_data"
    CANCELLED = "cancelled"
    CLIPBOARD_WRITE_FAILED = "clipboard_write_failed"


class ExtractionError(Exception):
    """Raised when a stage of the extraction pipeline fails."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ExtractionError({self.kind.value!r}, {self.message!r})"


def is_retryable(kind: ErrorKind) -> bool:
    """Only transport failures can be fixed by asking again."""
    return kind is ErrorKind.TRANSPORT_ERROR


def error_kind_for_status(status_code: int) -> ErrorKind:
    """Map a final non-2xx HTTP status to an ErrorKind."""
    if status_code == 401:
        return ErrorKind.AUTHENTICATION_FAILED
    if status_code == 403:
        return ErrorKind.ACCESS_DENIED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    return ErrorKind.TRANSPORT_ERROR


_USER_MESSAGES = {
    ErrorKind.INVALID_CONFIGURATION: (
        "WordPress connection is not configured correctly. "
        "Check the site URL, post type, and credentials in connection settings."
    ),
    ErrorKind.AUTHENTICATION_FAILED: (
        "WordPress authentication failed. Please check your username and "
        "application password in connection settings."
    ),
    ErrorKind.ACCESS_DENIED: (
        "Access denied. Your WordPress user account may not have permission "
        "to access this content."
    ),
    ErrorKind.NOT_FOUND: (
        "Component not found. The post may have been deleted or moved."
    ),
    ErrorKind.TRANSPORT_ERROR: (
        "Could not reach the WordPress site. Please check your internet "
        "connection and try again."
    ),
    ErrorKind.MALFORMED_RESPONSE: (
        "The WordPress site returned an unexpected response. The REST API may "
        "be disabled or blocked by a security plugin."
    ),
    ErrorKind.NO_USABLE_DATA: (
        "This component doesn't contain any content that can be copied."
    ),
    ErrorKind.CANCELLED: "Copy cancelled.",
    ErrorKind.CLIPBOARD_WRITE_FAILED: (
        "Clipboard access was blocked. Please allow clipboard access and try "
        "again, or copy the content manually."
    ),
}


def user_message(kind: ErrorKind, detail: Optional[str] = None) -> str:
    """Translate an ErrorKind into actionable guidance for the end user.

    ``detail`` is appended only for configuration problems, where it names
    the offending field; transport text is never shown.
    """
    message = _USER_MESSAGES[kind]
    if detail and kind is ErrorKind.INVALID_CONFIGURATION:
        return f"{message} ({detail})"
    return message
