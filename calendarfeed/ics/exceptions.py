"""Exceptions raised while retrieving and decoding calendar documents.

Fetch and decode failures are fatal for a request and propagate to the
caller. Problems with a single event never surface here; they are logged
and the event is skipped or downgraded.
"""

from typing import Optional


class ICSError(Exception):
    """Base exception for calendar document errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        source: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.source = source

    def __str__(self) -> str:
        if self.source:
            return f"{self.message} (source: {self.source})"
        return self.message


class ICSFetchError(ICSError):
    """Raised when the calendar document cannot be retrieved."""


class ICSAuthError(ICSFetchError):
    """Raised when the calendar server rejects our credentials (HTTP 401/403)."""


class ICSNetworkError(ICSFetchError):
    """Raised for connection-level failures."""


class ICSTimeoutError(ICSNetworkError):
    """Raised when the calendar server does not answer in time."""


class ICSParseError(ICSError):
    """Raised when the document is not decodable iCalendar data."""


class ICSContentError(ICSParseError):
    """Raised when the document is empty or is not a calendar at all."""
