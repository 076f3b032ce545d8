"""
Error types raised by the Amazon Appstore client
"""

from __future__ import annotations

# Status codes returned when an If-Match precondition no longer holds
CONFLICT_STATUS_CODES = {409, 412}


class AppstoreError(Exception):
    """Base class for all client errors"""


class ConfigurationError(AppstoreError, ValueError):
    """Raised when the client is missing or given invalid configuration"""


class AuthenticationError(AppstoreError):
    """Raised when credentials cannot be obtained or are not valid"""


class ApiError(AppstoreError):
    """Raised when the remote service answers with a non-success status"""

    def __init__(
        self,
        status_code: int,
        body: str,
        *,
        url: str = "",
        method: str = "",
        message: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        self.method = method
        if message is None:
            message = f"request returned non-success status: {status_code}, body: {body}"
        super().__init__(message)

    @property
    def is_conflict(self) -> bool:
        """True when the write was rejected because the resource changed remotely"""
        return self.status_code in CONFLICT_STATUS_CODES
