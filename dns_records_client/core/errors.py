"""
Errors raised by the DNS records client.

Every failure the client can surface derives from DNSRecordsClientError so
the command line can report it without a traceback.
"""

from typing import Dict, Optional


class DNSRecordsClientError(Exception):
    """Base class for client errors."""


class TransportError(DNSRecordsClientError):
    """The backend could not be reached."""


class ApiError(DNSRecordsClientError):
    """The backend answered with a non-success status."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(message or f"Request failed with status {status_code}")


class AuthenticationError(ApiError):
    """Credentials or tokens were rejected."""


class InvalidCredentials(AuthenticationError):
    """Login was rejected by the backend."""


class SessionExpired(AuthenticationError):
    """An authenticated request returned 401; the session has been ended."""


class RegistrationFailed(ApiError):
    """Registration was rejected by the backend."""


class RegistrationConflict(RegistrationFailed):
    """The requested username is already taken."""


class ValidationError(DNSRecordsClientError):
    """Client-side validation failed; nothing was sent."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()))
