"""
Authentication endpoints.

Login and registration go through an unauthenticated client; the backend
issues the token pair on login and returns an empty body on registration.
"""

import logging

from ..core.errors import (
    ApiError,
    InvalidCredentials,
    RegistrationConflict,
    RegistrationFailed,
)
from ..core.models import TokenPair
from .client import ApiClient, parse_json

logger = logging.getLogger(__name__)


class AuthAPI:
    """Client for ``/auth`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, username: str, password: str) -> TokenPair:
        """Exchange credentials for a token pair."""
        try:
            response = self.client.post(
                "/auth/login", json={"Username": username, "Password": password}
            )
        except ApiError as e:
            logger.info(f"Login rejected for {username}: {e.status_code}")
            raise InvalidCredentials(
                e.status_code, e.message or "Invalid username or password"
            ) from e

        pair = TokenPair.from_api(parse_json(response))
        if not pair.access_token or not pair.refresh_token:
            raise InvalidCredentials(response.status_code, "Login response missing tokens")
        return pair

    def register(self, username: str, password: str) -> None:
        """Create an account; does not sign in."""
        try:
            self.client.post(
                "/auth/register", json={"Username": username, "Password": password}
            )
        except ApiError as e:
            logger.info(f"Registration rejected for {username}: {e.status_code}")
            if e.status_code == 409:
                raise RegistrationConflict(
                    e.status_code, e.message or "Username already exists"
                ) from e
            raise RegistrationFailed(
                e.status_code,
                e.message or "Registration failed. Username may already exist.",
            ) from e
