"""
Session Manager - Client-side authentication state

This module owns the token pair and the identity derived from it. The
identity is rebuilt from the access token claims whenever the pair changes;
the claims are read without signature verification because the signing key
belongs to the backend, which checks every request on its own.

State machine:
    Unauthenticated -> (login) -> Authenticated
    Authenticated -> (logout | expired or undecodable token | 401)
        -> Unauthenticated
"""

import logging
import threading
import time
from typing import Callable, Optional

from jose import JWTError, jwt

from ..utils.validators import validate_login_form, validate_registration_form
from .errors import ValidationError
from .models import DecodedClaims, Identity, TokenPair
from .token_store import TokenStore

logger = logging.getLogger(__name__)


def decode_claims(access_token: str) -> DecodedClaims:
    """
    Read the claims of an access token without verifying it.

    Raises:
        JWTError: The token is not a decodable JWT
    """
    return DecodedClaims.from_claims(jwt.get_unverified_claims(access_token))


class SessionManager:
    """Single source of truth for the current user."""

    def __init__(self, auth_api, store: TokenStore, clock: Callable[[], float] = time.time):
        self.auth_api = auth_api
        self.store = store
        self.clock = clock
        self.tokens: Optional[TokenPair] = None
        self.identity: Optional[Identity] = None
        self.loading = True
        self._lock = threading.RLock()

    @property
    def access_token(self) -> Optional[str]:
        tokens = self.tokens
        return tokens.access_token if tokens else None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_admin(self) -> bool:
        return self.identity is not None and self.identity.is_admin

    def initialize(self) -> Optional[Identity]:
        """Restore the session from the token store."""
        with self._lock:
            self._set_tokens(self.store.load())
            self.loading = False
            return self.identity

    def login(self, username: str, password: str) -> Identity:
        """
        Sign in and persist the issued token pair.

        Raises:
            ValidationError: A credential is missing; nothing was sent
            InvalidCredentials: The backend rejected the attempt
        """
        errors = validate_login_form(username, password)
        if errors:
            raise ValidationError(errors)

        pair = self.auth_api.login(username, password)
        with self._lock:
            self.store.save(pair)
            self._set_tokens(pair)
            logger.info(f"Logged in as {username}")
            return self.identity

    def register(self, username: str, password: str) -> None:
        """
        Create an account without signing in.

        Raises:
            ValidationError: Username or password is too short
            RegistrationConflict: The username is taken
            RegistrationFailed: Any other rejection
        """
        errors = validate_registration_form(username, password)
        if errors:
            raise ValidationError(errors)

        self.auth_api.register(username, password)
        logger.info(f"Registered account {username}")

    def logout(self) -> None:
        """End the session; safe to call without one."""
        with self._lock:
            had_session = self.tokens is not None
            self.identity = None
            self.tokens = None
            self.store.clear()
            if had_session:
                logger.info("Logged out")

    def _set_tokens(self, pair: Optional[TokenPair]) -> None:
        self.tokens = pair
        self._recompute_identity()

    def _recompute_identity(self) -> None:
        if self.tokens is None:
            self.identity = None
            return

        try:
            claims = decode_claims(self.tokens.access_token)
            expired = claims.is_expired(self.clock())
        except (JWTError, ValueError, TypeError) as e:
            logger.warning(f"Discarding undecodable access token: {e}")
            self.logout()
            return

        if expired:
            logger.info("Access token expired, session ended")
            self.logout()
            return

        self.identity = Identity.from_claims(claims)
