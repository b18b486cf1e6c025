"""
Token Store - Durable storage for the session token pair

The pair is kept in a small YAML file owned by the current user. Both
tokens are written and removed together; a file holding only one of them
is treated as no session.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml

from .models import TokenPair

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_FILE = "~/.config/dns-records-client/session.yaml"


class TokenStore:
    """Load, save and clear the persisted token pair."""

    def __init__(self, path: Union[str, Path] = DEFAULT_TOKEN_FILE):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[TokenPair]:
        """Return the stored pair, or None when either token is missing."""
        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            return None
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            return None

        access_token = data.get("accessToken")
        refresh_token = data.get("refreshToken")
        if not access_token or not refresh_token:
            return None

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def save(self, pair: TokenPair) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            yaml.safe_dump(
                {
                    "accessToken": pair.access_token,
                    "refreshToken": pair.refresh_token,
                },
                f,
            )
        logger.debug(f"Session tokens saved to {self.path}")

    def clear(self) -> None:
        try:
            self.path.unlink()
            logger.debug(f"Session tokens removed from {self.path}")
        except FileNotFoundError:
            pass
