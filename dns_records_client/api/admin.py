"""
Admin endpoints for user management.
"""

import logging
from typing import List

from ..core.models import ManagedUser, Page
from .client import ApiClient, parse_json

logger = logging.getLogger(__name__)


class AdminAPI:
    """Client for ``/admin`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list_users(self) -> List[ManagedUser]:
        response = self.client.get("/admin/users")
        users = [ManagedUser.from_api(item) for item in parse_json(response, list)]
        logger.info(f"Retrieved {len(users)} users")
        return users

    def users_page(self) -> Page:
        """Unpaginated listing shaped as a single page."""
        users = self.list_users()
        return Page(items=users, total_count=len(users))

    def update_user_status(self, user_id: int, is_enabled: bool) -> ManagedUser:
        response = self.client.put(
            f"/admin/users/{user_id}/status", json={"isEnabled": is_enabled}
        )
        logger.info(f"Set user {user_id} enabled={is_enabled}")
        return ManagedUser.from_api(parse_json(response))
