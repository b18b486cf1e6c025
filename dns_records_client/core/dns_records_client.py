"""
DNS Records Client - Wiring of session, API clients and list views

This module builds the objects one process needs from a configuration
dictionary: the token store, the session manager, the public and
authenticated HTTP clients, and the list controllers for each view.
"""

import logging
import os
from typing import Dict

from ..api import AdminAPI, ApiClient, AuthAPI, DNSRecordsAPI
from ..api.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .list_controller import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SEARCH_DEBOUNCE,
    RecordListController,
    UserAdminController,
)
from .session import SessionManager
from .token_store import DEFAULT_TOKEN_FILE, TokenStore

logger = logging.getLogger(__name__)

API_URL_ENV = "DNS_RECORDS_API_URL"


class DNSRecordsClient:
    """Entry point that owns the session for the lifetime of the process."""

    def __init__(self, config: Dict, http_session=None):
        """Initialize the client from configuration."""
        self.config = config or {}
        api_config = self.config.get("api") or {}
        session_config = self.config.get("session") or {}

        self.base_url = (
            os.environ.get(API_URL_ENV) or api_config.get("base_url") or DEFAULT_BASE_URL
        )
        timeout = api_config.get("timeout", DEFAULT_TIMEOUT)

        self.store = TokenStore(session_config.get("token_file") or DEFAULT_TOKEN_FILE)

        public_client = ApiClient(self.base_url, timeout=timeout, session=http_session)
        self.session = SessionManager(AuthAPI(public_client), self.store)

        private_client = ApiClient(
            self.base_url,
            timeout=timeout,
            token_provider=lambda: self.session.access_token,
            on_unauthorized=self.session.logout,
            session=http_session,
        )
        self.records_api = DNSRecordsAPI(private_client)
        self.admin_api = AdminAPI(private_client)

        logger.debug(f"DNS records client configured for {self.base_url}")

    def start(self):
        """Restore any persisted session. Returns the identity or None."""
        identity = self.session.initialize()
        if identity:
            logger.info(f"Resumed session for {identity.username} ({identity.role})")
        return identity

    def _list_options(self) -> Dict:
        records_config = self.config.get("records") or {}
        return {
            "page_size": int(records_config.get("page_size", DEFAULT_PAGE_SIZE)),
            "search_debounce": float(
                records_config.get("search_debounce", DEFAULT_SEARCH_DEBOUNCE)
            ),
            "reset_page_on_search": bool(
                records_config.get("reset_page_on_search", True)
            ),
        }

    def record_list(self, admin: bool = False) -> RecordListController:
        return RecordListController(self.records_api, admin=admin, **self._list_options())

    def user_admin(self) -> UserAdminController:
        return UserAdminController(self.admin_api)
