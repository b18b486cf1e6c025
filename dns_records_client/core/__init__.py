"""
Core client functionality.

This package contains the session state machine, route gating and the
list controllers that keep views in sync with the backend.
"""

from .dns_records_client import DNSRecordsClient
from .list_controller import (
    RecordListController,
    ResourceListController,
    UserAdminController,
)
from .session import SessionManager
from .token_store import TokenStore

__all__ = [
    "DNSRecordsClient",
    "ResourceListController",
    "RecordListController",
    "UserAdminController",
    "SessionManager",
    "TokenStore",
]
