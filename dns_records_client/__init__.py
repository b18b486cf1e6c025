"""
DNS Records Client - Manage internal DNS records from the command line

A client for the internal DNS records service: sign in, list, search and
edit A and CNAME records, and administer user accounts.
"""

__version__ = "1.0.0"
__author__ = "DNS Records Manager Team"
__description__ = "Command-line client for internal DNS record management"

from .core.dns_records_client import DNSRecordsClient
from .core.list_controller import RecordListController, UserAdminController
from .core.session import SessionManager

__all__ = [
    "DNSRecordsClient",
    "SessionManager",
    "RecordListController",
    "UserAdminController",
]
