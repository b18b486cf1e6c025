"""
Backend API boundary.

This package contains the HTTP transport and the endpoint clients for
authentication, DNS records and user administration.
"""

from .admin import AdminAPI
from .auth import AuthAPI
from .client import ApiClient
from .dns_records import DNSRecordsAPI

__all__ = ["ApiClient", "AuthAPI", "DNSRecordsAPI", "AdminAPI"]
