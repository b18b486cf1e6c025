"""
Validators - Input validation for DNS record and account forms

This module provides the checks that run before any request is sent to
the backend. Each form validator returns a dictionary of field name to
message; an empty dictionary means the form may be submitted.
"""

import logging
import re
from typing import Dict

logger = logging.getLogger(__name__)

RECORD_TYPES = ("A", "CNAME")

# Dotted-quad shape only; octet ranges are enforced by the backend.
_IPV4_SHAPE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8


def validate_ipv4(ipv4: str) -> bool:
    """
    Validate that a value has the IPv4 dotted-quad shape.

    Args:
        ipv4: The value to check

    Returns:
        True if valid, False otherwise
    """
    if not ipv4 or not isinstance(ipv4, str):
        return False

    if not _IPV4_SHAPE.match(ipv4):
        logger.debug(f"Value is not an IPv4 address: {ipv4}")
        return False

    return True


def validate_record_form(form: Dict[str, str]) -> Dict[str, str]:
    """
    Validate a DNS record form before submission.

    Args:
        form: Mapping with ``DomainName``, ``Type`` and ``Value`` keys

    Returns:
        Field errors keyed by form field name
    """
    errors = {}
    domain_name = form.get("DomainName") or ""
    record_type = form.get("Type") or ""
    value = form.get("Value") or ""

    if not domain_name:
        errors["DomainName"] = "Domain Name is required."

    if record_type not in RECORD_TYPES:
        errors["Type"] = "Record type must be A or CNAME."

    if not value:
        errors["Value"] = "Value is required."

    # An empty A value reports the address message, matching the form.
    if record_type == "A" and not validate_ipv4(value):
        errors["Value"] = "Must be a valid IPv4 address for A record."

    if errors:
        logger.debug(f"Record form rejected: {sorted(errors)}")
    return errors


def validate_login_form(username: str, password: str) -> Dict[str, str]:
    """Validate login credentials are present."""
    errors = {}
    if not username:
        errors["username"] = "Username is required"
    if not password:
        errors["password"] = "Password is required"
    return errors


def validate_registration_form(username: str, password: str) -> Dict[str, str]:
    """Validate registration field lengths."""
    errors = {}
    if len(username or "") < MIN_USERNAME_LENGTH:
        errors["username"] = (
            f"Username must be at least {MIN_USERNAME_LENGTH} characters long"
        )
    if len(password or "") < MIN_PASSWORD_LENGTH:
        errors["password"] = (
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return errors
