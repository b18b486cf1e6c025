"""
Utility functions and helpers.

This package contains the form validation used before any request
reaches the backend.
"""

from .validators import (
    validate_ipv4,
    validate_login_form,
    validate_record_form,
    validate_registration_form,
)

__all__ = [
    "validate_ipv4",
    "validate_login_form",
    "validate_record_form",
    "validate_registration_form",
]
