"""
Input validation for team invites and customer records.
"""

from __future__ import annotations

import re

from khata.errors import ValidationError

PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
COUNTRY_PREFIX = "+91"


def normalize_phone(phone: str) -> str:
    """
    Reduce a phone number to its last ten digits.

    Raises:
        ValidationError: if the result is not a valid mobile number.
    """
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        raise ValidationError("Phone number is required")

    digits = digits[-10:]
    if not PHONE_PATTERN.match(digits):
        raise ValidationError("Please enter a valid 10-digit phone number")
    return digits


def format_phone(phone: str) -> str:
    """Normalize and format for display, e.g. ``+91 9876543210``."""
    return f"{COUNTRY_PREFIX} {normalize_phone(phone)}"


def validate_email(email: str | None) -> str | None:
    """Email is optional; when given it must look like an address."""
    if not email:
        return None
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    return name
