"""Tests for input validation helpers."""

import pytest

from khata.errors import ValidationError
from khata.validation import format_phone, normalize_phone, validate_email, validate_name


class TestPhone:
    """Tests for phone normalization."""

    @pytest.mark.parametrize(
        "raw",
        ["9876543210", "+91 98765 43210", "+91-9876543210", "919876543210", "(987) 654-3210"],
    )
    def test_normalizes(self, raw):
        """Test separators and the country code are stripped."""
        assert normalize_phone(raw) == "9876543210"

    @pytest.mark.parametrize("raw", ["", "abc", "12345", "5876543210"])
    def test_rejects(self, raw):
        """Test short numbers and non-mobile prefixes are rejected."""
        with pytest.raises(ValidationError):
            normalize_phone(raw)

    def test_format(self):
        """Test display formatting."""
        assert format_phone("98765 43210") == "+91 9876543210"


class TestEmailAndName:
    """Tests for email and name validation."""

    def test_email_optional(self):
        """Test a missing email is allowed."""
        assert validate_email(None) is None
        assert validate_email("") is None

    def test_email_format(self):
        """Test addresses are trimmed and checked."""
        assert validate_email(" ravi@example.com ") == "ravi@example.com"
        with pytest.raises(ValidationError):
            validate_email("not-an-email")

    def test_name(self):
        """Test names are trimmed and required."""
        assert validate_name("  Ravi ") == "Ravi"
        with pytest.raises(ValidationError):
            validate_name("   ")
