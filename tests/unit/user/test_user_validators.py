"""Tests for account validators."""

import pytest

from medvault.core.modules.user.validators import normalize_email, validate_password
from medvault.errors import ValidationError


class TestNormalizeEmail:
    def test_address_lowercased_and_trimmed(self):
        assert normalize_email("  Patient@Example.COM ") == "patient@example.com"

    @pytest.mark.parametrize("email", ["", "patient", "patient@", "@example.com", "a b@example.com"])
    def test_malformed_address_rejected(self, email):
        with pytest.raises(ValidationError, match="Invalid email"):
            normalize_email(email)


class TestValidatePassword:
    def test_valid_password_accepted(self):
        validate_password("correct-horse")

    def test_short_password_rejected(self):
        with pytest.raises(ValidationError, match="at least 8"):
            validate_password("short")

    def test_whitespace_rejected(self):
        with pytest.raises(ValidationError, match="whitespace"):
            validate_password("has a space")
