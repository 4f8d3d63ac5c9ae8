"""Tests for account input rules and currency formatting."""

from decimal import Decimal

import pytest

from fintrax.formatting import format_currency, to_cents
from fintrax.models import PasswordStrength
from fintrax.security import (
    check_credentials,
    check_new_password,
    friendly_auth_message,
    is_valid_email,
    password_strength,
)


class TestPasswordRules:
    """Tests for the sign-in/sign-up checks."""

    @pytest.mark.parametrize(
        "password, expected",
        [
            ("", PasswordStrength.EMPTY),
            ("abcdef", PasswordStrength.WEAK),
            ("abcdefgh1", PasswordStrength.WEAK),
            ("Abcdefgh1", PasswordStrength.MEDIUM),
            ("Abcdefgh1!", PasswordStrength.STRONG),
            ("Abcdefghijk1!", PasswordStrength.STRONG),
        ],
    )
    def test_password_strength(self, password, expected):
        assert password_strength(password) == expected

    def test_strength_label(self):
        assert PasswordStrength.MEDIUM.label == "Medium"

    def test_is_valid_email(self):
        assert is_valid_email("ada@example.com")
        assert not is_valid_email("ada")
        assert not is_valid_email("ada@localhost")
        assert not is_valid_email(None)

    def test_check_credentials_sign_in(self):
        assert check_credentials("ada@example.com", "secret") is None
        assert check_credentials("ada", "secret") == "Please enter a valid email"
        assert check_credentials("ada@example.com", "12345") == "Password must be at least 6 characters"

    def test_check_credentials_sign_up(self):
        assert check_credentials("ada@example.com", "Secret#123", "Secret#123", signing_up=True) is None
        assert (
            check_credentials("ada@example.com", "abcdefg", "abcdefg", signing_up=True)
            == "Please use a stronger password for better security"
        )
        assert (
            check_credentials("ada@example.com", "Secret#123", "Secret#124", signing_up=True)
            == "Passwords do not match"
        )

    def test_check_new_password(self):
        assert check_new_password("Better#456", "Better#456") is None
        assert check_new_password("short", "short") == "Password must be at least 6 characters"
        assert check_new_password("Better#456", "Better#457") == "Passwords do not match"

    @pytest.mark.parametrize(
        "code, message",
        [
            ("auth/invalid-credential", "Invalid email or password"),
            ("wrong-password", "Invalid email or password"),
            ("auth/email-already-in-use", "An account with this email already exists"),
            ("TOO_MANY_REQUESTS", "Too many failed attempts. Please try again later."),
            ("auth/network-request-failed", "Network error. Check your internet connection."),
            ("auth/something-new", "An error occurred. Please try again."),
            (None, "An error occurred. Please try again."),
        ],
    )
    def test_friendly_auth_message(self, code, message):
        assert friendly_auth_message(code) == message


class TestFormatting:
    """Tests for the fixed currency format."""

    def test_format_currency(self):
        assert format_currency(Decimal("1234.5"), "₦") == "₦1,234.50"
        assert format_currency(0, "₦") == "₦0.00"
        assert format_currency(Decimal("-12"), "₦") == "-₦12.00"

    def test_default_symbol(self):
        assert format_currency(Decimal("10")) == "₦10.00"

    def test_to_cents_rounds_half_up(self):
        assert to_cents(Decimal("2.345")) == Decimal("2.35")
        assert to_cents(0.125) == Decimal("0.13")
