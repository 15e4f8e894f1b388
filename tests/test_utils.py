"""
Tests for utility functions.
"""

import pytest

from asc_cli.exceptions import UsageError, ValidationError
from asc_cli.utils import (
    CERTIFICATE_TYPES,
    NOMINATION_STATES,
    format_cell,
    is_locale,
    require_value,
    split_csv,
    truncate_string,
    validate_choices,
    validate_locale,
)


class TestValidation:
    """Test validation functions."""

    @pytest.mark.parametrize("locale", ["en-US", "ja", "zh-Hans", "zh-Hant-TW", "fil"])
    def test_validate_locale_valid(self, locale):
        assert validate_locale(locale) == locale

    def test_validate_locale_strips(self):
        assert validate_locale(" de-DE ") == "de-DE"

    @pytest.mark.parametrize("locale", ["en_US", "EN-us", "english", "en-USA", "../x"])
    def test_validate_locale_invalid(self, locale):
        with pytest.raises(ValidationError):
            validate_locale(locale)

    def test_validate_locale_empty(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validate_locale("")

    def test_is_locale(self):
        assert is_locale("en-US")
        assert not is_locale("review_information")
        assert not is_locale("")

    def test_validate_choices(self):
        assert validate_choices("draft, submitted", NOMINATION_STATES, "--status") == [
            "DRAFT",
            "SUBMITTED",
        ]
        assert validate_choices(None, NOMINATION_STATES, "--status") == []

    def test_validate_choices_invalid(self):
        with pytest.raises(UsageError) as exc_info:
            validate_choices("IOS_DISTRIBUTION,BOGUS", CERTIFICATE_TYPES, "--certificate-type")
        message = str(exc_info.value)
        assert message.startswith("--certificate-type must be one of: APPLE_PAY")
        assert message.endswith("got: BOGUS")

    def test_require_value(self):
        assert require_value("  abc ", "--id") == "abc"
        with pytest.raises(UsageError, match="--id is required"):
            require_value("   ", "--id")


class TestFormatting:
    """Test formatting functions."""

    def test_split_csv(self):
        assert split_csv("IOS, MAC_OS,,") == ["IOS", "MAC_OS"]
        assert split_csv("") == []

    def test_truncate_string(self):
        assert truncate_string("Hello World", 8) == "Hello..."
        assert truncate_string("Short", 10) == "Short"
        assert truncate_string("", 5) == ""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ""),
            (True, "Yes"),
            (False, "No"),
            (3, "3"),
            (["IOS", "MAC_OS"], "IOS, MAC_OS"),
            ("line one\nline  two", "line one line two"),
        ],
    )
    def test_format_cell(self, value, expected):
        assert format_cell(value) == expected

    def test_format_cell_truncates(self):
        assert format_cell("x" * 100, max_length=10) == "xxxxxxx..."
