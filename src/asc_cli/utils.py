"""
Utility functions for asc-cli.

This module provides helper functions for common operations like
flag validation, locale checks and formatting values for display.
"""

import re
from typing import Any, Iterable, List, Optional

from .exceptions import UsageError, ValidationError

CERTIFICATE_TYPES = [
    "APPLE_PAY",
    "APPLE_PAY_MERCHANT_IDENTITY",
    "APPLE_PAY_PSP_IDENTITY",
    "APPLE_PAY_RSA",
    "DEVELOPER_ID_KEXT",
    "DEVELOPER_ID_KEXT_G2",
    "DEVELOPER_ID_APPLICATION",
    "DEVELOPER_ID_APPLICATION_G2",
    "DEVELOPMENT",
    "DISTRIBUTION",
    "IDENTITY_ACCESS",
    "IOS_DEVELOPMENT",
    "IOS_DISTRIBUTION",
    "MAC_APP_DISTRIBUTION",
    "MAC_INSTALLER_DISTRIBUTION",
    "MAC_APP_DEVELOPMENT",
    "PASS_TYPE_ID",
    "PASS_TYPE_ID_WITH_NFC",
]

NOMINATION_STATES = ["DRAFT", "SUBMITTED", "ARCHIVED"]

NOMINATION_TYPES = ["APP_LAUNCH", "APP_ENHANCEMENTS", "NEW_CONTENT"]

PLATFORMS = ["IOS", "MAC_OS", "TV_OS", "VISION_OS"]

DEVICE_FAMILIES = ["IPHONE", "IPAD", "APPLE_TV", "APPLE_WATCH", "MAC", "VISION"]

ACCESSIBILITY_STATES = ["DRAFT", "PUBLISHED", "REPLACED"]

_LOCALE_PATTERN = re.compile(r"^[a-z]{2,3}(-[A-Z][a-z]{3})?(-[A-Z]{2})?$")


def validate_locale(locale: str) -> str:
    """
    Validate a locale string.

    Args:
        locale: The locale to validate (e.g., 'en-US', 'ja', 'zh-Hans')

    Returns:
        The validated locale string

    Raises:
        ValidationError: If the locale is invalid
    """
    if not locale:
        raise ValidationError("Locale cannot be empty")

    locale = locale.strip()

    # App Store Connect uses language-only (ja), script (zh-Hans) and
    # language-region (en-US) locales
    if not _LOCALE_PATTERN.match(locale):
        raise ValidationError(
            f"Invalid locale format. Expected format: 'en-US', got: {locale}"
        )

    return locale


def is_locale(name: str) -> bool:
    """Return True if name looks like an App Store Connect locale."""
    return bool(name) and bool(_LOCALE_PATTERN.match(name))


def split_csv(value: Optional[str]) -> List[str]:
    """
    Split a comma-separated flag value into trimmed, non-empty items.

    Args:
        value: Raw flag value such as "IOS, MAC_OS"

    Returns:
        List of items in their original order
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def validate_choices(
    value: Optional[str], valid: Iterable[str], flag: str
) -> List[str]:
    """
    Validate a comma-separated enum flag.

    Args:
        value: Raw flag value
        valid: Accepted values (upper case)
        flag: Flag name used in the error message

    Returns:
        The upper-cased values

    Raises:
        UsageError: If any value is not accepted
    """
    valid = list(valid)
    items = [item.upper() for item in split_csv(value)]
    for item in items:
        if item not in valid:
            raise UsageError(
                f"{flag} must be one of: {', '.join(valid)}, got: {item}"
            )
    return items


def require_value(value: Optional[str], flag: str) -> str:
    """Return the trimmed flag value or raise UsageError when it is blank."""
    value = (value or "").strip()
    if not value:
        raise UsageError(f"{flag} is required")
    return value


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: The text to truncate
        max_length: Maximum length allowed
        suffix: Suffix to append if truncated

    Returns:
        Truncated string
    """
    if not text or len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix


def format_cell(value: Any, max_length: int = 60) -> str:
    """
    Format an attribute value for a table cell.

    Args:
        value: Attribute value from an API resource
        max_length: Maximum cell width before truncation

    Returns:
        Display string
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(format_cell(item, max_length) for item in value)
    if isinstance(value, dict):
        return str(value)
    text = " ".join(str(value).split())
    return truncate_string(text, max_length)
