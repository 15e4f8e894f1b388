"""
asc-cli

A command-line client for the Apple App Store Connect API: certificates,
nominations, agreements, categories, encryption and accessibility
declarations, with cursor pagination and fastlane metadata migration.
"""

__version__ = "1.0.0"
__author__ = "Chris Bick"
__email__ = "chris@bickster.com"

from .client import AppStoreConnectAPI
from .config import Config, load_config
from .fastlane import FastlaneMigrator
from .exceptions import (
    AppStoreConnectError,
    AuthenticationError,
    ConfigurationError,
    RateLimitError,
    ValidationError,
    NotFoundError,
    PermissionError,
    ServerError,
    UsageError,
)
from . import utils

__all__ = [
    "AppStoreConnectAPI",
    "Config",
    "FastlaneMigrator",
    "load_config",
    "AppStoreConnectError",
    "AuthenticationError",
    "ConfigurationError",
    "RateLimitError",
    "ValidationError",
    "NotFoundError",
    "PermissionError",
    "ServerError",
    "UsageError",
    "utils",
]
