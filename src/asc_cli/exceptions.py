"""
Exception classes for asc-cli.

Every error a command reports derives from AppStoreConnectError. The CLI
prints it as one line on stderr; UsageError exits with status 2 and
everything else with status 1.
"""


class AppStoreConnectError(Exception):
    """Base class for asc-cli and App Store Connect API errors."""

    pass


class AuthenticationError(AppStoreConnectError):
    """HTTP 401, or the private key could not be read or signed with."""

    pass


class RateLimitError(AppStoreConnectError):
    """HTTP 429."""

    pass


class ValidationError(AppStoreConnectError):
    """Bad input: a malformed --next URL, an invalid locale, an oversized field."""

    pass


class NotFoundError(AppStoreConnectError):
    """HTTP 404."""

    pass


class PermissionError(AppStoreConnectError):
    """HTTP 403: the API key's role does not allow the operation."""

    pass


class ServerError(AppStoreConnectError):
    """HTTP 5xx."""

    pass


class ConfigurationError(AppStoreConnectError):
    """Credentials are missing or the config file is unreadable."""

    pass


class UsageError(AppStoreConnectError):
    """A command was invoked with missing or conflicting flags."""

    pass
