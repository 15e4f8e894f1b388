"""
Configuration loading for asc-cli.

Settings come from the environment (optionally seeded from a ``.env`` file)
and from a JSON config file. Environment variables win over the file.
"""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".asc" / "config.json"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_PAGES = 1000

# config file key -> environment variable
ENV_VARS = {
    "key_id": "ASC_KEY_ID",
    "issuer_id": "ASC_ISSUER_ID",
    "private_key_path": "ASC_PRIVATE_KEY_PATH",
    "app_id": "ASC_APP_ID",
    "timeout": "ASC_TIMEOUT",
    "max_pages": "ASC_MAX_PAGES",
}

_DURATION_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(ms|s|m)?$")


@dataclass
class Config:
    """Resolved settings for one CLI invocation."""

    key_id: Optional[str] = None
    issuer_id: Optional[str] = None
    private_key_path: Optional[str] = None
    app_id: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    max_pages: int = DEFAULT_MAX_PAGES

    def missing_credentials(self):
        """Return the env var names of credentials that are not set."""
        missing = []
        for key in ("key_id", "issuer_id", "private_key_path"):
            if not getattr(self, key):
                missing.append(ENV_VARS[key])
        return missing


def config_path(env: Optional[Mapping[str, str]] = None) -> Path:
    """Return the config file path (ASC_CONFIG_PATH or ~/.asc/config.json)."""
    env = os.environ if env is None else env
    override = (env.get("ASC_CONFIG_PATH") or "").strip()
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read the JSON config file.

    Args:
        path: Location of the config file

    Returns:
        The decoded settings, or an empty dict when the file does not exist

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"load_config_file: no config file at {path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    return data


def parse_timeout(value: Union[str, int, float, None]) -> float:
    """
    Parse a timeout given as seconds or as a duration like "30s" or "2m".

    Raises:
        ConfigurationError: If the value is not a positive duration
    """
    if value is None or value == "":
        return DEFAULT_TIMEOUT
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    else:
        match = _DURATION_PATTERN.match(str(value).strip())
        if not match:
            raise ConfigurationError(f"Invalid timeout: {value}")
        seconds = float(match.group(1))
        unit = match.group(2) or "s"
        if unit == "ms":
            seconds /= 1000
        elif unit == "m":
            seconds *= 60

    if seconds <= 0:
        raise ConfigurationError(f"Timeout must be positive, got: {value}")
    return seconds


def parse_max_pages(value: Union[str, int, None]) -> int:
    """Parse the pagination page cap."""
    if value is None or value == "":
        return DEFAULT_MAX_PAGES
    try:
        pages = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid max pages: {value}")
    if pages < 1:
        raise ConfigurationError(f"Max pages must be at least 1, got: {value}")
    return pages


def load_config(env: Optional[Mapping[str, str]] = None) -> Config:
    """
    Resolve settings from the config file and the environment.

    Args:
        env: Environment mapping (defaults to os.environ)

    Returns:
        Config with environment values taking precedence
    """
    env = os.environ if env is None else env
    settings = load_config_file(config_path(env))

    values: Dict[str, Any] = {}
    for key, var in ENV_VARS.items():
        raw = (env.get(var) or "").strip()
        if raw:
            values[key] = raw
        elif settings.get(key) not in (None, ""):
            values[key] = settings[key]

    private_key_path = values.get("private_key_path")
    if private_key_path:
        private_key_path = str(Path(str(private_key_path)).expanduser())

    return Config(
        key_id=_as_str(values.get("key_id")),
        issuer_id=_as_str(values.get("issuer_id")),
        private_key_path=private_key_path,
        app_id=_as_str(values.get("app_id")),
        timeout=parse_timeout(values.get("timeout")),
        max_pages=parse_max_pages(values.get("max_pages")),
    )


def resolve_app_id(flag_value: Optional[str], config: Config) -> str:
    """Return the --app flag value, falling back to the configured app ID."""
    value = (flag_value or "").strip()
    if value:
        return value
    return (config.app_id or "").strip()


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None
