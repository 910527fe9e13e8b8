"""Type coercion helpers for configuration values."""

import datetime

from .exceptions import ConfigError

TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0")


def force_int(key, value) -> int:
    """
    Convert value to int, raise ConfigError on failure.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"Could not convert value `{value}` for key `{expand_key(key)}` to integer"
        ) from None


def force_bool(key, value) -> bool:
    """
    Convert value to bool, accepting YAML booleans and common strings.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value.strip().lower() in TRUE_STRINGS:
            return True
        if value.strip().lower() in FALSE_STRINGS:
            return False
    raise ConfigError(f"Value `{value}` for key `{expand_key(key)}` is not a boolean")


def force_date_string(key, value) -> str:
    """
    Return value as a YYYY-MM-DD string, raise ConfigError if it is not a date.

    YAML parses unquoted dates into datetime.date, quoted ones stay strings.
    """
    if isinstance(value, datetime.datetime):
        value = value.date()
    if isinstance(value, datetime.date):
        return value.isoformat()
    try:
        return datetime.date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise ConfigError(
            f"Value `{value}` for key `{expand_key(key)}` is not a date (YYYY-MM-DD)"
        ) from None


def expand_key(key) -> str:
    """
    Expand config key for display and lookup.
    """
    return str(key).replace("_", " ").lower()
