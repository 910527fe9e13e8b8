"""Utility functions for Kanban Metrics.

This module provides helpers shared by the ingestion pipeline and the
calculators: retry logic for API calls, timestamp parsing and formatting,
and rounding.
"""

import datetime
import logging
import math
import os.path
import random
import time
from decimal import ROUND_HALF_UP, Decimal
from functools import wraps
from typing import Callable, Optional, Tuple, Type, TypeVar

import dateutil.parser
import seaborn as sns
from dateutil import tz

from .common_constants import DISPLAY_FORMAT, ISO_FORMAT

T = TypeVar("T")
logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0


def retry_with_backoff(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    should_retry: Optional[Callable[[Exception], bool]] = None,
):
    """Decorator for API calls with retry logic and exponential backoff.

    The delay before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)`` plus
    up to one second of jitter. The last exception is re-raised once all
    attempts are used up.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        base_delay: Base delay in seconds for exponential backoff (default: 1.0)
        exceptions: Exception types that trigger a retry (default: Exception)
        should_retry: Optional predicate deciding whether a caught exception
                      is retried. Exceptions it rejects propagate immediately.

    Example:
        @retry_with_backoff(max_attempts=3, exceptions=(requests.Timeout,))
        def post(self, body):
            return self.session.post(self.url, json=body)
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as exception:
                    if should_retry and not should_retry(exception):
                        raise
                    if attempt >= max_attempts:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            func.__name__,
                            max_attempts,
                            exception,
                        )
                        raise

                    delay = base_delay * (2 ** (attempt - 1)) + random.uniform(0, 1)
                    logger.warning(
                        "%s failed (attempt %d/%d): %s. Retrying in %.2f seconds...",
                        func.__name__,
                        attempt,
                        max_attempts,
                        exception,
                        delay,
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def extend_dict(d, e):
    """Extend dictionary d with entries from e, returning a new dictionary."""
    r = d.copy()
    r.update(e)
    return r


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded away from zero.

    Python's built-in ``round`` uses banker's rounding, which would pick
    index 28 rather than 29 for ``0.95 * 30``.
    """
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def round_decimals(value: float, places: int = 2) -> float:
    """Round to `places` decimals, with halves rounded away from zero.

    The value goes through its shortest ``repr`` so that 0.125 becomes 0.13
    rather than 0.12.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_timestamp(value, description="timestamp", log=None):
    """Parse an ISO-8601-ish timestamp string into an aware datetime.

    Naive timestamps are assumed to be UTC. Returns None for missing or
    empty values, and logs a warning and returns None when the value cannot
    be parsed.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = dateutil.parser.parse(value)
    except (ValueError, OverflowError) as e:
        (log or logger).warning(
            "Failed to parse %s '%s': %s", description, value, e
        )
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.UTC)
    return parsed


def days_between(start, end):
    """Return the (fractional) number of days from `start` to `end`."""
    return (end - start).total_seconds() / SECONDS_PER_DAY


def to_iso(timestamp, fallback=None):
    """Format a timestamp as ISO 8601 in UTC, or return `fallback`."""
    if timestamp is None:
        return fallback
    return timestamp.astimezone(tz.UTC).strftime(ISO_FORMAT)


def to_display(timestamp, fallback="N/A"):
    """Format a timestamp as a plain date for human-readable output."""
    if timestamp is None:
        return fallback
    return timestamp.strftime(DISPLAY_FORMAT)


def end_of_day(now: datetime.datetime) -> datetime.datetime:
    """Return 23:59:59 on the same day as `now`."""
    return now.replace(hour=23, minute=59, second=59, microsecond=0)


def get_extension(filename):
    """Get file extension from filename."""
    return os.path.splitext(filename)[1].lower()


def set_chart_context(context):
    """Set seaborn chart context."""
    sns.set_context(context)
