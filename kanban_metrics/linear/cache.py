"""Disk cache for Linear API results.

Each result set is stored as a JSON document under ``<cache_dir>/<key>.json``
and stays valid until 23:59:59 (local time) on the day it was written.
Expiry is checked on read; expired files are left in place and simply
ignored.
"""

import datetime
import hashlib
import json
import logging
import os
import os.path

from ..common_constants import DEFAULT_CACHE_DIR
from ..utils import end_of_day

logger = logging.getLogger(__name__)


def _local_now():
    return datetime.datetime.now().astimezone()


class CacheStore:
    """Key-addressed store of issue collections with an end-of-day TTL.

    Reads never raise: a missing, unreadable, corrupt, mismatched or expired
    record is a miss.
    """

    def __init__(self, cache_dir=None, now=None, log=None):
        self.cache_dir = cache_dir or DEFAULT_CACHE_DIR
        self._now = now or _local_now
        self.logger = log or logger

    def generate_key(self, options):
        """Fingerprint the query parameters of `options`.

        Accepts a QueryOptions instance or a plain dict of parameters.
        """
        if hasattr(options, "cache_key_data"):
            key_data = options.cache_key_data()
        else:
            key_data = {k: v for k, v in options.items() if v is not None}
        canonical = json.dumps(key_data, sort_keys=True, default=str)
        return hashlib.md5(canonical.encode("utf-8")).hexdigest()

    def path_for(self, key):
        """Return the file path used for `key`."""
        return os.path.join(self.cache_dir, f"{key}.json")

    def get(self, key):
        """Return the cached data for `key`, or None on a miss."""
        path = self.path_for(key)
        if not os.path.exists(path):
            self.logger.debug("No cache entry for key %s", key[:8])
            return None

        try:
            with open(path, encoding="utf-8") as cache_file:
                record = json.load(cache_file)
        except (OSError, ValueError) as e:
            self.logger.warning("Cache read error for key %s: %s", key[:8], e)
            return None

        if not isinstance(record, dict) or "data" not in record:
            self.logger.warning("Ignoring malformed cache entry %s", path)
            return None

        if record.get("key", key) != key:
            self.logger.warning(
                "Cache entry %s belongs to key %s, ignoring", path, record.get("key")
            )
            return None

        expires_at = self._expires_at(record)
        if expires_at is None:
            self.logger.warning("Cache entry %s has no timestamps, ignoring", path)
            return None

        if self._now().timestamp() > expires_at:
            self.logger.debug("Cache entry for key %s has expired", key[:8])
            return None

        return record["data"]

    def set(self, key, data):
        """Store `data` under `key`. Returns False if the entry could not be written."""
        now = self._now()
        record = {
            "key": key,
            "data": data,
            "cached_at": int(now.timestamp()),
            "expires_at": int(end_of_day(now).timestamp()),
        }

        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            content = json.dumps(record, indent=2)
            with open(self.path_for(key), "w", encoding="utf-8") as cache_file:
                cache_file.write(content)
        except (OSError, TypeError, ValueError) as e:
            self.logger.warning("Cache write error for key %s: %s", key[:8], e)
            return False

        self.logger.debug("Cached %s under key %s", _describe(data), key[:8])
        return True

    def _expires_at(self, record):
        """Return the expiry of `record` as epoch seconds, or None if unknown."""
        try:
            if record.get("expires_at") is not None:
                return float(record["expires_at"])
            if record.get("cached_at") is not None:
                # Older entries only carry `cached_at`: expire at the end of that day
                cached = datetime.datetime.fromtimestamp(
                    float(record["cached_at"])
                ).astimezone()
                return end_of_day(cached).timestamp()
        except (TypeError, ValueError, OverflowError, OSError) as e:
            self.logger.warning("Invalid cache timestamps: %s", e)
        return None


def _describe(data):
    if isinstance(data, list):
        return f"{len(data)} issues"
    return type(data).__name__
