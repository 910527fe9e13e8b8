"""Ingestion pipeline: cache-or-fetch issue collections from Linear.

This is the single point where raw issue records become IssueView objects.
"""

import logging
from typing import List, NamedTuple

from ..issue import IssueView
from ..query_options import QueryOptions
from .cache import CacheStore
from .http_client import DEFAULT_TIMEOUT, LinearHttpClient
from .paginator import Paginator
from .query_builder import QueryBuilder

logger = logging.getLogger(__name__)


class FetchResult(NamedTuple):
    """Outcome of one fetch.

    `ok` is False when the upstream fetch failed, which distinguishes a
    failure from a query that legitimately matched no issues.
    """

    issues: List[IssueView]
    ok: bool = True
    from_cache: bool = False
    truncated: bool = False


class IngestionPipeline:
    """Decide cache-or-fetch per request and return normalized issues."""

    def __init__(self, paginator, cache=None, log=None):
        self.paginator = paginator
        self.cache = cache
        self.logger = log or logger

    def fetch(self, options):
        """Return the issues matching `options` as IssueView objects.

        An empty list means either that nothing matched or that the fetch
        failed; use `fetch_result` to tell the two apart.
        """
        return self.fetch_result(options).issues

    def fetch_result(self, options):
        """Return a FetchResult for `options` (a QueryOptions or a dict)."""
        if not isinstance(options, QueryOptions):
            options = QueryOptions.from_dict(options)

        if options.no_cache or self.cache is None:
            self.logger.debug("Cache disabled, fetching from API")
            return self._fetch_from_api(options)

        cache_key = self.cache.generate_key(options)
        cached = self.cache.get(cache_key)
        if cached is not None and not isinstance(cached, list):
            self.logger.warning("Ignoring cached data that is not an issue list")
            cached = None
        if cached is not None:
            self.logger.info(
                "Using cached data (%d issues) - cache key: %s...",
                len(cached),
                cache_key[:8],
            )
            return FetchResult(self._wrap(cached), from_cache=True)

        self.logger.info("Cache miss or expired, fetching from API")
        result = self._fetch_from_api(options, raw=True)
        if result.ok:
            self.cache.set(cache_key, result.issues)
        return result._replace(issues=self._wrap(result.issues))

    def _fetch_from_api(self, options, raw=False):
        records = self.paginator.fetch_all_pages(options)
        if records is None:
            self.logger.error("Fetching issues from Linear failed")
            return FetchResult([], ok=False)

        self.logger.info("Fetched %d issues from Linear", len(records))
        truncated = getattr(self.paginator, "truncated", False)
        return FetchResult(
            records if raw else self._wrap(records), truncated=truncated
        )

    def _wrap(self, records):
        views = []
        for record in records:
            if isinstance(record, dict):
                views.append(IssueView(record, log=self.logger))
            else:
                self.logger.warning("Skipping issue record of type %s", type(record))
        return views


def create_pipeline(api_token, settings=None, connection=None):
    """Create an IngestionPipeline talking to Linear over HTTP.

    `settings` may provide `cache_dir` and `use_cache`; `connection` may
    provide `api_url` and `timeout`.
    """
    settings = settings or {}
    connection = connection or {}

    http_client_options = {"timeout": connection.get("timeout") or DEFAULT_TIMEOUT}
    if connection.get("api_url"):
        http_client_options["api_url"] = connection["api_url"]

    paginator = Paginator(
        LinearHttpClient(api_token, **http_client_options), QueryBuilder()
    )
    cache = None
    if settings.get("use_cache", True):
        cache = CacheStore(settings.get("cache_dir"))

    return IngestionPipeline(paginator, cache)
