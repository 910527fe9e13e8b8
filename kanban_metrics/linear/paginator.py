"""Cursor-driven pagination over the Linear issues query."""

import logging

from ..common_constants import MAX_PAGES
from .exceptions import UpstreamProtocolError
from .response_parser import parse_page

logger = logging.getLogger(__name__)


class PageState:
    """Pagination state for one fetch session."""

    def __init__(self, max_pages=MAX_PAGES):
        self.max_pages = max_pages
        self.current_page = 1
        self.after_cursor = None
        self.has_next_page = True

    def update(self, page):
        """Advance past a fetched page."""
        self.has_next_page = page.has_next_page
        self.after_cursor = page.end_cursor
        self.current_page += 1

    def safety_limit_reached(self):
        """True once more than `max_pages` pages would have been requested."""
        return self.current_page > self.max_pages

    def __repr__(self):
        return (
            f"<PageState page={self.current_page} cursor={self.after_cursor!r} "
            f"has_next_page={self.has_next_page}>"
        )


class Paginator:
    """Fetch every page of an issues query through a query executor.

    `executor` must provide ``execute(query, variables)`` returning the
    decoded response body, raising UpstreamProtocolError on failure.
    `query_builder` must provide ``build_issues_query(options, after_cursor)``
    returning a ``(query, variables)`` pair.
    """

    def __init__(self, executor, query_builder, max_pages=MAX_PAGES, log=None):
        self.executor = executor
        self.query_builder = query_builder
        self.max_pages = max_pages
        self.logger = log or logger
        self.truncated = False

    def fetch_all_pages(self, options):
        """Return all issues for `options`, or None if any page failed."""
        all_issues = []
        page_state = PageState(self.max_pages)
        self.truncated = False

        while page_state.has_next_page:
            self.logger.debug(
                "Fetching page %d (%d issues so far)",
                page_state.current_page,
                len(all_issues),
            )

            page = self._fetch_single_page(options, page_state.after_cursor)
            if page is None:
                self.logger.error(
                    "Aborting fetch at page %d; discarding %d issues",
                    page_state.current_page,
                    len(all_issues),
                )
                return None

            all_issues.extend(page.issues)
            page_state.update(page)

            if page_state.has_next_page and page_state.safety_limit_reached():
                self.truncated = True
                self.logger.warning(
                    "Stopped after %d pages (safety limit); "
                    "results may be incomplete (%d issues fetched)",
                    self.max_pages,
                    len(all_issues),
                )
                break

        return all_issues

    def _fetch_single_page(self, options, after_cursor):
        query, variables = self.query_builder.build_issues_query(options, after_cursor)
        try:
            response = self.executor.execute(query, variables)
        except UpstreamProtocolError as e:
            self.logger.error("Linear API request failed: %s", e)
            return None

        return parse_page(response, log=self.logger)
