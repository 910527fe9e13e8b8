"""Parsing of Linear GraphQL issue pages."""

import logging
from typing import List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class PageResult(NamedTuple):
    """One page of issues with its continuation info."""

    issues: List[dict]
    has_next_page: bool
    end_cursor: Optional[str]


def parse_page(response, log=None) -> Optional[PageResult]:
    """Extract issues and page info from a decoded GraphQL response body.

    Returns None when the response is empty, carries GraphQL errors, or
    does not have the `data.issues` shape.
    """
    log = log or logger

    if not isinstance(response, dict):
        log.warning("Empty or non-object response from Linear API")
        return None

    errors = response.get("errors")
    if errors:
        messages = [
            e.get("message", str(e)) if isinstance(e, dict) else str(e)
            for e in errors
        ]
        log.error("GraphQL errors: %s", ", ".join(messages))
        return None

    data = response.get("data")
    issues_data = data.get("issues") if isinstance(data, dict) else None
    if not isinstance(issues_data, dict):
        log.warning("Response has no `data.issues` object")
        return None

    nodes = issues_data.get("nodes") or []
    if not isinstance(nodes, list):
        log.warning("Response `issues.nodes` is not a list")
        return None

    page_info = issues_data.get("pageInfo") or {}
    if not isinstance(page_info, dict):
        page_info = {}

    return PageResult(
        issues=[node for node in nodes if isinstance(node, dict)],
        has_next_page=bool(page_info.get("hasNextPage", False)),
        end_cursor=page_info.get("endCursor"),
    )
