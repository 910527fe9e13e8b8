"""Query options for fetching issues from Linear."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .common_constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)


def normalize_page_size(size) -> int:
    """Clamp a page size to 1..MAX_PAGE_SIZE.

    Missing values and strings that are not integers fall back to the
    default page size.
    """
    if size is None:
        return DEFAULT_PAGE_SIZE

    if isinstance(size, str):
        try:
            size = int(size.strip())
        except ValueError:
            logger.warning(
                "Invalid page size `%s`, using %d", size, DEFAULT_PAGE_SIZE
            )
            return DEFAULT_PAGE_SIZE

    return min(max(int(size), 1), MAX_PAGE_SIZE)


@dataclass(frozen=True)
class QueryOptions:
    """Parameters for one issue fetch.

    Attributes:
        team_id: Linear team UUID or team key (e.g. "ROI")
        start_date: Lower bound for `updatedAt`, as YYYY-MM-DD
        end_date: Upper bound for `updatedAt`, as YYYY-MM-DD
        page_size: Issues per page, clamped to 1..250
        no_cache: Bypass the disk cache for reads and writes
        include_archived: Include archived issues
    """

    team_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    page_size: int = field(default=DEFAULT_PAGE_SIZE)
    no_cache: bool = False
    include_archived: bool = False

    def __post_init__(self):
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "page_size", normalize_page_size(self.page_size))
        for name in ("team_id", "start_date", "end_date"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                object.__setattr__(self, name, str(value))
        object.__setattr__(self, "no_cache", bool(self.no_cache))
        object.__setattr__(self, "include_archived", bool(self.include_archived))

    @classmethod
    def from_dict(cls, options):
        """Create QueryOptions from a settings dictionary, ignoring unknown keys."""
        return cls(
            team_id=options.get("team_id"),
            start_date=options.get("start_date"),
            end_date=options.get("end_date"),
            page_size=options.get("page_size"),
            no_cache=options.get("no_cache") or False,
            include_archived=options.get("include_archived") or False,
        )

    def cache_key_data(self):
        """Return the parameters that shape the result set, without `None` values.

        `no_cache` does not change which issues are returned, so it is not
        part of the key.
        """
        data = {
            "team_id": self.team_id,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "page_size": self.page_size,
            "include_archived": self.include_archived,
        }
        return {k: v for k, v in data.items() if v is not None}

    def to_dict(self):
        """Return all options as a plain dictionary."""
        return {
            "team_id": self.team_id,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "page_size": self.page_size,
            "no_cache": self.no_cache,
            "include_archived": self.include_archived,
        }
