"""Common constants used across Kanban Metrics modules."""

from typing import Final, FrozenSet, Tuple

# Linear workflow state types
STATE_BACKLOG: Final[str] = "backlog"
STATE_UNSTARTED: Final[str] = "unstarted"
STATE_STARTED: Final[str] = "started"
STATE_COMPLETED: Final[str] = "completed"
STATE_CANCELED: Final[str] = "canceled"

VALID_STATE_TYPES: Final[Tuple[str, ...]] = (
    STATE_BACKLOG,
    STATE_UNSTARTED,
    STATE_STARTED,
    STATE_COMPLETED,
    STATE_CANCELED,
)

# State types counted as active work when calculating flow efficiency
ACTIVE_STATE_TYPES: Final[FrozenSet[str]] = frozenset(
    {STATE_STARTED, STATE_UNSTARTED}
)

# Issues without team information are grouped under this name
DEFAULT_TEAM_NAME: Final[str] = "Unknown Team"

# Hard limit on the number of pages fetched in one session
MAX_PAGES: Final[int] = 100

DEFAULT_PAGE_SIZE: Final[int] = 250
MAX_PAGE_SIZE: Final[int] = 250

DEFAULT_CACHE_DIR: Final[str] = "tmp/.linear_cache"
LINEAR_API_URL: Final[str] = "https://api.linear.app/graphql"
API_TOKEN_ENV_KEY: Final[str] = "LINEAR_API_TOKEN"

# Week label convention for throughput: Sunday-based week of the year
WEEK_FORMAT: Final[str] = "%Y-W%U"
INVALID_WEEK_KEY: Final[str] = "invalid-date"

ISO_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%SZ"
DISPLAY_FORMAT: Final[str] = "%Y-%m-%d"

OUTPUT_FORMATS: Final[Tuple[str, ...]] = ("table", "csv", "json")
