"""Read-only view over a raw Linear issue record.

Every accessor tolerates missing or malformed data and returns None instead
of raising. Timestamps are parsed on first access and memoized per field.
"""

import logging

from .common_constants import (
    STATE_BACKLOG,
    STATE_CANCELED,
    STATE_COMPLETED,
    STATE_STARTED,
    STATE_UNSTARTED,
    VALID_STATE_TYPES,
)
from .utils import days_between, parse_timestamp, round_decimals, to_iso

logger = logging.getLogger(__name__)

_MISSING = object()


def dig(data, *keys):
    """Follow `keys` through nested mappings, returning None if any step is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class IssueView:
    """A Linear issue with typed accessors and derived time metrics."""

    def __init__(self, raw_data, log=None):
        if not isinstance(raw_data, dict):
            raise TypeError(
                f"Issue data must be a dict, not {type(raw_data).__name__}"
            )
        self.raw_data = raw_data
        self.logger = log or logger
        self._timestamps = {}
        self._started_at = _MISSING
        self._state_type_checked = False

    # Core fields

    @property
    def id(self):
        return dig(self.raw_data, "id")

    @property
    def identifier(self):
        """Human-readable identifier, e.g. "ENG-123"."""
        return dig(self.raw_data, "identifier")

    @property
    def title(self):
        return dig(self.raw_data, "title")

    @property
    def priority(self):
        return self._number("priority", int)

    @property
    def estimate(self):
        return self._number("estimate", float)

    @property
    def state_name(self):
        return dig(self.raw_data, "state", "name")

    @property
    def state_type(self):
        """One of backlog, unstarted, started, completed or canceled.

        Unrecognized values are returned unchanged, with a warning logged
        the first time they are seen on this issue.
        """
        state_type = dig(self.raw_data, "state", "type")
        if (
            state_type is not None
            and state_type not in VALID_STATE_TYPES
            and not self._state_type_checked
        ):
            self.logger.warning(
                "Issue %s has unrecognized state type `%s`", self.label, state_type
            )
        self._state_type_checked = True
        return state_type

    @property
    def team_name(self):
        return dig(self.raw_data, "team", "name")

    @property
    def assignee_name(self):
        return dig(self.raw_data, "assignee", "name")

    @property
    def history(self):
        """State-change events in the order Linear returned them."""
        nodes = dig(self.raw_data, "history", "nodes")
        if not isinstance(nodes, list):
            return []
        return [node for node in nodes if isinstance(node, dict)]

    @property
    def label(self):
        return self.identifier or self.id or "<unknown>"

    # Timestamps

    @property
    def created_at(self):
        return self._timestamp("createdAt")

    @property
    def updated_at(self):
        return self._timestamp("updatedAt")

    @property
    def started_at(self):
        """Explicit start time, else the first transition into a started state."""
        if self._started_at is _MISSING:
            self._started_at = (
                self._timestamp("startedAt") or self._history_start_time()
            )
        return self._started_at

    @property
    def completed_at(self):
        return self._timestamp("completedAt")

    @property
    def archived_at(self):
        return self._timestamp("archivedAt")

    # Derived metrics

    @property
    def cycle_time_days(self):
        """Days from start of work to completion, or None."""
        return _elapsed_days(self.started_at, self.completed_at)

    @property
    def lead_time_days(self):
        """Days from creation to completion, or None."""
        return _elapsed_days(self.created_at, self.completed_at)

    # Classification

    @property
    def is_completed(self):
        return self.completed_at is not None and self.state_type == STATE_COMPLETED

    @property
    def is_in_progress(self):
        return (
            self.started_at is not None
            and self.completed_at is None
            and self.state_type == STATE_STARTED
        )

    @property
    def is_backlog(self):
        return (
            self.started_at is None
            and self.completed_at is None
            and self.state_type in (STATE_BACKLOG, STATE_UNSTARTED)
        )

    @property
    def is_canceled(self):
        return self.state_type == STATE_CANCELED

    @property
    def is_archived(self):
        return self.archived_at is not None

    def to_dict(self):
        """Per-ticket detail record for reports."""
        return {
            "id": self.id,
            "identifier": self.identifier,
            "title": self.title,
            "state": {"name": self.state_name, "type": self.state_type},
            "team": self.team_name,
            "assignee": self.assignee_name,
            "priority": self.priority,
            "estimate": self.estimate,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
            "startedAt": to_iso(self.started_at),
            "completedAt": to_iso(self.completed_at),
            "archivedAt": to_iso(self.archived_at),
            "cycle_time_days": self.cycle_time_days,
            "lead_time_days": self.lead_time_days,
        }

    def _timestamp(self, field_name):
        if field_name not in self._timestamps:
            self._timestamps[field_name] = parse_timestamp(
                dig(self.raw_data, field_name),
                f"{field_name} of issue {self.label}",
                log=self.logger,
            )
        return self._timestamps[field_name]

    def _history_start_time(self):
        for event in self.history:
            if dig(event, "toState", "type") == STATE_STARTED:
                return parse_timestamp(
                    dig(event, "createdAt"),
                    f"history createdAt of issue {self.label}",
                    log=self.logger,
                )
        return None

    def _number(self, field_name, kind):
        value = dig(self.raw_data, field_name)
        if value is None:
            return None
        try:
            return kind(value)
        except (TypeError, ValueError):
            self.logger.warning(
                "Issue %s has non-numeric %s `%s`", self.label, field_name, value
            )
            return None

    def __str__(self):
        title = self.title or "No title"
        if len(title) > 50:
            title = title[:47] + "..."
        return f"Issue[{self.label}]: {title}"

    def __repr__(self):
        return (
            f"<IssueView id={self.id!r} identifier={self.identifier!r} "
            f"state={dig(self.raw_data, 'state', 'type')!r}>"
        )


def _elapsed_days(start, end):
    if start is None or end is None or end < start:
        return None
    return round_decimals(days_between(start, end))
