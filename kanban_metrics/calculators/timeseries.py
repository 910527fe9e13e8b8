"""Per-issue timelines and status-flow analysis across issues."""

import logging
from collections import Counter

import pandas as pd

from ..utils import days_between, parse_timestamp, round_decimals, to_display, to_iso

logger = logging.getLogger(__name__)

CREATED_STATE = "created"


def _state_label(state):
    if not isinstance(state, dict):
        return None
    return state.get("name") or state.get("type")


def build_timeline(issue):
    """Return the chronologically sorted events of one issue.

    The first event is the creation of the issue, followed by one event per
    state change in its history. Events without a readable date are dropped.
    """
    events = []

    if issue.created_at is not None:
        events.append(
            {
                "timestamp": issue.created_at,
                "from_state": None,
                "to_state": CREATED_STATE,
                "event_type": "created",
            }
        )

    for node in issue.history:
        if not isinstance(node.get("toState"), dict):
            continue
        timestamp = parse_timestamp(
            node.get("createdAt"), f"history timestamp of {issue.label}"
        )
        if timestamp is None:
            continue
        events.append(
            {
                "timestamp": timestamp,
                "from_state": _state_label(node.get("fromState")),
                "to_state": _state_label(node["toState"]) or "?",
                "event_type": "status_change",
            }
        )

    return sorted(events, key=lambda e: e["timestamp"])


def serialize_event(event):
    """Timeline event with its timestamp as an ISO-8601 string."""
    return {
        "date": to_iso(event["timestamp"]),
        "from_state": event["from_state"],
        "to_state": event["to_state"],
        "event_type": event["event_type"],
    }


class TicketTimeseries:
    """Timeline-based analysis over a collection of issues."""

    def __init__(self, issues):
        self.issues = list(issues)
        self._timelines = None

    @property
    def timelines(self):
        if self._timelines is None:
            self._timelines = [(issue, build_timeline(issue)) for issue in self.issues]
        return self._timelines

    def generate(self):
        """Per-issue timelines, ready for serialization."""
        return [
            {
                "id": issue.identifier,
                "title": issue.title,
                "team": issue.team_name,
                "timeline": [serialize_event(e) for e in timeline],
            }
            for issue, timeline in self.timelines
        ]

    def status_flow_analysis(self):
        """Count of each `from → to` transition, most frequent first."""
        transitions = Counter()
        for _, timeline in self.timelines:
            for current, following in zip(timeline, timeline[1:]):
                transitions[f"{current['to_state']} → {following['to_state']}"] += 1
        return dict(transitions.most_common())

    def average_time_in_status(self):
        """Mean number of days spent in each status before the next change."""
        durations = [
            {
                "status": current["to_state"],
                "days": days_between(current["timestamp"], following["timestamp"]),
            }
            for _, timeline in self.timelines
            for current, following in zip(timeline, timeline[1:])
        ]
        if not durations:
            return {}

        averages = pd.DataFrame(durations).groupby("status", sort=False)["days"].mean()
        return {
            status: round_decimals(float(days)) for status, days in averages.items()
        }

    def daily_status_counts(self):
        """For each day with events, how many events moved issues into each status."""
        events = [
            {"date": to_display(event["timestamp"]), "status": event["to_state"]}
            for _, timeline in self.timelines
            for event in timeline
        ]
        if not events:
            return {}

        counts = pd.DataFrame(events).groupby(["date", "status"]).size()
        result = {}
        for (date, status), count in counts.items():
            result.setdefault(date, {})[status] = int(count)
        return result


def find_issue(issues, identifier):
    """Return the issue whose identifier or id matches, or None."""
    for issue in issues:
        if identifier in (issue.identifier, issue.id):
            return issue
    return None


def format_timeline(issue):
    """Render the timeline of one issue as text."""
    lines = [f"Timeline for {issue.label}: {issue.title or 'No title'}"]
    timeline = build_timeline(issue)
    if not timeline:
        lines.append("  No timeline events")
        return "\n".join(lines)

    for event in timeline:
        when = event["timestamp"].strftime("%Y-%m-%d %H:%M")
        if event["event_type"] == "created":
            lines.append(f"  {when}  created")
        else:
            lines.append(
                f"  {when}  {event['from_state'] or '?'} → {event['to_state']}"
            )
    return "\n".join(lines)
