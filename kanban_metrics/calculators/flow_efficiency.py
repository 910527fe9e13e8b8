"""Flow efficiency: share of an issue's history spent in active states."""

import logging

import numpy as np

from ..common_constants import ACTIVE_STATE_TYPES
from ..issue import dig
from ..utils import days_between, parse_timestamp, round_decimals

logger = logging.getLogger(__name__)


def issue_active_and_total_days(history, log=None):
    """Walk consecutive history events and return ``(active, total)`` days.

    Each pair contributes its time delta to the total, and also to the
    active time when the earlier event moved the issue into a started or
    unstarted state. A pair with a missing or unparseable timestamp
    contributes nothing.
    """
    active_time = 0.0
    total_time = 0.0

    for from_event, to_event in zip(history, history[1:]):
        start = parse_timestamp(
            dig(from_event, "createdAt"), "history timestamp", log=log
        )
        end = parse_timestamp(dig(to_event, "createdAt"), "history timestamp", log=log)
        if start is None or end is None:
            continue

        duration = days_between(start, end)
        total_time += duration
        if dig(from_event, "toState", "type") in ACTIVE_STATE_TYPES:
            active_time += duration

    return active_time, total_time


def issue_flow_efficiency(issue, log=None):
    """Return active/total time for one issue, between 0.0 and 1.0."""
    history = issue.history
    if len(history) < 2:
        return 0.0

    active_time, total_time = issue_active_and_total_days(history, log)
    if total_time == 0:
        return 0.0
    return active_time / total_time


class FlowEfficiencyCalculator:
    """Average flow efficiency of a set of completed issues, as a percentage.

    Every issue carries the same weight regardless of how long it took, so
    the result is the mean of per-issue ratios rather than the ratio of
    summed times.
    """

    def __init__(self, completed_issues=(), log=None):
        self.completed_issues = list(completed_issues)
        self.logger = log or logger

    def calculate(self):
        if not self.completed_issues:
            return 0.0

        efficiencies = np.array(
            [issue_flow_efficiency(i, self.logger) for i in self.completed_issues]
        )
        return round_decimals(float(efficiencies.mean()) * 100)
