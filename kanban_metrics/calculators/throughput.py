"""Weekly throughput of completed issues."""

import logging

import pandas as pd

from ..common_constants import INVALID_WEEK_KEY, WEEK_FORMAT
from ..utils import round_decimals

logger = logging.getLogger(__name__)


def empty_throughput_stats():
    """Zero-valued throughput, used when nothing has been completed."""
    return {"weekly_avg": 0.0, "total_completed": 0}


def week_key(issue, log=None):
    """Return the `%Y-W%U` label of the week `issue` was completed in.

    Weeks start on Sunday, and days before the first Sunday of a year fall
    in week 00. Issues without a usable completion timestamp map to
    INVALID_WEEK_KEY.
    """
    completed_at = issue.completed_at
    if completed_at is None:
        (log or logger).warning("Missing completion date for issue %s", issue.label)
        return INVALID_WEEK_KEY
    return completed_at.strftime(WEEK_FORMAT)


def weekly_counts(completed_issues, log=None):
    """Number of completed issues per week, in chronological order.

    Issues without a valid completion date are left out.
    """
    keys = pd.Series([week_key(i, log) for i in completed_issues], dtype="object")
    keys = keys[keys != INVALID_WEEK_KEY]
    if keys.empty:
        return pd.Series([], dtype="int64", name="count")
    return keys.value_counts().sort_index().rename("count")


def calculate_throughput(completed_issues, log=None):
    """Return the average weekly completions and the total completed.

    `total_completed` counts every input issue, including those whose
    completion date could not be read.
    """
    completed_issues = list(completed_issues)
    if not completed_issues:
        return empty_throughput_stats()

    counts = weekly_counts(completed_issues, log)
    weekly_avg = round_decimals(float(counts.mean())) if not counts.empty else 0.0

    return {
        "weekly_avg": weekly_avg,
        "total_completed": len(completed_issues),
    }


class ThroughputCalculator:
    """Throughput statistics for a set of completed issues."""

    def __init__(self, completed_issues=(), log=None):
        self.completed_issues = list(completed_issues)
        self.logger = log or logger

    def stats(self):
        return calculate_throughput(self.completed_issues, self.logger)

    def weekly_counts(self):
        return weekly_counts(self.completed_issues, self.logger)
