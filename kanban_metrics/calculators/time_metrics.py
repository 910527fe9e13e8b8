"""Cycle time and lead time statistics."""

import logging

import pandas as pd

from ..utils import round_decimals, round_half_up

logger = logging.getLogger(__name__)

PERCENTILE = 0.95


def empty_time_stats():
    """Zero-valued statistics, used when there is nothing to measure."""
    return {"average": 0.0, "median": 0.0, "p95": 0.0}


def calculate_time_stats(samples):
    """Return average, median and 95th percentile of `samples`, in days.

    The percentile is nearest-rank: the element at index
    ``round(0.95 * (n - 1))`` of the ascending sort, without interpolation.
    None values are ignored. All results are rounded to 2 decimals.
    """
    values = pd.Series(
        [s for s in samples if s is not None], dtype="float64"
    ).sort_values(ignore_index=True)

    if values.empty:
        return empty_time_stats()

    p95_index = round_half_up(PERCENTILE * (len(values) - 1))

    return {
        "average": round_decimals(float(values.sum()) / len(values)),
        "median": round_decimals(float(values.median())),
        "p95": round_decimals(float(values.iloc[p95_index])),
    }


class TimeMetricsCalculator:
    """Cycle time and lead time statistics over a set of issues.

    Only issues with a valid duration of the requested kind contribute to
    each sample.
    """

    def __init__(self, issues=()):
        self.issues = list(issues)

    @staticmethod
    def stats(samples):
        return calculate_time_stats(samples)

    def cycle_time_stats(self):
        samples = [i.cycle_time_days for i in self.issues]
        logger.debug(
            "Cycle time sample: %d of %d issues",
            sum(s is not None for s in samples),
            len(samples),
        )
        return calculate_time_stats(samples)

    def lead_time_stats(self):
        samples = [i.lead_time_days for i in self.issues]
        logger.debug(
            "Lead time sample: %d of %d issues",
            sum(s is not None for s in samples),
            len(samples),
        )
        return calculate_time_stats(samples)
