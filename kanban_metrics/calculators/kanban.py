"""Metrics engine combining the partitioner and the individual calculators."""

import logging
from collections import OrderedDict

from ..common_constants import DEFAULT_TEAM_NAME
from .flow_efficiency import FlowEfficiencyCalculator
from .partitioner import IssuePartitioner
from .throughput import ThroughputCalculator, empty_throughput_stats
from .time_metrics import TimeMetricsCalculator, empty_time_stats

logger = logging.getLogger(__name__)


def empty_time_based_metrics():
    """Zero-valued defaults for every time-based metric."""
    return {
        "cycle_time": empty_time_stats(),
        "lead_time": empty_time_stats(),
        "throughput": empty_throughput_stats(),
        "flow_efficiency": 0.0,
    }


class MetricsEngine:
    """Build metrics records for a collection of IssueView objects.

    A metrics record always contains every key: counts for each partition,
    cycle and lead time statistics, throughput and flow efficiency. When no
    issue is completed the time-based fields hold zero values.
    """

    def __init__(self, log=None):
        self.logger = log or logger

    def overall(self, issues):
        """Metrics across all `issues`."""
        return self.calculate(list(issues))

    def by_team(self, issues):
        """Metrics per team name, in order of first appearance."""
        groups = OrderedDict()
        for issue in issues:
            team = issue.team_name
            if not team:
                self.logger.warning(
                    "Issue %s has no team, grouping under `%s`",
                    issue.label,
                    DEFAULT_TEAM_NAME,
                )
                team = DEFAULT_TEAM_NAME
            groups.setdefault(team, []).append(issue)

        return {
            team: self.calculate(team_issues) for team, team_issues in groups.items()
        }

    def calculate(self, issues):
        """Metrics for one group of issues."""
        completed, in_progress, backlog = IssuePartitioner.partition(issues)

        metrics = {
            "total_issues": len(issues),
            "completed_issues": len(completed),
            "in_progress_issues": len(in_progress),
            "backlog_issues": len(backlog),
        }

        if not completed:
            metrics.update(empty_time_based_metrics())
            return metrics

        time_calculator = TimeMetricsCalculator(completed)
        metrics.update(
            {
                "cycle_time": time_calculator.cycle_time_stats(),
                "lead_time": time_calculator.lead_time_stats(),
                "throughput": ThroughputCalculator(completed, self.logger).stats(),
                "flow_efficiency": FlowEfficiencyCalculator(
                    completed, self.logger
                ).calculate(),
            }
        )
        return metrics
