"""Partitioning of issues into completed, in-progress and backlog buckets."""

from ..common_constants import STATE_COMPLETED, STATE_STARTED


class IssuePartitioner:
    """Classify issues by their current state type.

    Anything that is neither completed nor started lands in the backlog,
    including canceled issues and unrecognized or missing state types.
    """

    @staticmethod
    def partition(issues):
        """Return ``(completed, in_progress, backlog)`` lists."""
        completed, in_progress, backlog = [], [], []
        for issue in issues:
            state_type = issue.state_type
            if state_type == STATE_COMPLETED:
                completed.append(issue)
            elif state_type == STATE_STARTED:
                in_progress.append(issue)
            else:
                backlog.append(issue)
        return completed, in_progress, backlog
