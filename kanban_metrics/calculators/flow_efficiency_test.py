"""Tests for flow efficiency."""

import logging

import pytest

from ..conftest import history_event
from .flow_efficiency import (
    FlowEfficiencyCalculator,
    issue_active_and_total_days,
    issue_flow_efficiency,
)

BACKLOG_STARTED_COMPLETED = [
    history_event("2024-01-01T00:00:00Z", "backlog"),
    history_event("2024-01-02T00:00:00Z", "started", from_type="backlog"),
    history_event("2024-01-04T00:00:00Z", "completed", from_type="started"),
]


def with_history(issue_factory, events, **overrides):
    return issue_factory(history={"nodes": events}, **overrides)


def test_active_and_total_days():
    """Test the walk over consecutive history events."""
    assert issue_active_and_total_days(BACKLOG_STARTED_COMPLETED) == (2.0, 3.0)


def test_unstarted_counts_as_active():
    """Test that time after moving into an unstarted state is active."""
    history = [
        history_event("2024-01-01T00:00:00Z", "unstarted"),
        history_event("2024-01-03T00:00:00Z", "backlog"),
        history_event("2024-01-04T00:00:00Z", "completed"),
    ]

    assert issue_active_and_total_days(history) == (2.0, 3.0)


def test_history_walked_in_given_order():
    """Test that history is not re-sorted."""
    history = list(reversed(BACKLOG_STARTED_COMPLETED))

    active, total = issue_active_and_total_days(history)

    assert total == -3.0
    assert active == -1.0


def test_unparseable_pair_skipped(caplog):
    """Test that pairs with a bad timestamp contribute nothing."""
    history = [
        history_event("2024-01-01T00:00:00Z", "started"),
        history_event("garbage", "backlog"),
        history_event("2024-01-05T00:00:00Z", "started"),
        history_event("2024-01-06T00:00:00Z", "completed"),
    ]

    with caplog.at_level(logging.WARNING):
        assert issue_active_and_total_days(history) == (1.0, 1.0)

    assert "garbage" in caplog.text


def test_issue_flow_efficiency(issue_factory):
    """Test the ratio for one issue."""
    issue = with_history(issue_factory, BACKLOG_STARTED_COMPLETED)

    assert issue_flow_efficiency(issue) == pytest.approx(2 / 3)


def test_issue_flow_efficiency_short_history(issue_factory):
    """Test that fewer than two events gives zero."""
    assert issue_flow_efficiency(with_history(issue_factory, [])) == 0.0
    assert (
        issue_flow_efficiency(
            with_history(issue_factory, BACKLOG_STARTED_COMPLETED[:1])
        )
        == 0.0
    )


def test_issue_flow_efficiency_zero_total(issue_factory):
    """Test that simultaneous events give zero rather than dividing by zero."""
    history = [
        history_event("2024-01-01T00:00:00Z", "started"),
        history_event("2024-01-01T00:00:00Z", "completed"),
    ]

    assert issue_flow_efficiency(with_history(issue_factory, history)) == 0.0


def test_single_issue_percentage(issue_factory):
    """Test one issue with 2 of 3 days active."""
    issue = with_history(issue_factory, BACKLOG_STARTED_COMPLETED)

    assert FlowEfficiencyCalculator([issue]).calculate() == 66.67


def test_mean_of_ratios(issue_factory):
    """Test that every issue weighs the same regardless of duration."""
    slow_and_waiting = with_history(
        issue_factory,
        [
            history_event("2024-01-01T00:00:00Z", "backlog"),
            history_event("2024-03-01T00:00:00Z", "completed"),
        ],
        id="slow",
    )
    fast_and_active = with_history(
        issue_factory,
        [
            history_event("2024-01-01T00:00:00Z", "started"),
            history_event("2024-01-02T00:00:00Z", "completed"),
        ],
        id="fast",
    )

    calculator = FlowEfficiencyCalculator([slow_and_waiting, fast_and_active])

    assert calculator.calculate() == 50.0


def test_empty():
    """Test no completed issues."""
    assert FlowEfficiencyCalculator([]).calculate() == 0.0
