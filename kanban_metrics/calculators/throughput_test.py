"""Tests for weekly throughput."""

import logging

from .throughput import (
    ThroughputCalculator,
    calculate_throughput,
    week_key,
    weekly_counts,
)


def completed_on(issue_factory, *dates):
    return [
        issue_factory(id=f"i{n}", completedAt=f"{date}T12:00:00Z")
        for n, date in enumerate(dates)
    ]


def test_week_key(issue_factory):
    """Test Sunday-based week labels."""
    # 2024-01-07 is the first Sunday of 2024
    assert week_key(issue_factory(completedAt="2024-01-06T12:00:00Z")) == "2024-W00"
    assert week_key(issue_factory(completedAt="2024-01-07T12:00:00Z")) == "2024-W01"
    assert week_key(issue_factory(completedAt="2024-01-13T12:00:00Z")) == "2024-W01"
    assert week_key(issue_factory(completedAt="2024-01-14T00:00:00Z")) == "2024-W02"


def test_week_key_missing_date(issue_factory, caplog):
    """Test that an issue without a completion date gets the invalid key."""
    with caplog.at_level(logging.WARNING):
        assert week_key(issue_factory(completedAt=None)) == "invalid-date"

    assert "Missing completion date for issue ENG-1" in caplog.text


def test_same_week(issue_factory):
    """Test three completions in one week."""
    issues = completed_on(issue_factory, "2024-01-01", "2024-01-03", "2024-01-05")

    assert calculate_throughput(issues) == {"weekly_avg": 3.0, "total_completed": 3}


def test_two_weeks(issue_factory):
    """Test 2 completions in one week and 3 in the next."""
    issues = completed_on(
        issue_factory,
        "2024-01-08",
        "2024-01-09",
        "2024-01-15",
        "2024-01-16",
        "2024-01-17",
    )

    assert calculate_throughput(issues) == {"weekly_avg": 2.5, "total_completed": 5}


def test_weekly_counts(issue_factory):
    """Test counts per week in chronological order."""
    issues = completed_on(
        issue_factory, "2024-01-16", "2024-01-02", "2024-01-15", "2024-01-03"
    )

    counts = weekly_counts(issues)

    assert list(counts.index) == ["2024-W00", "2024-W02"]
    assert list(counts) == [2, 2]


def test_invalid_dates_excluded_from_weeks(issue_factory):
    """Test that undated issues count towards the total but no week."""
    issues = completed_on(issue_factory, "2024-01-01", "2024-01-02") + [
        issue_factory(id="bad", completedAt="garbage")
    ]

    assert calculate_throughput(issues) == {"weekly_avg": 2.0, "total_completed": 3}


def test_only_invalid_dates(issue_factory):
    """Test that no usable dates gives a zero average."""
    issues = [issue_factory(completedAt=None)]

    assert calculate_throughput(issues) == {"weekly_avg": 0.0, "total_completed": 1}
    assert weekly_counts(issues).empty


def test_empty():
    """Test no completed issues."""
    assert calculate_throughput([]) == {"weekly_avg": 0.0, "total_completed": 0}
    assert ThroughputCalculator([]).stats() == {
        "weekly_avg": 0.0,
        "total_completed": 0,
    }


def test_throughput_calculator(issue_factory):
    """Test the calculator wrapper."""
    issues = completed_on(issue_factory, "2024-01-01", "2024-01-08", "2024-01-09")
    calculator = ThroughputCalculator(issues)

    assert calculator.stats() == {"weekly_avg": 1.5, "total_completed": 3}
    assert calculator.weekly_counts().to_dict() == {"2024-W00": 1, "2024-W01": 2}
