"""Test configuration and fixtures for Kanban Metrics.

This module provides builders for raw Linear issue records and the
IssueView objects made from them.
"""

import matplotlib
import pytest

from .issue import IssueView
from .utils import extend_dict

matplotlib.use("Agg")


def history_event(created_at, to_type, to_name=None, from_type=None, from_name=None):
    """One raw history node moving an issue into a state of type `to_type`."""
    event = {
        "id": f"hist-{created_at}",
        "createdAt": created_at,
        "toState": {"name": to_name or to_type.title(), "type": to_type},
    }
    if from_type is not None:
        event["fromState"] = {"name": from_name or from_type.title(), "type": from_type}
    return event


def raw_issue(**overrides):
    """A raw completed issue, as returned by the Linear API."""
    return extend_dict(
        {
            "id": "issue-1",
            "identifier": "ENG-1",
            "title": "Issue one",
            "state": {"id": "s-done", "name": "Done", "type": "completed"},
            "team": {"id": "t-eng", "name": "Engineering"},
            "assignee": {"id": "u-1", "name": "Alex Doe"},
            "priority": 2,
            "estimate": 3,
            "createdAt": "2024-01-01T00:00:00.000Z",
            "updatedAt": "2024-01-11T00:00:00.000Z",
            "startedAt": "2024-01-03T00:00:00.000Z",
            "completedAt": "2024-01-11T00:00:00.000Z",
            "archivedAt": None,
            "history": {"nodes": []},
        },
        overrides,
    )


def completed_record(identifier, created, started, completed, team="Engineering"):
    return raw_issue(
        id=identifier.lower(),
        identifier=identifier,
        team={"name": team},
        createdAt=created,
        startedAt=started,
        completedAt=completed,
    )


def in_progress_record(identifier, created, started, team="Engineering"):
    return raw_issue(
        id=identifier.lower(),
        identifier=identifier,
        state={"name": "In Progress", "type": "started"},
        team={"name": team},
        createdAt=created,
        startedAt=started,
        completedAt=None,
    )


def backlog_record(identifier, created, team="Engineering", state_type="backlog"):
    return raw_issue(
        id=identifier.lower(),
        identifier=identifier,
        state={"name": state_type.title(), "type": state_type},
        team={"name": team},
        createdAt=created,
        startedAt=None,
        completedAt=None,
    )


@pytest.fixture(name="issue_factory")
def fixture_issue_factory():
    """Build IssueView objects from raw-field overrides."""

    def make(**overrides):
        return IssueView(raw_issue(**overrides))

    return make


@pytest.fixture(name="mixed_issues")
def fixture_mixed_issues():
    """Two completed, one in-progress and one backlog issue across two teams."""
    return [
        IssueView(
            completed_record(
                "ENG-1",
                "2024-01-01T00:00:00Z",
                "2024-01-03T00:00:00Z",
                "2024-01-05T00:00:00Z",
            )
        ),
        IssueView(
            completed_record(
                "OPS-1",
                "2024-01-02T00:00:00Z",
                "2024-01-06T00:00:00Z",
                "2024-01-10T00:00:00Z",
                team="Operations",
            )
        ),
        IssueView(
            in_progress_record("ENG-2", "2024-01-04T00:00:00Z", "2024-01-08T00:00:00Z")
        ),
        IssueView(backlog_record("OPS-2", "2024-01-05T00:00:00Z", team="Operations")),
    ]


@pytest.fixture(name="page_response")
def fixture_page_response():
    """Build a decoded GraphQL issues page."""

    def make(nodes, has_next_page=False, end_cursor=None):
        return {
            "data": {
                "issues": {
                    "nodes": nodes,
                    "pageInfo": {
                        "hasNextPage": has_next_page,
                        "endCursor": end_cursor,
                    },
                }
            }
        }

    return make
