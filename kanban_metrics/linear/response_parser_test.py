"""Tests for parsing Linear issue pages."""

import logging

from .response_parser import PageResult, parse_page


def test_parse_page(page_response):
    """Test a well-formed page."""
    page = parse_page(page_response([{"id": "1"}, {"id": "2"}], True, "cursor-1"))

    assert page == PageResult(
        issues=[{"id": "1"}, {"id": "2"}], has_next_page=True, end_cursor="cursor-1"
    )


def test_parse_page_without_page_info():
    """Test that missing page info ends pagination."""
    page = parse_page({"data": {"issues": {"nodes": [{"id": "1"}]}}})

    assert page.issues == [{"id": "1"}]
    assert page.has_next_page is False
    assert page.end_cursor is None


def test_parse_page_filters_non_dict_nodes(page_response):
    """Test that junk nodes are dropped."""
    page = parse_page(page_response([{"id": "1"}, None, "two", 3]))

    assert page.issues == [{"id": "1"}]


def test_parse_page_empty_nodes(page_response):
    """Test an empty page."""
    assert parse_page(page_response([])).issues == []


def test_parse_page_graphql_errors(caplog):
    """Test that GraphQL errors fail the page."""
    with caplog.at_level(logging.ERROR):
        assert parse_page({"errors": [{"message": "Field not found"}]}) is None

    assert "Field not found" in caplog.text


def test_parse_page_malformed_responses():
    """Test shapes that cannot be read as a page."""
    assert parse_page(None) is None
    assert parse_page("oops") is None
    assert parse_page({}) is None
    assert parse_page({"data": None}) is None
    assert parse_page({"data": {"issues": []}}) is None
    assert parse_page({"data": {"issues": {"nodes": "nope"}}}) is None
