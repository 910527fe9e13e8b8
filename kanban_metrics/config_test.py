"""Tests for configuration functionality in Kanban Metrics.

This module contains unit tests for configuration loading and processing.
"""

import datetime
import os.path

import pytest

from .config import ConfigError, config_to_options
from .config.type_utils import (
    expand_key,
    force_bool,
    force_date_string,
    force_int,
)


def test_expand_key():
    """Test expand_key functionality."""
    assert expand_key("foo") == "foo"
    assert expand_key("foo_bar") == "foo bar"
    assert expand_key("FOO") == "foo"
    assert expand_key("FOO_bar") == "foo bar"


def test_force_int():
    """Test force_int functionality."""
    assert force_int("page_size", "10") == 10
    assert force_int("page_size", 10) == 10

    with pytest.raises(ConfigError, match="`page size`"):
        force_int("page_size", "ten")


def test_force_bool():
    """Test force_bool functionality."""
    assert force_bool("enabled", True) is True
    assert force_bool("enabled", "yes") is True
    assert force_bool("enabled", "Off") is False

    with pytest.raises(ConfigError):
        force_bool("enabled", "maybe")
    with pytest.raises(ConfigError):
        force_bool("enabled", 2)


def test_force_date_string():
    """Test force_date_string functionality."""
    assert force_date_string("start_date", datetime.date(2024, 1, 2)) == "2024-01-02"
    assert (
        force_date_string("start_date", datetime.datetime(2024, 1, 2, 15, 0))
        == "2024-01-02"
    )
    assert force_date_string("start_date", "2024-01-02") == "2024-01-02"

    with pytest.raises(ConfigError, match="not a date"):
        force_date_string("start_date", "January")


def test_config_to_options_minimal():
    """Test config_to_options with minimal configuration."""
    options = config_to_options(
        """\
Query:
    Team ID: ROI
"""
    )

    assert options["connection"] == {"api_url": None, "timeout": None}
    assert options["settings"]["team_id"] == "ROI"
    assert options["settings"]["start_date"] is None
    assert options["settings"]["page_size"] is None
    assert options["settings"]["use_cache"] is True
    assert options["settings"]["format"] == "table"
    assert options["settings"]["team_metrics"] is False


def test_config_to_options_maximal():
    """Test config_to_options with maximal configuration."""
    options = config_to_options(
        """\
Connection:
    API URL: https://linear.example.com/graphql
    Timeout: 10

Query:
    Team ID: 9cfb482a-81e3-4154-b5b9-2c805e70a02d
    Start date: 2024-01-01
    End date: "2024-03-31"
    Page size: 100
    Include archived: true

Cache:
    Directory: /var/cache/linear
    Enabled: false

Output:
    Format: JSON
    Team metrics: true
    Ticket details: yes
    Timeseries: true
    Throughput chart: charts/throughput.png
    Throughput chart title: Weekly throughput
"""
    )

    assert options["connection"] == {
        "api_url": "https://linear.example.com/graphql",
        "timeout": 10,
    }
    assert options["settings"] == {
        "team_id": "9cfb482a-81e3-4154-b5b9-2c805e70a02d",
        "start_date": "2024-01-01",
        "end_date": "2024-03-31",
        "page_size": 100,
        "include_archived": True,
        "no_cache": False,
        "use_cache": False,
        "cache_dir": "/var/cache/linear",
        "format": "json",
        "team_metrics": True,
        "ticket_details": True,
        "timeseries": True,
        "throughput_chart": "throughput.png",
        "throughput_chart_title": "Weekly throughput",
    }


def test_config_keys_are_case_and_underscore_insensitive():
    """Test that key spelling is forgiving."""
    options = config_to_options(
        """\
query:
    team_id: ROI
    PAGE SIZE: 10
OUTPUT:
    ticket_details: true
"""
    )

    assert options["settings"]["team_id"] == "ROI"
    assert options["settings"]["page_size"] == 10
    assert options["settings"]["ticket_details"] is True


def test_relative_cache_directory(tmp_path):
    """Test that a relative cache directory is resolved against the config file."""
    options = config_to_options(
        """\
Cache:
    Directory: cache
""",
        cwd=str(tmp_path),
    )

    assert options["settings"]["cache_dir"] == os.path.join(str(tmp_path), "cache")


def test_output_directory():
    """Test the optional output directory."""
    options = config_to_options(
        """\
Output:
    Output directory: metrics
"""
    )

    assert options["output_directory"] == "metrics"


@pytest.mark.parametrize(
    "config",
    [
        "Query:\n    Page size: lots\n",
        "Query:\n    Page size: 0\n",
        "Query:\n    Start date: soon\n",
        "Query:\n    Start date: 2024-02-01\n    End date: 2024-01-01\n",
        "Output:\n    Format: xml\n",
        "Output:\n    Team metrics: sometimes\n",
        "Cache:\n    Enabled: maybe\n",
        "Query: ROI\n",
        "- just\n- a list\n",
        "",
        "Query: [unclosed\n",
    ],
)
def test_invalid_config(config):
    """Test that invalid values raise ConfigError."""
    with pytest.raises(ConfigError):
        config_to_options(config)


def test_config_to_options_extends(tmp_path):
    """Test that a config file can extend a base file."""
    base_dir = tmp_path / "base"
    base_dir.mkdir()
    (base_dir / "base.yml").write_text(
        """\
Connection:
    Timeout: 15
Query:
    Team ID: ROI
    Page size: 50
Cache:
    Directory: shared-cache
Output:
    Format: csv
""",
        encoding="utf-8",
    )

    options = config_to_options(
        """\
Extends: base/base.yml
Query:
    Page size: 25
Output:
    Team metrics: true
""",
        cwd=str(tmp_path),
    )

    assert options["connection"]["timeout"] == 15
    assert options["settings"]["team_id"] == "ROI"
    assert options["settings"]["page_size"] == 25
    assert options["settings"]["format"] == "csv"
    assert options["settings"]["team_metrics"] is True
    # Paths in the base file are relative to the base file
    assert options["settings"]["cache_dir"] == os.path.join(
        str(base_dir), "shared-cache"
    )


def test_config_to_options_extends_missing_file(tmp_path):
    """Test extending a file that does not exist."""
    with pytest.raises(ConfigError, match="not found"):
        config_to_options("Extends: missing.yml\n", cwd=str(tmp_path))


def test_config_to_options_extends_without_cwd():
    """Test that extends needs a base directory."""
    with pytest.raises(ConfigError):
        config_to_options("Extends: base.yml\n")


def test_config_to_options_circular_extends(tmp_path):
    """Test that circular extends references are detected."""
    (tmp_path / "a.yml").write_text("Extends: b.yml\n", encoding="utf-8")
    (tmp_path / "b.yml").write_text("Extends: a.yml\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Circular"):
        config_to_options("Extends: a.yml\n", cwd=str(tmp_path))
