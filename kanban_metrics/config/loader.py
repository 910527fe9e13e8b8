"""Configuration loader for Kanban Metrics.

A configuration file is YAML with up to four sections::

    Connection:
        API URL: https://api.linear.app/graphql
        Timeout: 30

    Query:
        Team ID: ROI
        Start date: 2024-01-01
        End date: 2024-03-31
        Page size: 100
        Include archived: false

    Cache:
        Directory: tmp/.linear_cache
        Enabled: true

    Output:
        Format: json
        Team metrics: true
        Ticket details: false
        Timeseries: false
        Throughput chart: throughput.png
        Throughput chart title: Weekly throughput

Keys are case-insensitive, and spaces and underscores are interchangeable.
A file may start with `Extends: base.yml` to inherit from another file.
"""

import logging
import os.path

import yaml
from pydicti import odicti

from ..common_constants import OUTPUT_FORMATS
from .exceptions import ConfigError
from .type_utils import expand_key, force_bool, force_date_string, force_int

logger = logging.getLogger(__name__)


def ordered_load(stream, loader=yaml.SafeLoader):
    """
    Load YAML with mappings as case-insensitive ordered dictionaries.
    """

    def construct_mapping(loader, node):
        loader.flatten_mapping(node)
        return odicti(loader.construct_pairs(node))

    # Subclass so the shared SafeLoader constructors are not modified
    OrderedLoader = type(
        "OrderedLoader",
        (loader,),
        {"yaml_constructors": dict(loader.yaml_constructors)},
    )
    OrderedLoader.add_constructor(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping
    )

    return yaml.load(stream, OrderedLoader)


def create_default_options():
    """Create default options dictionary."""
    return {
        "connection": {
            "api_url": None,
            "timeout": None,
        },
        "settings": {
            "team_id": None,
            "start_date": None,
            "end_date": None,
            "page_size": None,
            "include_archived": False,
            "no_cache": False,
            "use_cache": True,
            "cache_dir": None,
            "format": "table",
            "team_metrics": False,
            "ticket_details": False,
            "timeseries": False,
            "throughput_chart": None,
            "throughput_chart_title": None,
        },
    }


def _section(config, name):
    """Return a config section with normalized keys, or None if absent."""
    if name not in config or config[name] is None:
        return None

    section = config[name]
    if not isinstance(section, dict):
        raise ConfigError(f"`{name.title()}` section must be a mapping")
    return odicti((expand_key(k), v) for k, v in section.items())


def _parse_connection_config(config, options):
    """Parse connection configuration."""
    section = _section(config, "connection")
    if section is None:
        return

    if "api url" in section:
        options["connection"]["api_url"] = str(section["api url"])
    if "timeout" in section:
        options["connection"]["timeout"] = force_int("timeout", section["timeout"])


def _parse_query_config(config, options):
    """Parse the issue query configuration."""
    section = _section(config, "query")
    if section is None:
        return

    settings = options["settings"]

    if "team id" in section:
        value = section["team id"]
        settings["team_id"] = str(value) if value is not None else None

    for key in ("start_date", "end_date"):
        if expand_key(key) in section and section[expand_key(key)] is not None:
            settings[key] = force_date_string(key, section[expand_key(key)])

    if "page size" in section:
        page_size = force_int("page_size", section["page size"])
        if page_size < 1:
            raise ConfigError("`Page size` must be at least 1")
        settings["page_size"] = page_size

    if "include archived" in section:
        settings["include_archived"] = force_bool(
            "include_archived", section["include archived"]
        )

    if (
        settings["start_date"]
        and settings["end_date"]
        and settings["start_date"] > settings["end_date"]
    ):
        raise ConfigError(
            f"`Start date` ({settings['start_date']}) must not be after "
            f"`End date` ({settings['end_date']})"
        )


def _parse_cache_config(config, options, cwd):
    """Parse cache configuration."""
    section = _section(config, "cache")
    if section is None:
        return

    if "directory" in section and section["directory"]:
        directory = str(section["directory"])
        if cwd and not os.path.isabs(directory):
            directory = os.path.join(cwd, directory)
        options["settings"]["cache_dir"] = directory

    if "enabled" in section:
        options["settings"]["use_cache"] = force_bool("enabled", section["enabled"])


def _parse_output_config(config, options):
    """Parse output configuration."""
    section = _section(config, "output")
    if section is None:
        return

    settings = options["settings"]

    if "format" in section:
        fmt = str(section["format"]).lower()
        if fmt not in OUTPUT_FORMATS:
            raise ConfigError(
                f"`Format` must be one of {', '.join(OUTPUT_FORMATS)}, not `{fmt}`"
            )
        settings["format"] = fmt

    for key in ("team_metrics", "ticket_details", "timeseries"):
        if expand_key(key) in section:
            settings[key] = force_bool(key, section[expand_key(key)])

    if "throughput chart" in section:
        settings["throughput_chart"] = os.path.basename(
            str(section["throughput chart"])
        )

    if "throughput chart title" in section:
        settings["throughput_chart_title"] = str(section["throughput chart title"])

    if "output directory" in section:
        options["output_directory"] = str(section["output directory"])


def config_to_options(data, cwd=None, _visited_files=None):
    """
    Parse YAML config data and return options dict.
    """
    if _visited_files is None:
        _visited_files = set()

    try:
        config = ordered_load(data, yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise ConfigError("Unable to parse YAML configuration file.") from e

    if config is None:
        raise ConfigError("Configuration file is empty") from None

    if not isinstance(config, dict):
        raise ConfigError("Configuration file must contain a mapping") from None

    options = create_default_options()

    if "extends" in config:
        if cwd is None:
            raise ConfigError("`extends` is not supported here.")

        extends_filename = os.path.abspath(
            os.path.normpath(
                os.path.join(cwd, str(config["extends"]).replace("/", os.path.sep))
            )
        )

        if not os.path.exists(extends_filename):
            raise ConfigError(
                f"File `{extends_filename}` referenced in `extends` not found."
            ) from None

        if extends_filename in _visited_files:
            raise ConfigError(
                f"Circular extends reference detected: {extends_filename}"
            ) from None

        _visited_files.add(extends_filename)

        logger.debug("Extending file %s", extends_filename)
        with open(extends_filename, encoding="utf-8") as extends_file:
            options = config_to_options(
                extends_file.read(),
                cwd=os.path.dirname(extends_filename),
                _visited_files=_visited_files,
            )

    _parse_connection_config(config, options)
    _parse_query_config(config, options)
    _parse_cache_config(config, options, cwd)
    _parse_output_config(config, options)

    return options
