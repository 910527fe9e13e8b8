"""Configuration exceptions for Kanban Metrics."""


class ConfigError(Exception):
    """
    Exception raised for errors in the configuration.
    """
