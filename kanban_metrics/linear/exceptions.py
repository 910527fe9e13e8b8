"""Exceptions raised while talking to the Linear API."""


class UpstreamProtocolError(Exception):
    """
    Exception raised when a page cannot be fetched or understood.

    Covers failed HTTP statuses, transport errors, invalid JSON and GraphQL
    error payloads. The paginator catches it and aborts the fetch.
    """
