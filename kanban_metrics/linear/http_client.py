"""HTTP query executor for the Linear GraphQL API."""

import logging

import requests

from ..common_constants import LINEAR_API_URL
from ..utils import retry_with_backoff
from .exceptions import UpstreamProtocolError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

STATUS_MESSAGES = {
    401: "Unauthorized - check your API token",
    403: "Forbidden - insufficient permissions",
    429: "Rate limited",
}


class LinearHttpClient:
    """Send GraphQL queries to Linear and return the decoded response body."""

    def __init__(
        self, api_token, api_url=LINEAR_API_URL, timeout=DEFAULT_TIMEOUT, session=None
    ):
        if not api_token:
            raise ValueError("A Linear API token is required")

        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": api_token,
                "Content-Type": "application/json",
            }
        )

    def execute(self, query, variables=None):
        """POST a query and return the decoded JSON body.

        Raises:
            UpstreamProtocolError: On transport errors, non-200 statuses,
                invalid JSON or GraphQL errors.
        """
        body = {"query": query}
        if variables:
            body["variables"] = variables

        try:
            response = self._post(body)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise UpstreamProtocolError(f"Network error: {e}") from e
        except requests.RequestException as e:
            raise UpstreamProtocolError(f"Request failed: {e}") from e

        return self._handle_response(response)

    @retry_with_backoff(
        max_attempts=3,
        base_delay=1.0,
        exceptions=(requests.ConnectionError, requests.Timeout),
    )
    def _post(self, body):
        return self.session.post(self.api_url, json=body, timeout=self.timeout)

    def _handle_response(self, response):
        status = response.status_code

        if status == 200:
            data = _decode_json(response)
            if isinstance(data, dict) and data.get("errors"):
                raise UpstreamProtocolError(
                    f"GraphQL errors: {_error_messages(data['errors'])}"
                )
            return data

        if status == 400:
            details = ""
            try:
                data = response.json()
            except ValueError:
                logger.debug("Bad request body: %s", response.text)
            else:
                if isinstance(data, dict) and data.get("errors"):
                    details = f" - {_error_messages(data['errors'])}"
            raise UpstreamProtocolError(f"HTTP 400: Bad Request{details}")

        message = STATUS_MESSAGES.get(status, response.reason or "Unexpected status")
        raise UpstreamProtocolError(f"HTTP {status}: {message}")


def _decode_json(response):
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamProtocolError(f"Invalid JSON response: {e}") from e


def _error_messages(errors):
    return ", ".join(
        e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors
    )
