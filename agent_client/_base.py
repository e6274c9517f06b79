"""Shared plumbing for the file agent sub-clients.

Sub-clients call an endpoint through ``_get`` or ``_post``, which validate
the ``{success, data, error}`` envelope with the endpoint's response model
and hand back only ``data``. A body that is not a valid envelope raises
``APIError``. The operation name used in error messages is
the endpoint path without its leading slash.

This is an internal module. Import from `agent_client` instead.
"""

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from agent_client.exceptions import APIError
from agent_client.models import AgentResponse

if TYPE_CHECKING:
    from agent_client._http import AsyncHTTPClient, HTTPClient


def _unwrap(endpoint: str, response: type[AgentResponse], subject: str | None, body: Any) -> Any:
    if not isinstance(body, dict):
        raise APIError(f"Malformed response from {endpoint}: expected a JSON object", 200, response_body=body)
    try:
        envelope = response(**body)
    except (ValidationError, TypeError) as e:
        raise APIError(f"Malformed response from {endpoint}: {e}", 200, response_body=body) from e
    return envelope.unwrap(endpoint.lstrip("/"), subject)


class BaseClient:
    """Base class for synchronous sub-clients.

    Attributes:
        _http: The HTTP client shared by every sub-client of one FileAgentClient.
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        self._http = http_client

    def _get(
        self,
        endpoint: str,
        response: type[AgentResponse],
        subject: str | None = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Call a GET endpoint and return the envelope's payload.

        Args:
            endpoint: Endpoint path, e.g. ``/list``.
            response: Envelope model for the endpoint.
            subject: Path the call targets, for error messages.
            params: Query parameters (the token is added by the HTTP layer).
            timeout: Per-request timeout override.

        Returns:
            The ``data`` field of a successful response.

        Raises:
            AgentOperationError: If the agent reported ``success: false``.
        """
        body = self._http.get(endpoint, params=params, timeout=timeout)
        return _unwrap(endpoint, response, subject, body)

    def _post(
        self,
        endpoint: str,
        response: type[AgentResponse],
        subject: str | None = None,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Call a POST endpoint and return the envelope's payload.

        Same contract as ``_get`` with a JSON body instead of query parameters.
        """
        body = self._http.post(endpoint, json=json, timeout=timeout)
        return _unwrap(endpoint, response, subject, body)


class AsyncBaseClient:
    """Base class for asynchronous sub-clients.

    Attributes:
        _http: The async HTTP client shared by every sub-client of one
            AsyncFileAgentClient.
    """

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        self._http = http_client

    async def _get(
        self,
        endpoint: str,
        response: type[AgentResponse],
        subject: str | None = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Async counterpart of ``BaseClient._get``."""
        body = await self._http.get(endpoint, params=params, timeout=timeout)
        return _unwrap(endpoint, response, subject, body)

    async def _post(
        self,
        endpoint: str,
        response: type[AgentResponse],
        subject: str | None = None,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Async counterpart of ``BaseClient._post``."""
        body = await self._http.post(endpoint, json=json, timeout=timeout)
        return _unwrap(endpoint, response, subject, body)
