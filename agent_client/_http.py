"""Internal HTTP handling utilities for the file agent client.

This module provides the low-level HTTP communication layer used by the
sub-clients. It handles:
- Making HTTP requests (sync and async)
- Attaching the access token to every request
- Per-request timeouts (health checks and binary reads differ from the rest)
- Mapping transport and status failures onto the client exceptions

Requests are never retried: a timeout or connection failure is reported to
the caller as an ordinary error.

This is an internal module and should not be imported directly by users.
"""

from typing import Any, Literal

import httpx

from agent_client.exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
)


# HTTP methods used by the agent contract
HttpMethod = Literal["GET", "POST"]

# Default timeouts in seconds
DEFAULT_TIMEOUT = 10.0
HEALTH_TIMEOUT = 3.0
BINARY_READ_TIMEOUT = 30.0


def _parse_error_response(response: httpx.Response) -> str:
    """Extract a human-readable message from an error response.

    Prefers the envelope's ``error`` field, then common ``detail`` and
    ``message`` keys, and falls back to the raw response text.

    Args:
        response: The HTTP response to parse.

    Returns:
        The error message.
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        if text:
            return text
        return f"HTTP {response.status_code} error"

    if isinstance(body, dict):
        for key in ("error", "detail", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return str(body)


def _raise_for_status(response: httpx.Response) -> None:
    """Raise an appropriate exception for error status codes.

    Args:
        response: The HTTP response to check.

    Raises:
        NotFoundError: For HTTP 404 responses.
        ServerError: For HTTP 5xx responses.
        APIError: For other HTTP 4xx responses.
    """
    if response.is_success:
        return

    message = _parse_error_response(response)
    status_code = response.status_code

    try:
        response_body = response.json()
    except ValueError:
        response_body = response.text

    if status_code == 404:
        raise NotFoundError(message=message, response_body=response_body)
    elif status_code >= 500:
        raise ServerError(message=message, status_code=status_code, response_body=response_body)
    else:
        raise APIError(message=message, status_code=status_code, response_body=response_body)


def _decode_body(response: httpx.Response) -> Any:
    """Parse a successful response body as JSON.

    Args:
        response: A response with a 2xx status.

    Returns:
        The parsed JSON value, or None for an empty body.

    Raises:
        APIError: If the body is not valid JSON.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise APIError(
            message=f"Agent returned a non-JSON body: {e}",
            status_code=response.status_code,
            response_body=response.text,
        ) from e


def _with_token(
    method: HttpMethod,
    token: str,
    params: dict[str, Any] | None,
    json: dict[str, Any] | None,
) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
    """Attach the access token where the agent expects it.

    GET endpoints take the token as a query parameter, POST endpoints inside
    the JSON body.

    Args:
        method: The HTTP method.
        token: The access token.
        params: Query parameters.
        json: JSON body.

    Returns:
        The (params, json) pair with the token added and None-valued query
        parameters removed.
    """
    if params:
        params = {k: v for k, v in params.items() if v is not None}
    if method == "GET":
        params = {**(params or {}), "token": token}
    else:
        json = {**(json or {}), "token": token}
    return params, json


class HTTPClient:
    """Synchronous HTTP client for making agent requests.

    Wraps httpx.Client with token handling, per-request timeouts and
    exception mapping.

    Attributes:
        base_url: The base URL for all API requests (including ``/api``).
        token: The access token sent with every request.
        timeout: Default request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: The base URL for all API requests.
            token: The access token.
            timeout: Default request timeout in seconds.
            transport: Custom transport (e.g., MockTransport for testing).
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close client."""
        self.close()

    def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Make an HTTP request and return the parsed JSON response.

        Args:
            method: The HTTP method (GET or POST).
            path: The URL path (appended to base_url).
            params: Query parameters to include in the URL.
            json: JSON body to send with the request.
            timeout: Per-request timeout overriding the default.

        Returns:
            The parsed JSON response body, or None for empty responses.

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the agent returns an error status.
        """
        url = f"{self.base_url}{path}"
        effective_timeout = self.timeout if timeout is None else timeout
        params, json = _with_token(method, self.token, params, json)

        try:
            response = self._client.request(
                method=method,
                url=path,
                params=params,
                json=json,
                timeout=effective_timeout,
            )
        except httpx.ConnectError as e:
            raise ConnectionError(
                message=f"Failed to connect to {url}",
                url=url,
                cause=e,
            ) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(
                message=f"Request to {url} timed out",
                timeout=effective_timeout,
                url=url,
            ) from e

        _raise_for_status(response)
        return _decode_body(response)

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Make a GET request.

        Args:
            path: The URL path.
            params: Query parameters.
            timeout: Per-request timeout.

        Returns:
            The parsed JSON response.
        """
        return self.request("GET", path, params=params, timeout=timeout)

    def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Make a POST request.

        Args:
            path: The URL path.
            json: JSON body to send.
            timeout: Per-request timeout.

        Returns:
            The parsed JSON response.
        """
        return self.request("POST", path, json=json, timeout=timeout)


class AsyncHTTPClient:
    """Asynchronous HTTP client for making agent requests.

    Wraps httpx.AsyncClient with token handling, per-request timeouts and
    exception mapping.

    Attributes:
        base_url: The base URL for all API requests (including ``/api``).
        token: The access token sent with every request.
        timeout: Default request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the async HTTP client.

        Args:
            base_url: The base URL for all API requests.
            token: The access token.
            timeout: Default request timeout in seconds.
            transport: Custom transport (e.g., ASGITransport for testing).
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager and close client."""
        await self.close()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Make an async HTTP request and return the parsed JSON response.

        Args:
            method: The HTTP method (GET or POST).
            path: The URL path (appended to base_url).
            params: Query parameters to include in the URL.
            json: JSON body to send with the request.
            timeout: Per-request timeout overriding the default.

        Returns:
            The parsed JSON response body, or None for empty responses.

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the agent returns an error status.
        """
        url = f"{self.base_url}{path}"
        effective_timeout = self.timeout if timeout is None else timeout
        params, json = _with_token(method, self.token, params, json)

        try:
            response = await self._client.request(
                method=method,
                url=path,
                params=params,
                json=json,
                timeout=effective_timeout,
            )
        except httpx.ConnectError as e:
            raise ConnectionError(
                message=f"Failed to connect to {url}",
                url=url,
                cause=e,
            ) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(
                message=f"Request to {url} timed out",
                timeout=effective_timeout,
                url=url,
            ) from e

        _raise_for_status(response)
        return _decode_body(response)

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET an endpoint; the token travels as a query parameter."""
        return await self.request("GET", path, params=params, timeout=timeout)

    async def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """POST to an endpoint; the token travels in the JSON body."""
        return await self.request("POST", path, json=json, timeout=timeout)
