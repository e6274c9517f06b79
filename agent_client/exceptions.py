"""Exception hierarchy for the file agent client.

This module defines all exceptions that can be raised by the file agent
client library. The hierarchy separates transport failures (the agent could
not be reached), HTTP-level failures (the agent answered with an error
status) and operation failures (the agent answered ``{"success": false}``).

Exception Hierarchy:
    FileAgentClientError (base)
    ├── ConnectionError - Network/connection failures
    ├── TimeoutError - Request timeout
    ├── APIError - Agent returned an HTTP error status
    │   ├── NotFoundError (HTTP 404)
    │   └── ServerError (HTTP 5xx)
    └── AgentOperationError - Envelope reported ``success: false``
        └── AuthenticationError - Token was rejected

Example:
    Catching operation failures::

        try:
            entries = client.files.list("C:\\\\missing")
        except AgentOperationError as e:
            print(f"Listing failed: {e.message}")

    Catching all client errors::

        try:
            client.files.delete("C:\\\\tmp\\\\old.txt")
        except FileAgentClientError as e:
            print(f"Client error: {e}")
"""

from typing import Any


class FileAgentClientError(Exception):
    """Base exception for all file agent client errors.

    Subclasses add context through ``_details``; ``str()`` renders it as
    ``"message (key: value, ...)"``.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def _details(self) -> list[str]:
        return []

    def __str__(self) -> str:
        details = self._details()
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"


class ConnectionError(FileAgentClientError):
    """The agent could not be reached.

    Usually the agent is not running, or the base URL points elsewhere.

    Attributes:
        url: The URL that was requested.
        cause: The transport exception from httpx.
    """

    def __init__(self, message: str, url: str | None = None, cause: Exception | None = None) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def _details(self) -> list[str]:
        return [f"url: {self.url}"] if self.url else []


class TimeoutError(FileAgentClientError):
    """The agent did not answer within the request timeout.

    Timeouts are ordinary failures: the client never retries them.

    Attributes:
        timeout: The timeout that expired, in seconds.
        url: The URL that was requested.
    """

    def __init__(self, message: str, timeout: float | None = None, url: str | None = None) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def _details(self) -> list[str]:
        details = []
        if self.timeout is not None:
            details.append(f"timeout: {self.timeout}s")
        if self.url:
            details.append(f"url: {self.url}")
        return details


class APIError(FileAgentClientError):
    """The agent returned an HTTP error status.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the agent.
        response_body: Raw response body for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: Any = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code from the agent.
            response_body: Raw response body for debugging.
        """
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including status code."""
        return f"[HTTP {self.status_code}] {self.message}"


class NotFoundError(APIError):
    """Endpoint not found (HTTP 404).

    The file agent reports missing files through the envelope, so a 404
    almost always means the base URL points at the wrong service.
    """

    def __init__(self, message: str, response_body: Any = None) -> None:
        super().__init__(message=message, status_code=404, response_body=response_body)


class ServerError(APIError):
    """Agent-side error (HTTP 5xx)."""

    def __init__(self, message: str, status_code: int = 500, response_body: Any = None) -> None:
        super().__init__(message=message, status_code=status_code, response_body=response_body)


class AgentOperationError(FileAgentClientError):
    """The agent answered with ``{"success": false, "error": ...}``.

    The HTTP exchange itself succeeded; the requested file operation did not
    (missing path, permission denied, invalid token, ...).

    Attributes:
        message: The error text reported by the agent.
        operation: The operation name (``list``, ``search``, ...).
        path: The path or source the operation targeted, if known.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        path: str | None = None,
    ) -> None:
        self.operation = operation
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including the operation if known."""
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class AuthenticationError(AgentOperationError):
    """The agent rejected the access token."""
