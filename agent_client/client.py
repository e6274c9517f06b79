"""Main file agent client classes.

This module provides the main entry points for talking to a file agent:
- FileAgentClient: Synchronous client
- AsyncFileAgentClient: Asynchronous client

Both clients expose the file endpoints through the ``files`` sub-client and
the health endpoint directly.

Example:
    Synchronous usage::

        from agent_client import FileAgentClient

        with FileAgentClient(token="default-token-12345") as client:
            if client.health():
                entries = client.files.list("C:\\\\")

    Asynchronous usage::

        from agent_client import AsyncFileAgentClient

        async with AsyncFileAgentClient(token="default-token-12345") as client:
            entries = await client.files.list("C:\\\\")
"""

import logging
from typing import Any

from agent_client._files import AsyncFilesClient, FilesClient
from agent_client._http import (
    BINARY_READ_TIMEOUT,
    DEFAULT_TIMEOUT,
    HEALTH_TIMEOUT,
    AsyncHTTPClient,
    HTTPClient,
)
from agent_client.exceptions import FileAgentClientError
from agent_client.models import HealthResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8767/api"
DEFAULT_TOKEN = "default-token-12345"


class FileAgentClient:
    """Synchronous client for the file agent API.

    Attributes:
        base_url: The base URL of the agent API.
        timeout: Default request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str = DEFAULT_TOKEN,
        timeout: float = DEFAULT_TIMEOUT,
        health_timeout: float = HEALTH_TIMEOUT,
        binary_timeout: float = BINARY_READ_TIMEOUT,
        transport: Any = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The agent API base URL (default: http://localhost:8767/api).
            token: The access token sent with every request.
            timeout: Default request timeout in seconds (default: 10.0).
            health_timeout: Timeout for health checks (default: 3.0).
            binary_timeout: Timeout for binary reads (default: 30.0).
            transport: Custom HTTP transport (e.g., MockTransport for testing).
        """
        self._base_url = base_url
        self._health_timeout = health_timeout
        self._binary_timeout = binary_timeout
        self._http = HTTPClient(
            base_url=base_url,
            token=token,
            timeout=timeout,
            transport=transport,
        )
        self._files: FilesClient | None = None

    def __enter__(self) -> "FileAgentClient":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close the client."""
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()

    @property
    def base_url(self) -> str:
        """The agent API base URL."""
        return self._http.base_url

    @property
    def files(self) -> FilesClient:
        """Access the file endpoints (list, search, read, write, ...).

        Returns:
            FilesClient instance for file operations.
        """
        if self._files is None:
            self._files = FilesClient(self._http, binary_timeout=self._binary_timeout)
        return self._files

    def health(self) -> bool:
        """Check whether the agent is reachable and healthy.

        Never raises: any failure is reported as False.

        Returns:
            True if the agent answered with a successful envelope.
        """
        try:
            data = self._http.get("/health", timeout=self._health_timeout)
            return HealthResponse(**data).success
        except (FileAgentClientError, TypeError, ValueError) as e:
            logger.debug(f"Health check against {self.base_url} failed: {e}")
            return False


class AsyncFileAgentClient:
    """Asynchronous client for the file agent API.

    Example:
        async with AsyncFileAgentClient() as client:
            listing, hits = await asyncio.gather(
                client.files.list("C:\\\\Music"),
                client.files.search("C:\\\\Music", "*mix*"),
            )
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str = DEFAULT_TOKEN,
        timeout: float = DEFAULT_TIMEOUT,
        health_timeout: float = HEALTH_TIMEOUT,
        binary_timeout: float = BINARY_READ_TIMEOUT,
        transport: Any = None,
    ) -> None:
        """Initialize the async client.

        Args:
            base_url: The agent API base URL (default: http://localhost:8767/api).
            token: The access token sent with every request.
            timeout: Default request timeout in seconds (default: 10.0).
            health_timeout: Timeout for health checks (default: 3.0).
            binary_timeout: Timeout for binary reads (default: 30.0).
            transport: Custom HTTP transport (e.g., ASGITransport for testing).
        """
        self._base_url = base_url
        self._health_timeout = health_timeout
        self._binary_timeout = binary_timeout
        self._http = AsyncHTTPClient(
            base_url=base_url,
            token=token,
            timeout=timeout,
            transport=transport,
        )
        self._files: AsyncFilesClient | None = None

    async def __aenter__(self) -> "AsyncFileAgentClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager and close the client."""
        await self.close()

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._http.close()

    @property
    def base_url(self) -> str:
        """The agent API base URL."""
        return self._http.base_url

    @property
    def files(self) -> AsyncFilesClient:
        """Access the file endpoints (list, search, read, write, ...).

        Returns:
            AsyncFilesClient instance for file operations.
        """
        if self._files is None:
            self._files = AsyncFilesClient(self._http, binary_timeout=self._binary_timeout)
        return self._files

    async def health(self) -> bool:
        """Check whether the agent is reachable and healthy.

        Never raises: any failure is reported as False.

        Returns:
            True if the agent answered with a successful envelope.
        """
        try:
            data = await self._http.get("/health", timeout=self._health_timeout)
            return HealthResponse(**data).success
        except (FileAgentClientError, TypeError, ValueError) as e:
            logger.debug(f"Health check against {self.base_url} failed: {e}")
            return False
