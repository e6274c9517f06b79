"""File agent API client library.

This package provides a typed Python client for the token-authenticated
file agent HTTP service. It supports both synchronous and asynchronous
usage patterns.

Example:
    Synchronous usage::

        from agent_client import FileAgentClient

        with FileAgentClient(base_url="http://localhost:8767/api", token="secret") as client:
            for entry in client.files.list("C:\\\\"):
                print(entry.name)

    Asynchronous usage::

        from agent_client import AsyncFileAgentClient

        async with AsyncFileAgentClient(token="secret") as client:
            data = await client.files.read_binary("C:\\\\Music\\\\take1.wav")

Exports:
    FileAgentClient: Synchronous client.
    AsyncFileAgentClient: Asynchronous client.

    Exceptions:
        FileAgentClientError: Base exception for all client errors.
        ConnectionError: Failed to connect to the agent.
        TimeoutError: Request timed out.
        APIError: Agent returned an HTTP error status.
        NotFoundError: HTTP 404.
        ServerError: HTTP 5xx.
        AgentOperationError: Agent reported ``success: false``.
        AuthenticationError: Agent rejected the token.
"""

from agent_client._files import AsyncFilesClient, FilesClient
from agent_client.client import (
    DEFAULT_BASE_URL,
    DEFAULT_TOKEN,
    AsyncFileAgentClient,
    FileAgentClient,
)
from agent_client.exceptions import (
    AgentOperationError,
    APIError,
    AuthenticationError,
    ConnectionError,
    FileAgentClientError,
    NotFoundError,
    ServerError,
    TimeoutError,
)
from agent_client.models import (
    AgentResponse,
    BinaryReadResponse,
    DirectoryEntry,
    HealthResponse,
    Listing,
    ListResponse,
    MutationResponse,
    ReadResponse,
    SearchResponse,
)

__all__ = [
    # Main clients
    "FileAgentClient",
    "AsyncFileAgentClient",
    "DEFAULT_BASE_URL",
    "DEFAULT_TOKEN",
    # Sub-clients
    "FilesClient",
    "AsyncFilesClient",
    # Exceptions
    "FileAgentClientError",
    "ConnectionError",
    "TimeoutError",
    "APIError",
    "NotFoundError",
    "ServerError",
    "AgentOperationError",
    "AuthenticationError",
    # Models
    "AgentResponse",
    "DirectoryEntry",
    "Listing",
    "ListResponse",
    "SearchResponse",
    "ReadResponse",
    "BinaryReadResponse",
    "MutationResponse",
    "HealthResponse",
]
