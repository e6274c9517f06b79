"""File operations sub-client for the file agent API.

This module provides FilesClient and AsyncFilesClient for the file
endpoints (/list, /search, /read, /read_binary, /write, /write_binary,
/delete, /create, /move, /copy).

Every method unwraps the agent's ``{success, data, error}`` envelope and
raises ``AgentOperationError`` when the agent reports a failure.

This is an internal module. Import from `agent_client` instead.
"""

import base64
import binascii

from agent_client._base import AsyncBaseClient, BaseClient
from agent_client._http import BINARY_READ_TIMEOUT, AsyncHTTPClient, HTTPClient
from agent_client.exceptions import AgentOperationError
from agent_client.models import (
    BinaryReadResponse,
    Listing,
    ListResponse,
    MutationResponse,
    ReadResponse,
    SearchResponse,
)


def _decode_base64(payload: str | None, path: str) -> bytes:
    """Decode the base64 payload of a binary read.

    Args:
        payload: The ``data`` field of a read_binary response.
        path: The file path, for error reporting.

    Returns:
        The raw file bytes.

    Raises:
        AgentOperationError: If the payload is not valid base64.
    """
    try:
        return base64.b64decode(payload or "", validate=True)
    except binascii.Error as e:
        raise AgentOperationError(
            f"invalid base64 payload: {e}", operation="read_binary", path=path
        ) from e


def _encode_base64(data: bytes) -> str:
    """Encode raw bytes for write_binary."""
    return base64.b64encode(data).decode("ascii")


# Synchronous FilesClient


class FilesClient(BaseClient):
    """Synchronous client for the file agent's file endpoints.

    Example:
        with FileAgentClient(token="secret") as client:
            for entry in client.files.list("C:\\\\Users"):
                print(entry.name, entry.size)

            client.files.create("C:\\\\Users\\\\me\\\\notes", is_directory=True)
            client.files.write("C:\\\\Users\\\\me\\\\notes\\\\todo.txt", "buy milk")
    """

    def __init__(self, http_client: "HTTPClient", binary_timeout: float = BINARY_READ_TIMEOUT) -> None:
        super().__init__(http_client)
        self.binary_timeout = binary_timeout

    def list(self, path: str) -> Listing:
        """List the entries of a directory.

        Args:
            path: Absolute directory path.

        Returns:
            The entries in the order the agent reported them.

        Raises:
            AgentOperationError: If the directory cannot be read.
        """
        return self._get("/list", ListResponse, path, params={"path": path}) or []

    def search(self, directory: str, pattern: str) -> Listing:
        """Search a directory tree for names matching a pattern.

        Args:
            directory: Root directory of the search.
            pattern: Name pattern, e.g. ``*report*``.

        Returns:
            Matching entries (the agent caps the walk at 1000 entries).
        """
        return self._post(
            "/search", SearchResponse, directory, json={"directory": directory, "pattern": pattern}
        ) or []

    def read(self, path: str) -> str:
        """Read a text file.

        Args:
            path: Absolute file path.

        Returns:
            The file content.
        """
        return self._post("/read", ReadResponse, path, json={"path": path}) or ""

    def read_binary(self, path: str) -> bytes:
        """Read a file as raw bytes.

        Uses the longer binary-read timeout.

        Args:
            path: Absolute file path.

        Returns:
            The decoded file bytes.
        """
        payload = self._post(
            "/read_binary", BinaryReadResponse, path, json={"path": path}, timeout=self.binary_timeout
        )
        return _decode_base64(payload, path)

    def write(self, path: str, content: str) -> str:
        """Write a text file, replacing any existing content.

        Args:
            path: Absolute file path.
            content: Text to write.

        Returns:
            The agent's confirmation message.
        """
        return self._post(
            "/write", MutationResponse, path, json={"path": path, "content": content}
        ) or ""

    def write_binary(self, path: str, content: bytes) -> str:
        """Write raw bytes to a file.

        Args:
            path: Absolute file path.
            content: Bytes to write; sent base64-encoded.

        Returns:
            The agent's confirmation message.
        """
        return self._post(
            "/write_binary", MutationResponse, path, json={"path": path, "content": _encode_base64(content)}
        ) or ""

    def delete(self, path: str) -> str:
        """Delete a file or a directory tree.

        Args:
            path: Absolute path.

        Returns:
            The agent's confirmation message.
        """
        return self._post("/delete", MutationResponse, path, json={"path": path}) or ""

    def create(self, path: str, is_directory: bool = False) -> str:
        """Create an empty file or a directory.

        Args:
            path: Absolute path of the new item.
            is_directory: Create a directory instead of a file.

        Returns:
            The agent's confirmation message.
        """
        return self._post(
            "/create", MutationResponse, path, json={"path": path, "is_directory": is_directory}
        ) or ""

    def move(self, source: str, destination: str) -> str:
        """Move or rename a file or directory.

        Args:
            source: Current path.
            destination: New path.

        Returns:
            The agent's confirmation message.
        """
        return self._post(
            "/move", MutationResponse, source, json={"source": source, "destination": destination}
        ) or ""

    def copy(self, source: str, destination: str) -> str:
        """Copy a file or directory tree.

        Args:
            source: Path to copy.
            destination: Path of the copy.

        Returns:
            The agent's confirmation message.
        """
        return self._post(
            "/copy", MutationResponse, source, json={"source": source, "destination": destination}
        ) or ""


# Asynchronous AsyncFilesClient


class AsyncFilesClient(AsyncBaseClient):
    """Asynchronous client for the file agent's file endpoints.

    Example:
        async with AsyncFileAgentClient(token="secret") as client:
            entries, hits = await asyncio.gather(
                client.files.list("C:\\\\Music"),
                client.files.search("C:\\\\Music", "*live*"),
            )
    """

    def __init__(self, http_client: "AsyncHTTPClient", binary_timeout: float = BINARY_READ_TIMEOUT) -> None:
        super().__init__(http_client)
        self.binary_timeout = binary_timeout

    async def list(self, path: str) -> Listing:
        """List the entries of a directory.

        Args:
            path: Absolute directory path.

        Returns:
            The entries in the order the agent reported them.

        Raises:
            AgentOperationError: If the directory cannot be read.
        """
        return await self._get("/list", ListResponse, path, params={"path": path}) or []

    async def search(self, directory: str, pattern: str) -> Listing:
        """Search a directory tree for names matching a pattern.

        Args:
            directory: Root directory of the search.
            pattern: Name pattern, e.g. ``*report*``.

        Returns:
            Matching entries.
        """
        return await self._post(
            "/search", SearchResponse, directory, json={"directory": directory, "pattern": pattern}
        ) or []

    async def read(self, path: str) -> str:
        """Read a text file.

        Args:
            path: Absolute file path.

        Returns:
            The file content.
        """
        return await self._post("/read", ReadResponse, path, json={"path": path}) or ""

    async def read_binary(self, path: str) -> bytes:
        """Read a file as raw bytes.

        Uses the longer binary-read timeout.

        Args:
            path: Absolute file path.

        Returns:
            The decoded file bytes.
        """
        payload = await self._post(
            "/read_binary", BinaryReadResponse, path, json={"path": path}, timeout=self.binary_timeout
        )
        return _decode_base64(payload, path)

    async def write(self, path: str, content: str) -> str:
        """Write a text file, replacing any existing content."""
        return await self._post(
            "/write", MutationResponse, path, json={"path": path, "content": content}
        ) or ""

    async def write_binary(self, path: str, content: bytes) -> str:
        """Write raw bytes to a file (sent base64-encoded)."""
        return await self._post(
            "/write_binary", MutationResponse, path, json={"path": path, "content": _encode_base64(content)}
        ) or ""

    async def delete(self, path: str) -> str:
        """Delete a file or a directory tree."""
        return await self._post("/delete", MutationResponse, path, json={"path": path}) or ""

    async def create(self, path: str, is_directory: bool = False) -> str:
        """Create an empty file or a directory."""
        return await self._post(
            "/create", MutationResponse, path, json={"path": path, "is_directory": is_directory}
        ) or ""

    async def move(self, source: str, destination: str) -> str:
        """Move or rename a file or directory."""
        return await self._post(
            "/move", MutationResponse, source, json={"source": source, "destination": destination}
        ) or ""

    async def copy(self, source: str, destination: str) -> str:
        """Copy a file or directory tree."""
        return await self._post(
            "/copy", MutationResponse, source, json={"source": source, "destination": destination}
        ) or ""
