"""Response models for the file agent API.

Every agent endpoint answers with the same envelope::

    {"success": bool, "data": <payload or null>, "error": <message or null>}

``AgentResponse`` types that envelope generically; the per-endpoint aliases
below fix the payload type so each endpoint has one explicit result type with
a success variant (``data``) and an error variant (``error``).
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from agent_client.exceptions import AgentOperationError, AuthenticationError

DataT = TypeVar("DataT")

# Fragments the agent uses when it rejects a token
AUTH_ERROR_MARKERS = ("認証エラー", "invalid token", "authentication")

__all__ = [
    "AgentResponse",
    "BinaryReadResponse",
    "DirectoryEntry",
    "HealthResponse",
    "ListResponse",
    "Listing",
    "MutationResponse",
    "ReadResponse",
    "SearchResponse",
]


class DirectoryEntry(BaseModel):
    """A single file or directory as reported by ``list`` and ``search``.

    The agent contract carries no modification time, so none is modelled.

    Attributes:
        name: Final path component.
        path: Absolute path of the entry.
        is_file: Whether the entry is a regular file.
        size: Size in bytes; only kept for files.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    is_file: bool
    size: int | None = Field(None, ge=0, description="Size in bytes (files only)")

    @model_validator(mode="before")
    @classmethod
    def drop_directory_size(cls, data: Any) -> Any:
        """Directories never carry a size, whatever the agent sent."""
        if isinstance(data, dict) and data.get("is_file") is False:
            data = {**data, "size": None}
        return data

    @property
    def is_directory(self) -> bool:
        """Whether the entry is a directory."""
        return not self.is_file

    @property
    def extension(self) -> str:
        """Lowercase extension without the dot, or an empty string."""
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[-1].lower()


# Ordered entries as returned by one list or search call
Listing = list[DirectoryEntry]


class AgentResponse(BaseModel, Generic[DataT]):
    """The uniform ``{success, data, error}`` envelope.

    Attributes:
        success: Whether the operation succeeded.
        data: Operation payload on success.
        error: Error text on failure.
    """

    success: bool
    data: DataT | None = None
    error: str | None = None

    def unwrap(self, operation: str | None = None, path: str | None = None) -> DataT:
        """Return the payload, raising if the agent reported a failure.

        Args:
            operation: Operation name for the error message.
            path: Targeted path for the error message.

        Returns:
            The payload carried in ``data``.

        Raises:
            AuthenticationError: If the agent rejected the token.
            AgentOperationError: For any other ``success: false`` response.
        """
        if self.success:
            return self.data  # type: ignore[return-value]
        message = self.error or "unknown agent error"
        lowered = message.lower()
        if any(marker.lower() in lowered for marker in AUTH_ERROR_MARKERS):
            raise AuthenticationError(message, operation=operation, path=path)
        raise AgentOperationError(message, operation=operation, path=path)


class ListResponse(AgentResponse[list[DirectoryEntry]]):
    """Result of ``GET /list``."""


class SearchResponse(AgentResponse[list[DirectoryEntry]]):
    """Result of ``POST /search``."""


class ReadResponse(AgentResponse[str]):
    """Result of ``POST /read``; ``data`` is the file text."""


class BinaryReadResponse(AgentResponse[str]):
    """Result of ``POST /read_binary``; ``data`` is base64 text."""


class MutationResponse(AgentResponse[str]):
    """Result of write/delete/create/move/copy; ``data`` is a message."""


class HealthResponse(AgentResponse[str]):
    """Result of ``GET /health``; ``data`` is a banner string."""
