"""File operations issued from the explorer: paste, delete, rename, create.

Batch operations run item by item in order. Every item is attempted even
when an earlier one fails; failures are collected in a ``BatchResult``
rather than raised, and only the directories actually touched by a
successful item are dropped from the directory cache.
"""

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from agent_client._files import AsyncFilesClient
from agent_client.exceptions import FileAgentClientError
from explorer.cache import DirectoryCache
from explorer.clipboard import Clipboard, ClipboardOperation
from explorer.paths import SEPARATOR, base_name, join_path, normalize_path, parent_path
from explorer.tasks import ForegroundTracker

logger = logging.getLogger(__name__)


class BatchResult(BaseModel):
    """Aggregate outcome of a multi-item operation.

    Attributes:
        operation: Verb describing the operation ("copy", "move", "delete").
        attempted: Every item path, in the order attempted.
        failed: Error message per failed item path.
    """

    operation: str
    attempted: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)

    @property
    def succeeded(self) -> list[str]:
        return [path for path in self.attempted if path not in self.failed]

    @property
    def ok(self) -> bool:
        """True when every item succeeded."""
        return not self.failed

    @property
    def failed_names(self) -> list[str]:
        return [base_name(path) for path in self.failed]

    def summary(self) -> str:
        """One-line report, e.g. ``"copy: 2 of 3 items succeeded; failed: a.txt"``."""
        text = f"{self.operation}: {len(self.succeeded)} of {len(self.attempted)} items succeeded"
        if self.failed:
            text += f"; failed: {', '.join(self.failed_names)}"
        return text


class FileOperations:
    """Runs mutating agent calls and keeps the directory cache consistent."""

    def __init__(
        self,
        files: AsyncFilesClient,
        cache: DirectoryCache,
        tracker: ForegroundTracker | None = None,
    ) -> None:
        self.cache = cache
        self.tracker = tracker or ForegroundTracker()
        self._files = files

    async def paste(self, clipboard: Clipboard, destination: str) -> BatchResult:
        """Copy or move every clipboard item into destination.

        After a cut, items that were moved leave the clipboard and failed
        ones stay on it so the paste can be retried.

        Args:
            clipboard: Items and the pending operation.
            destination: Target directory.

        Returns:
            The aggregate result; empty if the clipboard was empty.
        """
        move = clipboard.operation is ClipboardOperation.CUT
        result = BatchResult(operation="move" if move else "copy")
        if clipboard.is_empty:
            return result
        destination = normalize_path(destination)

        for source in clipboard.items:
            target = join_path(destination, base_name(source))
            result.attempted.append(source)
            try:
                with self.tracker.busy():
                    if move:
                        await self._files.move(source, target)
                    else:
                        await self._files.copy(source, target)
            except FileAgentClientError as e:
                logger.info(f"Failed to {result.operation} {source} to {target}: {e}")
                result.failed[source] = str(e)

        touched = [destination] if result.succeeded else []
        if move:
            touched += [parent_path(source) for source in result.succeeded]
            self._invalidate_trees(result.succeeded)
            clipboard.retain(result.failed)
        self._invalidate(touched)
        return result

    async def delete(self, paths: Iterable[str]) -> BatchResult:
        """Delete every path, continuing past failures."""
        result = BatchResult(operation="delete")
        for path in paths:
            result.attempted.append(path)
            try:
                with self.tracker.busy():
                    await self._files.delete(path)
            except FileAgentClientError as e:
                logger.info(f"Failed to delete {path}: {e}")
                result.failed[path] = str(e)

        self._invalidate(parent_path(path) for path in result.succeeded)
        self._invalidate_trees(result.succeeded)
        return result

    async def rename(self, path: str, new_name: str) -> str:
        """Rename an item in place.

        Returns:
            The new path.

        Raises:
            ValueError: If new_name is empty or contains a separator.
            FileAgentClientError: If the agent rejects the move.
        """
        new_name = validate_name(new_name)
        directory = parent_path(normalize_path(path)) or path
        target = join_path(directory, new_name)
        with self.tracker.busy():
            await self._files.move(path, target)
        self._invalidate([directory])
        self._invalidate_trees([path])
        return target

    async def create(self, directory: str, name: str, is_directory: bool = False) -> str:
        """Create an empty file or a folder inside directory.

        Returns:
            The path created.

        Raises:
            ValueError: If name is empty or contains a separator.
            FileAgentClientError: If the agent rejects the creation.
        """
        name = validate_name(name)
        directory = normalize_path(directory)
        path = join_path(directory, name)
        with self.tracker.busy():
            await self._files.create(path, is_directory=is_directory)
        self._invalidate([directory])
        return path

    def _invalidate(self, paths: Iterable[str | None]) -> None:
        for path in dict.fromkeys(p for p in paths if p):
            if self.cache.invalidate(path):
                logger.debug(f"Invalidated cached listing of {path}")

    def _invalidate_trees(self, paths: Iterable[str]) -> None:
        # Listings at and below a path that no longer exists
        for path in paths:
            for key in self.cache.invalidate_under(path):
                logger.debug(f"Invalidated cached listing of {key}")


def validate_name(name: str) -> str:
    """Check a user-supplied item name.

    Raises:
        ValueError: If the name is blank or contains a path separator.
    """
    name = name.strip()
    if not name:
        raise ValueError("Name must not be empty")
    if SEPARATOR in name or "/" in name:
        raise ValueError(f"Name must not contain path separators: {name}")
    return name
