"""In-session clipboard for copy/cut/paste of agent paths."""

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, Field


class ClipboardOperation(str, Enum):
    """What a paste does with the clipboard items."""

    NONE = "none"
    COPY = "copy"
    CUT = "cut"


class Clipboard(BaseModel):
    """Clipboard state: an ordered set of paths and the pending operation.

    Attributes:
        items: Paths on the clipboard, without duplicates, in the order added.
        operation: Whether a paste copies or moves the items.
    """

    items: list[str] = Field(default_factory=list)
    operation: ClipboardOperation = ClipboardOperation.NONE

    @property
    def is_empty(self) -> bool:
        return not self.items or self.operation is ClipboardOperation.NONE

    def copy(self, paths: Iterable[str]) -> int:
        """Put paths on the clipboard for copying.

        Returns:
            Number of items now on the clipboard.
        """
        return self._set(paths, ClipboardOperation.COPY)

    def cut(self, paths: Iterable[str]) -> int:
        """Put paths on the clipboard for moving.

        Returns:
            Number of items now on the clipboard.
        """
        return self._set(paths, ClipboardOperation.CUT)

    def retain(self, paths: Iterable[str]) -> None:
        """Keep only the given items, clearing the clipboard if none remain."""
        keep = set(paths)
        self.items = [path for path in self.items if path in keep]
        if not self.items:
            self.clear()

    def clear(self) -> None:
        self.items = []
        self.operation = ClipboardOperation.NONE

    def _set(self, paths: Iterable[str], operation: ClipboardOperation) -> int:
        self.items = list(dict.fromkeys(paths))
        self.operation = operation if self.items else ClipboardOperation.NONE
        return len(self.items)
