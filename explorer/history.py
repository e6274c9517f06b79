"""Back/forward navigation history.

NavigationHistory is a bounded, linear history with a cursor. Pushing a new
path discards everything after the cursor (a new timeline starts), and the
oldest entry is dropped once the cap is exceeded.
"""

from pydantic import BaseModel, Field, field_validator, model_validator


class NavigationHistory(BaseModel):
    """Ordered visited paths plus the current index.

    The index always satisfies ``-1 <= index < len(entries)``; ``-1`` means
    the history is empty.

    Attributes:
        entries: Visited paths, oldest first.
        index: Position of the current path in ``entries``.
        max_size: Maximum number of entries kept.

    Example:
        history = NavigationHistory()
        history.push("C:\\\\")
        history.push("C:\\\\Users")
        history.peek_back()  # "C:\\\\"
    """

    entries: list[str] = Field(default_factory=list)
    index: int = -1
    max_size: int = Field(default=50, description="Maximum number of entries to keep")

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: int) -> int:
        """Validate that max_size is positive.

        Raises:
            ValueError: If max_size is not positive.
        """
        if v <= 0:
            raise ValueError("max_size must be positive")
        return v

    @model_validator(mode="after")
    def validate_index(self) -> "NavigationHistory":
        """Trim to max_size and keep the index within bounds."""
        overflow = len(self.entries) - self.max_size
        if overflow > 0:
            self.entries = self.entries[overflow:]
            self.index -= overflow
        if not -1 <= self.index < len(self.entries):
            raise ValueError(
                f"index {self.index} out of range for {len(self.entries)} entries"
            )
        if self.entries and self.index == -1:
            raise ValueError("index must point at an entry when history is not empty")
        return self

    @property
    def current(self) -> str | None:
        """The path at the cursor, or None when empty."""
        if self.index < 0:
            return None
        return self.entries[self.index]

    @property
    def can_go_back(self) -> bool:
        """Whether an older entry exists."""
        return self.index > 0

    @property
    def can_go_forward(self) -> bool:
        """Whether a newer entry exists."""
        return self.index < len(self.entries) - 1

    def push(self, path: str) -> None:
        """Record a visit to path.

        Entries after the cursor are discarded first. Visiting the path that
        is already current is a no-op. If the cap is exceeded the oldest entry
        is dropped and the index shifts with it.

        Args:
            path: The normalized path just visited.
        """
        if self.current == path:
            return
        del self.entries[self.index + 1 :]
        self.entries.append(path)
        self.index = len(self.entries) - 1

        if len(self.entries) > self.max_size:
            self.entries.pop(0)
            self.index -= 1

    def peek_back(self) -> str | None:
        """The path one step back, without moving."""
        return self.entries[self.index - 1] if self.can_go_back else None

    def peek_forward(self) -> str | None:
        """The path one step forward, without moving."""
        return self.entries[self.index + 1] if self.can_go_forward else None

    def move_to(self, index: int) -> None:
        """Move the cursor to an existing entry.

        Raises:
            IndexError: If index is outside the history.
        """
        if not 0 <= index < len(self.entries):
            raise IndexError(f"history index {index} out of range")
        self.index = index

    def clear(self) -> None:
        """Forget every entry."""
        self.entries.clear()
        self.index = -1
