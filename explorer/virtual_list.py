"""Virtual scrolling for large ordered item sets.

Only the rows intersecting the viewport (plus a fixed buffer) are handed
to the item view; two spacers keep the total scroll height equal to what
rendering every row would produce. The renderer never reorders its input.
"""

import logging
import math
from collections.abc import Callable, Sequence

from pydantic import BaseModel, Field

from agent_client.models import DirectoryEntry
from explorer.timing import Throttle
from explorer.views import ItemView, ListView, RenderedItems

logger = logging.getLogger(__name__)

ITEM_HEIGHT = 36
BUFFER_ITEMS = 10
INITIAL_VISIBLE_ITEMS = 50
VIRTUAL_THRESHOLD = 1000
SCROLL_THROTTLE = 0.016


class VirtualFrame(BaseModel):
    """One render pass of the item list.

    Attributes:
        start: Index of the first rendered item.
        end: Index one past the last rendered item.
        total: Length of the full item set.
        leading_spacer: Height reserved above the rendered rows.
        trailing_spacer: Height reserved below the rendered rows.
        virtual: Whether the frame is a window rather than every item.
        content: The rendered rows for ``[start, end)``.
    """

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    total: int = Field(ge=0)
    leading_spacer: int = 0
    trailing_spacer: int = 0
    virtual: bool = False
    content: RenderedItems

    @property
    def rendered_count(self) -> int:
        return self.end - self.start


class VirtualListRenderer:
    """Computes and renders the visible window of an item set.

    Attributes:
        item_height: Fixed row height.
        buffer_items: Extra rows rendered past the viewport.
        threshold: Item count from which rendering is windowed.
        visible_count: Rows that fit in the viewport, set by ``resize``.
    """

    def __init__(
        self,
        view: ItemView | None = None,
        on_frame: Callable[[VirtualFrame], None] | None = None,
        item_height: int = ITEM_HEIGHT,
        buffer_items: int = BUFFER_ITEMS,
        threshold: int = VIRTUAL_THRESHOLD,
        initial_visible: int = INITIAL_VISIBLE_ITEMS,
        scroll_throttle: float = SCROLL_THROTTLE,
    ) -> None:
        """Initialize the renderer.

        Args:
            view: Item view used to render rows; defaults to the list view.
            on_frame: Receives every frame produced by scrolling or item
                changes.
            item_height: Fixed row height.
            buffer_items: Extra rows rendered past the viewport.
            threshold: Item count from which rendering is windowed.
            initial_visible: Visible rows assumed before the first resize.
            scroll_throttle: Minimum seconds between scroll recomputes.
        """
        if item_height <= 0:
            raise ValueError("item_height must be positive")
        self.view = view or ListView()
        self.item_height = item_height
        self.buffer_items = buffer_items
        self.threshold = threshold
        self.visible_count = initial_visible
        self.scroll_offset = 0.0
        self._items: Sequence[DirectoryEntry] = ()
        self._on_frame = on_frame
        self._scroll = Throttle(self._apply_scroll, scroll_throttle)

    @property
    def items(self) -> Sequence[DirectoryEntry]:
        """The item set currently being displayed, in display order."""
        return self._items

    def resize(self, viewport_height: float) -> int:
        """Recompute how many rows fit in the viewport.

        Returns:
            The new visible row count.
        """
        self.visible_count = max(0, math.ceil(viewport_height / self.item_height))
        logger.debug(f"Viewport resized to {viewport_height}, {self.visible_count} visible rows")
        return self.visible_count

    def is_virtual(self, total: int) -> bool:
        """Whether an item set of this size is rendered as a window."""
        return self.view.supports_virtual_scroll and total >= self.threshold

    def window(self, total: int, scroll_offset: float) -> tuple[int, int]:
        """Compute ``[start, end)`` for a scroll offset.

        Args:
            total: Length of the item set.
            scroll_offset: Distance scrolled from the top.

        Returns:
            The half-open index range to render.
        """
        if not self.is_virtual(total):
            return 0, total
        start = min(math.floor(max(scroll_offset, 0) / self.item_height), total)
        end = min(start + self.visible_count + self.buffer_items, total)
        return start, end

    def render(self, items: Sequence[DirectoryEntry], scroll_offset: float = 0) -> VirtualFrame:
        """Render the window of items visible at scroll_offset.

        Args:
            items: The full item set, already in display order.
            scroll_offset: Distance scrolled from the top.

        Returns:
            The frame with rows and spacer heights.
        """
        total = len(items)
        start, end = self.window(total, scroll_offset)
        virtual = self.is_virtual(total)
        return VirtualFrame(
            start=start,
            end=end,
            total=total,
            leading_spacer=start * self.item_height if virtual else 0,
            trailing_spacer=(total - end) * self.item_height if virtual else 0,
            virtual=virtual,
            content=self.view.render(items[start:end], start_index=start),
        )

    def set_view(self, view: ItemView) -> VirtualFrame:
        """Switch item view and re-render from the top."""
        self.view = view
        return self.set_items(self._items)

    def set_items(self, items: Sequence[DirectoryEntry]) -> VirtualFrame:
        """Replace the item set and render it from the top."""
        self._scroll.cancel()
        self._items = items
        self.scroll_offset = 0.0
        return self._publish()

    def on_scroll(self, scroll_offset: float) -> bool:
        """Handle a scroll event, recomputing at most once per throttle interval.

        Returns:
            True if the window was recomputed immediately.
        """
        self.scroll_offset = scroll_offset
        if not self.is_virtual(len(self._items)):
            return False
        return self._scroll(scroll_offset)

    def redraw(self) -> VirtualFrame:
        """Re-render the current items at the current scroll offset."""
        return self._publish()

    def _apply_scroll(self, scroll_offset: float) -> None:
        self.scroll_offset = scroll_offset
        self._publish()

    def _publish(self) -> VirtualFrame:
        frame = self.render(self._items, self.scroll_offset)
        if self._on_frame is not None:
            self._on_frame(frame)
        return frame
