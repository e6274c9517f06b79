"""Navigation controller: current directory, history and listing loads."""

import logging
from collections.abc import Callable

from pydantic import BaseModel

from agent_client._files import AsyncFilesClient
from agent_client.exceptions import FileAgentClientError
from agent_client.models import DirectoryEntry, Listing
from explorer.cache import DirectoryCache
from explorer.history import NavigationHistory
from explorer.paths import normalize_path, parent_path
from explorer.prefetch import PrefetchQueue
from explorer.status import StatusLine
from explorer.tasks import ForegroundTracker, RequestGuard
from explorer.views import display_order

logger = logging.getLogger(__name__)


class NavState(BaseModel):
    """What the navigation buttons should offer for the current location."""

    current_path: str | None = None
    can_go_back: bool = False
    can_go_forward: bool = False
    can_go_up: bool = False


ListingCallback = Callable[[str, list[DirectoryEntry]], None]
NavStateCallback = Callable[[NavState], None]


class NavigationController:
    """Owns the current path and history and loads listings through the cache.

    A listing is fetched from the agent only on a cache miss. Responses that
    arrive after a newer navigation or search has started are not applied,
    though a successful one still lands in the cache under its own path.

    Attributes:
        current_path: The directory on display, or None before the first load.
        entries: The current listing in display order.
        history: Back/forward history.
    """

    def __init__(
        self,
        files: AsyncFilesClient,
        cache: DirectoryCache,
        history: NavigationHistory | None = None,
        prefetch: PrefetchQueue | None = None,
        guard: RequestGuard | None = None,
        tracker: ForegroundTracker | None = None,
        status: StatusLine | None = None,
        is_online: Callable[[], bool] = lambda: True,
        on_listing: ListingCallback | None = None,
        on_state: NavStateCallback | None = None,
        home_path: str = "C:\\",
        prefetch_children: int = 5,
    ) -> None:
        """Initialize the controller.

        Args:
            files: Async file endpoints of the agent.
            cache: Directory cache consulted before every fetch.
            history: History to record visits in.
            prefetch: Queue receiving child directories after each load.
            guard: Request guard shared with the search engine.
            tracker: Marks listing fetches as foreground work.
            status: Status line for loading and error messages.
            is_online: Reports whether the agent is currently reachable.
            on_listing: Receives ``(path, entries)`` after each navigation.
            on_state: Receives the navigation button state after each change.
            home_path: Target of ``go_home``.
            prefetch_children: Child directories queued per navigation.
        """
        self.cache = cache
        self.history = history or NavigationHistory()
        self.prefetch = prefetch
        self.guard = guard or RequestGuard("view")
        self.tracker = tracker or ForegroundTracker()
        self.status = status or StatusLine()
        self.home_path = normalize_path(home_path)
        self.prefetch_children = prefetch_children
        self.current_path: str | None = None
        self.entries: list[DirectoryEntry] = []
        self._files = files
        self._is_online = is_online
        self._on_listing = on_listing
        self._on_state = on_state

    @property
    def state(self) -> NavState:
        """Navigation button state for the current location."""
        return NavState(
            current_path=self.current_path,
            can_go_back=self.history.can_go_back,
            can_go_forward=self.history.can_go_forward,
            can_go_up=parent_path(self.current_path) is not None,
        )

    async def navigate(self, path: str, add_to_history: bool = True) -> bool:
        """Open a directory.

        Args:
            path: Directory to open; normalized before use.
            add_to_history: Whether to record the visit in history.

        Returns:
            True if the directory was opened and rendered.
        """
        return await self._navigate(path, add_to_history=add_to_history)

    async def go_back(self) -> bool:
        """Open the previous history entry; no-op at the oldest entry."""
        if not self.history.can_go_back:
            return False
        target = self.history.index - 1
        return await self._navigate(self.history.entries[target], history_index=target)

    async def go_forward(self) -> bool:
        """Open the next history entry; no-op at the newest entry."""
        if not self.history.can_go_forward:
            return False
        target = self.history.index + 1
        return await self._navigate(self.history.entries[target], history_index=target)

    async def go_up(self) -> bool:
        """Open the parent directory; no-op at a drive root."""
        parent = parent_path(self.current_path)
        if parent is None:
            return False
        return await self.navigate(parent)

    async def go_home(self) -> bool:
        """Open the home directory."""
        return await self.navigate(self.home_path)

    async def refresh(self) -> bool:
        """Drop every cached listing and reload the current directory."""
        self.cache.invalidate_all()
        logger.info("Directory cache cleared")
        if self.current_path is None:
            return False
        return await self.navigate(self.current_path, add_to_history=False)

    async def load(self, path: str) -> Listing:
        """Return the listing for path, from the cache or the agent.

        Raises:
            FileAgentClientError: If the agent call fails.
        """
        path = normalize_path(path)
        listing = self.cache.get(path)
        if listing is not None:
            logger.debug(f"Directory cache hit for {path}")
            return listing
        with self.tracker.busy():
            listing = await self._files.list(path)
        self.cache.put(path, listing)
        return listing

    def redisplay(self) -> None:
        """Emit the current listing again (e.g. after leaving search mode)."""
        if self.current_path is not None and self._on_listing is not None:
            self._on_listing(self.current_path, self.entries)

    async def _navigate(
        self,
        path: str,
        add_to_history: bool = False,
        history_index: int | None = None,
    ) -> bool:
        path = normalize_path(path)
        if not path:
            return False
        if not self._is_online():
            self.status.error("Not connected to the file agent")
            return False

        ticket = self.guard.issue(path)
        if path not in self.cache:
            self.status.loading(f"Loading {path}...")
        try:
            listing = await self.load(path)
        except FileAgentClientError as e:
            if not self.guard.is_current(ticket):
                logger.debug(f"Ignoring failure of superseded load of {path}: {e}")
                return False
            logger.info(f"Failed to open {path}: {e}")
            self.status.error(f"Failed to open {path}: {e}")
            return False

        if not self.guard.is_current(ticket):
            logger.debug(f"Discarding stale listing for {path}")
            return False

        self.current_path = path
        self.entries = display_order(listing)
        if history_index is not None:
            self.history.move_to(history_index)
        elif add_to_history:
            self.history.push(path)

        logger.info(f"Opened {path} ({len(listing)} items)")
        self.status.success(f"{len(listing)} items")
        if self._on_listing is not None:
            self._on_listing(path, self.entries)
        if self._on_state is not None:
            self._on_state(self.state)
        if self.prefetch is not None:
            self.prefetch.enqueue_children(listing, limit=self.prefetch_children)
        return True
