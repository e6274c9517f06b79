"""Best-effort background warming of the directory cache.

After each navigation the first few child directories are queued. A worker
task drains the queue one path at a time, and only while no foreground call
is in flight. Prefetch failures are logged at debug level and dropped: they
never reach the status line and never delay a foreground request.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Iterable

from agent_client.exceptions import FileAgentClientError
from agent_client.models import DirectoryEntry, Listing
from explorer.cache import DirectoryCache
from explorer.paths import normalize_path
from explorer.tasks import ForegroundTracker

logger = logging.getLogger(__name__)

Loader = Callable[[str], Awaitable[Listing]]


class PrefetchQueue:
    """Bounded FIFO of directories to load ahead of time.

    Attributes:
        max_size: Maximum number of queued paths; further candidates are
            dropped while the queue is full.
    """

    def __init__(
        self,
        cache: DirectoryCache,
        loader: Loader,
        tracker: ForegroundTracker | None = None,
        max_size: int = 50,
    ) -> None:
        """Initialize the queue.

        Args:
            cache: The cache to warm.
            loader: Coroutine function fetching one directory listing.
            tracker: Foreground tracker; prefetch waits while it is busy.
            max_size: Maximum number of queued paths.
        """
        self.max_size = max_size
        self._cache = cache
        self._loader = loader
        self._tracker = tracker or ForegroundTracker()
        self._queue: deque[str] = deque()
        self._wakeup = asyncio.Event()
        self._worker: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def pending(self) -> list[str]:
        """Queued paths in drain order."""
        return list(self._queue)

    def enqueue(self, path: str) -> bool:
        """Queue a path unless it is cached, already queued, or the queue is full.

        Returns:
            Whether the path was queued.
        """
        path = normalize_path(path)
        if not path or path in self._cache or path in self._queue:
            return False
        if len(self._queue) >= self.max_size:
            logger.debug(f"Prefetch queue full, dropping {path}")
            return False
        self._queue.append(path)
        self._wakeup.set()
        return True

    def enqueue_children(self, entries: Iterable[DirectoryEntry], limit: int = 5) -> list[str]:
        """Queue the first ``limit`` child directories of a listing.

        Directories already in the cache are skipped but still count toward
        the limit.

        Returns:
            The paths actually queued.
        """
        folders = [entry for entry in entries if entry.is_directory][:limit]
        return [entry.path for entry in folders if self.enqueue(entry.path)]

    def clear(self) -> None:
        """Drop every queued path."""
        self._queue.clear()
        self._wakeup.clear()

    async def drain_one(self) -> bool:
        """Fetch the next queued directory into the cache.

        Returns:
            True if a listing was fetched and stored.
        """
        while self._queue:
            path = self._queue.popleft()
            if path in self._cache:
                continue
            try:
                listing = await self._loader(path)
            except FileAgentClientError as e:
                logger.debug(f"Prefetch of {path} failed, ignoring: {e}")
                return False
            self._cache.put(path, listing)
            logger.debug(f"Prefetched {path} ({len(listing)} entries)")
            return True
        return False

    async def run(self) -> None:
        """Drain the queue forever, one path at a time, whenever idle."""
        while True:
            if not self._queue:
                self._wakeup.clear()
                await self._wakeup.wait()
            await self._tracker.wait_idle()
            await self.drain_one()

    def start(self) -> None:
        """Start the background worker on the running loop."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self.run())

    async def stop(self) -> None:
        """Cancel the background worker and wait for it to finish."""
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
