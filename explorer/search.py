"""Search engine: parallel pattern queries, merging, ranking and caching.

A query is sent to the agent as up to two wildcard patterns at once. The
answers are merged by path, ranked by how well each name matches, and cached
per ``(directory, query)``. A pattern whose request fails simply contributes
nothing; if every pattern fails the result is an empty list.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable

from agent_client._files import AsyncFilesClient
from agent_client.exceptions import FileAgentClientError
from agent_client.models import DirectoryEntry
from explorer.cache import SearchCache
from explorer.navigation import NavigationController
from explorer.paths import normalize_path
from explorer.status import StatusLine
from explorer.tasks import Ticket
from explorer.timing import Debouncer

logger = logging.getLogger(__name__)

EXACT_SCORE = 1000
PREFIX_SCORE = 800
WORD_BOUNDARY_SCORE = 600
SUBSTRING_SCORE = 400
WORD_SEPARATORS = ("_", "-", " ")

ResultsCallback = Callable[[str, list[DirectoryEntry]], None]


def calculate_relevance(name: str, query: str) -> int:
    """Score how well a file name matches a query.

    Matching is case-insensitive. Exact matches score 1000, prefixes 800,
    matches right after ``_``, ``-`` or a space 600, any other substring
    400, and non-matches 0.

    Examples:
        >>> calculate_relevance("log.txt", "log")
        800
        >>> calculate_relevance("my-log-file.txt", "LOG")
        600
    """
    name = name.lower()
    query = query.lower()
    if name == query:
        return EXACT_SCORE
    if name.startswith(query):
        return PREFIX_SCORE
    if any(f"{sep}{query}" in name for sep in WORD_SEPARATORS):
        return WORD_BOUNDARY_SCORE
    if query in name:
        return SUBSTRING_SCORE
    return 0


def build_patterns(query: str) -> list[str]:
    """Wildcard patterns sent for a query.

    The extension-style pattern is only added for queries longer than two
    characters.
    """
    patterns = [f"*{query}*"]
    if len(query) > 2:
        patterns.append(f"*.{query}*")
    return patterns


def merge_results(batches: Iterable[Iterable[DirectoryEntry]]) -> list[DirectoryEntry]:
    """Deduplicate entries by path, keeping each path's first-seen position."""
    merged: dict[str, DirectoryEntry] = {}
    for batch in batches:
        for entry in batch:
            merged[entry.path] = entry
    return list(merged.values())


def rank_results(entries: Iterable[DirectoryEntry], query: str) -> list[DirectoryEntry]:
    """Sort entries by descending relevance; ties keep their order."""
    return sorted(entries, key=lambda entry: -calculate_relevance(entry.name, query))


class SearchEngine:
    """Runs searches in the current directory and publishes ranked results.

    The engine shares its request guard with the navigation controller, so a
    search result is only displayed if no navigation or newer search started
    while it was in flight.

    Attributes:
        active_query: The query being displayed, or None outside search mode.
    """

    def __init__(
        self,
        files: AsyncFilesClient,
        navigation: NavigationController,
        cache: SearchCache | None = None,
        status: StatusLine | None = None,
        on_results: ResultsCallback | None = None,
        default_root: str = "C:\\",
        debounce: float = 0.2,
    ) -> None:
        """Initialize the engine.

        Args:
            files: Async file endpoints of the agent.
            navigation: Controller providing the current directory.
            cache: Search result cache.
            status: Status line for progress and result counts.
            on_results: Receives ``(query, ranked entries)`` for each search
                displayed.
            default_root: Directory searched when nothing is open.
            debounce: Quiet period before ``search_as_you_type`` fires.
        """
        self.navigation = navigation
        self.cache = cache or SearchCache()
        self.status = status or navigation.status
        self.default_root = normalize_path(default_root)
        self.active_query: str | None = None
        self._search_ticket: Ticket | None = None
        self._files = files
        self._on_results = on_results
        self._debouncer: Debouncer[str] = Debouncer(self.search, debounce)

    @property
    def in_search_mode(self) -> bool:
        return self.active_query is not None

    def exit_search_mode(self) -> None:
        """Forget the displayed query without touching the caches."""
        self._debouncer.cancel()
        self.active_query = None

    async def search(self, query: str) -> list[DirectoryEntry] | None:
        """Search the current directory.

        An empty or blank query leaves search mode, clears the search cache
        and shows the current directory again.

        Args:
            query: Text typed by the user.

        Returns:
            The ranked results, or None when the query was blank.
        """
        guard = self.navigation.guard
        if not query.strip():
            self.active_query = None
            self.cache.invalidate_all()
            guard.invalidate()
            current = self.navigation.current_path
            if current is not None:
                await self.navigation.navigate(current, add_to_history=False)
            return None

        self.active_query = query
        scope = self.navigation.current_path
        key = SearchCache.make_key(scope, query)
        ticket = guard.issue(f"search:{key[0]}:{key[1]}")
        self._search_ticket = ticket

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Search cache hit for {key}")
            self._publish(query, cached, "cached")
            return cached

        directory = scope or self.default_root
        self.status.loading(f'Searching for "{query}"...')
        started = time.perf_counter()
        results = await self._query(directory, query)
        self.cache.put(key, results)

        if not guard.is_current(ticket):
            logger.debug(f'Discarding stale results for "{query}" in {directory}')
            if self._search_ticket is ticket:
                self.active_query = None
            return results
        elapsed = (time.perf_counter() - started) * 1000
        logger.info(f'Search "{query}" in {directory}: {len(results)} results')
        self._publish(query, results, f"{elapsed:.1f}ms")
        return results

    def search_as_you_type(self, query: str) -> asyncio.Task:
        """Run ``search`` once typing has paused for the debounce delay."""
        return self._debouncer(query)

    async def _query(self, directory: str, query: str) -> list[DirectoryEntry]:
        patterns = build_patterns(query)
        with self.navigation.tracker.busy():
            outcomes = await asyncio.gather(
                *(self._files.search(directory, pattern) for pattern in patterns),
                return_exceptions=True,
            )

        batches = []
        for pattern, outcome in zip(patterns, outcomes):
            if isinstance(outcome, FileAgentClientError):
                logger.debug(f"Search pattern {pattern} in {directory} failed: {outcome}")
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            batches.append(outcome)
        return rank_results(merge_results(batches), query)

    def _publish(self, query: str, results: list[DirectoryEntry], detail: str) -> None:
        self.status.success(f"{len(results)} found ({detail})")
        if self._on_results is not None:
            self._on_results(query, results)
