"""Request bookkeeping for the single-loop engine.

``RequestGuard`` hands out tickets so that a slow response can tell whether
it is still the newest request for its target before touching state.
``ForegroundTracker`` counts in-flight user-initiated calls so background
work (prefetch) only runs while the foreground is idle.
"""

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass


@dataclass(frozen=True)
class Ticket:
    """Identifies one request issued through a RequestGuard.

    Attributes:
        generation: Monotonic sequence number within the guard.
        target: What the request was for (a path, a query, ...).
    """

    generation: int
    target: str


class RequestGuard:
    """Issues tickets and answers whether a ticket is still current.

    Example:
        ticket = guard.issue(path)
        listing = await client.files.list(path)
        if guard.is_current(ticket):
            apply(listing)
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._generation = 0

    def issue(self, target: str) -> Ticket:
        """Start a new request, superseding every earlier ticket."""
        self._generation += 1
        return Ticket(self._generation, target)

    def is_current(self, ticket: Ticket) -> bool:
        """Whether no newer ticket has been issued since."""
        return ticket.generation == self._generation

    def invalidate(self) -> None:
        """Supersede every outstanding ticket without issuing a new one."""
        self._generation += 1


class ForegroundTracker:
    """Counts in-flight foreground calls and exposes an idle event."""

    def __init__(self) -> None:
        self._active = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def active(self) -> int:
        """Number of foreground calls in flight."""
        return self._active

    @property
    def is_idle(self) -> bool:
        return self._active == 0

    @contextmanager
    def busy(self) -> Iterator[None]:
        """Mark a foreground call as in flight for the duration of the block."""
        self._active += 1
        self._idle.clear()
        try:
            yield
        finally:
            self._active -= 1
            if self._active == 0:
                self._idle.set()

    async def wait_idle(self) -> None:
        """Block until no foreground call is in flight."""
        await self._idle.wait()
