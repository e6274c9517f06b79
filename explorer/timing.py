"""Rate-limiting helpers bound to the running event loop."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Throttle(Generic[T]):
    """Runs a callback at most once per interval, keeping the last value.

    The first call in a quiet period runs immediately. Calls arriving within
    the interval are coalesced: only the most recent argument is kept and is
    delivered once the interval has elapsed, so the final state is never
    lost.

    Attributes:
        interval: Minimum seconds between two callback runs.
    """

    def __init__(
        self,
        callback: Callable[[T], Any],
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = interval
        self._callback = callback
        self._clock = clock
        self._last_run: float | None = None
        self._pending: tuple[T] | None = None
        self._timer: asyncio.TimerHandle | None = None

    def __call__(self, value: T) -> bool:
        """Submit a value.

        Returns:
            True if the callback ran immediately, False if it was deferred.
        """
        now = self._clock()
        if self._last_run is None or now - self._last_run >= self.interval:
            self._cancel_timer()
            self._pending = None
            self._run(value, now)
            return True

        self._pending = (value,)
        if self._timer is None:
            delay = self.interval - (now - self._last_run)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return False
            self._timer = loop.call_later(delay, self.flush)
        return False

    def flush(self) -> None:
        """Deliver the pending value now, if any."""
        self._timer = None
        if self._pending is not None:
            (value,) = self._pending
            self._pending = None
            self._run(value, self._clock())

    def cancel(self) -> None:
        """Drop any pending value."""
        self._cancel_timer()
        self._pending = None

    def _run(self, value: T, now: float) -> None:
        self._last_run = now
        self._callback(value)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class Debouncer(Generic[T]):
    """Delays a coroutine call until input has been quiet for ``delay``.

    Each submission cancels the previously scheduled run.
    """

    def __init__(self, func: Callable[[T], Awaitable[Any]], delay: float) -> None:
        self.delay = delay
        self._func = func
        self._task: asyncio.Task | None = None

    def __call__(self, value: T) -> asyncio.Task:
        """Schedule ``func(value)`` after the delay, replacing any pending run."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(value))
        return self._task

    async def _run(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        await self._func(value)

    def cancel(self) -> None:
        """Cancel the pending run, if any.

        Called from inside the pending run, the run is left to finish.
        """
        if self._task is not None and not self._task.done() and self._task is not _current_task():
            self._task.cancel()
        self._task = None


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
