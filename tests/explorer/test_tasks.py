"""Tests for RequestGuard and ForegroundTracker."""

import asyncio

import pytest

from explorer.tasks import ForegroundTracker, RequestGuard


class TestRequestGuard:
    def test_latest_ticket_is_current(self) -> None:
        guard = RequestGuard("view")
        first = guard.issue("C:\\A")
        second = guard.issue("C:\\B")
        assert not guard.is_current(first)
        assert guard.is_current(second)

    def test_invalidate_supersedes_everything(self) -> None:
        guard = RequestGuard("view")
        ticket = guard.issue("C:\\A")
        guard.invalidate()
        assert not guard.is_current(ticket)

    def test_guards_are_independent(self) -> None:
        view = RequestGuard("view")
        audio = RequestGuard("audio")
        listing = view.issue("C:\\A")
        audio.issue("C:\\A\\song.wav")
        assert view.is_current(listing)


class TestForegroundTracker:
    def test_busy_counts(self) -> None:
        tracker = ForegroundTracker()
        assert tracker.is_idle
        with tracker.busy():
            with tracker.busy():
                assert tracker.active == 2
            assert not tracker.is_idle
        assert tracker.is_idle

    def test_busy_releases_on_error(self) -> None:
        tracker = ForegroundTracker()
        with pytest.raises(RuntimeError):
            with tracker.busy():
                raise RuntimeError("boom")
        assert tracker.is_idle

    async def test_wait_idle(self) -> None:
        tracker = ForegroundTracker()
        released = asyncio.Event()

        async def foreground() -> None:
            with tracker.busy():
                await released.wait()

        task = asyncio.create_task(foreground())
        await asyncio.sleep(0)
        waiter = asyncio.create_task(tracker.wait_idle())
        await asyncio.sleep(0)
        assert not waiter.done()
        released.set()
        await task
        await asyncio.wait_for(waiter, timeout=1)
