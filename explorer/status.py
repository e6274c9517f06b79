"""Status line with severities.

Errors are time-limited: after ``error_seconds`` the line falls back to
the idle text unless something newer has been shown meanwhile.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

logger = logging.getLogger(__name__)

IDLE_TEXT = "Ready"


class Severity(str, Enum):
    """How the shell should present a status message."""

    SUCCESS = "success"
    ERROR = "error"
    LOADING = "loading"
    INFO = "info"


class StatusMessage(BaseModel):
    """A single status line update."""

    text: str
    severity: Severity = Severity.INFO


class StatusLine:
    """Current status message plus the reset timer for errors."""

    def __init__(
        self,
        sink: Callable[[StatusMessage], None] | None = None,
        error_seconds: float = 5.0,
    ) -> None:
        """Initialize the status line.

        Args:
            sink: Called with every message shown (the shell's renderer).
            error_seconds: How long an error stays before reverting.
        """
        self.error_seconds = error_seconds
        self.current = StatusMessage(text=IDLE_TEXT)
        self._sink = sink
        self._reset: asyncio.TimerHandle | None = None

    def show(self, text: str, severity: Severity = Severity.INFO) -> StatusMessage:
        """Display a message, scheduling the reset for errors."""
        self._cancel_reset()
        message = StatusMessage(text=text, severity=severity)
        self._emit(message)
        if severity is Severity.ERROR:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._reset = loop.call_later(self.error_seconds, self.reset)
        return message

    def success(self, text: str) -> StatusMessage:
        return self.show(text, Severity.SUCCESS)

    def error(self, text: str) -> StatusMessage:
        return self.show(text, Severity.ERROR)

    def loading(self, text: str) -> StatusMessage:
        return self.show(text, Severity.LOADING)

    def info(self, text: str) -> StatusMessage:
        return self.show(text, Severity.INFO)

    def reset(self) -> None:
        """Return to the idle text."""
        self._reset = None
        self._emit(StatusMessage(text=IDLE_TEXT))

    def _emit(self, message: StatusMessage) -> None:
        self.current = message
        if message.severity is Severity.ERROR:
            logger.warning(f"Status: {message.text}")
        if self._sink is not None:
            self._sink(message)

    def _cancel_reset(self) -> None:
        if self._reset is not None:
            self._reset.cancel()
            self._reset = None
