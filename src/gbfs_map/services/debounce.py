"""Cancellable debounce timer on the running asyncio loop."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Coalesces bursts of calls into one call after a quiet period.

    Each trigger cancels the pending call and schedules a new one, so only
    the arguments of the last trigger are acted upon.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        """Initialize the debouncer.

        Args:
            delay: Quiet period in seconds.
            callback: Called with the last trigger's arguments.
        """
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._pending_args: tuple[Any, ...] = ()

    @property
    def pending(self) -> bool:
        """True while a call is scheduled but has not fired yet."""
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        """(Re)start the quiet period. Must be called from the event loop."""
        loop = asyncio.get_running_loop()
        self.cancel()
        self._pending_args = args
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> bool:
        """Run the pending call now.

        Returns:
            True if a call was pending.
        """
        if self._handle is None:
            return False
        self._handle.cancel()
        self._fire()
        return True

    def _fire(self) -> None:
        self._handle = None
        args, self._pending_args = self._pending_args, ()
        try:
            self._callback(*args)
        except Exception:
            logger.exception("Debounced callback failed")
