"""Timer-based debouncing for bursts of calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

R = TypeVar("R")

DEBOUNCE_DELAY = 0.5  # seconds


def _transfer(task: asyncio.Task[Any], future: asyncio.Future[Any]) -> None:
    """Copy a finished task's outcome onto the future handed to the caller."""
    if future.done():
        return
    if task.cancelled():
        future.cancel()
    elif task.exception() is not None:
        future.set_exception(task.exception())  # type: ignore[arg-type]
    else:
        future.set_result(task.result())


class Debouncer:
    """Run only the last of a burst of calls, once the quiet window has passed.

    Scheduling clears any pending timer and starts a new one. Calls that
    already fired keep running; only calls still waiting are dropped.
    """

    def __init__(self, delay: float = DEBOUNCE_DELAY) -> None:
        if delay < 0:
            raise ValueError("delay cannot be negative")
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._pending: asyncio.Future[Any] | None = None
        self._running: set[asyncio.Task[Any]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a call is waiting for the quiet window to elapse."""
        return self._handle is not None

    def schedule(
        self, fn: Callable[..., Awaitable[R]], *args: Any
    ) -> asyncio.Future[R]:
        """Schedule fn(*args) after the delay, superseding any pending call.

        Returns a future for the call's result. Superseded futures are
        cancelled.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        future: asyncio.Future[R] = loop.create_future()

        def fire() -> None:
            self._handle = None
            self._pending = None
            task = loop.create_task(fn(*args))  # type: ignore[arg-type]
            self._running.add(task)
            task.add_done_callback(self._running.discard)
            task.add_done_callback(lambda t: _transfer(t, future))

        self._handle = loop.call_later(self._delay, fire)
        self._pending = future
        return future

    def cancel(self) -> None:
        """Drop the pending call, if any. Calls already running are left alone."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
