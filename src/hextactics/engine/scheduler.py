"""Deferred task scheduling.

The turn controller never sleeps or touches timers itself; it asks a
scheduler to run a callback after a delay.  The running server uses the
asyncio event loop, tests use :class:`ManualScheduler` and advance time
explicitly.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from typing import Callable, Optional, Protocol

log = logging.getLogger(__name__)


class TaskHandle(Protocol):
    """Handle of a scheduled callback (``asyncio.TimerHandle`` satisfies it)."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Runs a fire-once callback after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle: ...


class AsyncioScheduler:
    """Scheduler backed by ``loop.call_later``.

    Args:
        loop: Event loop to schedule on.  Defaults to the loop running at
            the time of each call.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ManualTask:
    """A callback waiting in a :class:`ManualScheduler`."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Deterministic scheduler driven by an explicit clock.

    Usage:
        sched = ManualScheduler()
        sched.call_later(0.5, fn)
        sched.advance(0.5)   # runs fn
    """

    def __init__(self) -> None:
        self.now: float = 0.0
        self._queue: list[tuple[float, int, ManualTask]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (task.due, next(self._seq), task))
        return task

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled callbacks."""
        return sum(1 for _, _, task in self._queue if not task.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every callback that became due.

        Callbacks scheduled while running are executed too if they fall
        within the new time.

        Returns:
            Number of callbacks executed.
        """
        target = self.now + seconds
        executed = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if task.cancelled():
                continue
            task.callback()
            executed += 1
        self.now = target
        return executed

    def run_all(self, limit: int = 1000) -> int:
        """Run callbacks in due order until none are left.

        Args:
            limit: Safety cap against callbacks that keep rescheduling.
        """
        executed = 0
        while self._queue and executed < limit:
            due, _, task = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if task.cancelled():
                continue
            task.callback()
            executed += 1
        if self._queue and executed >= limit:
            log.warning("ManualScheduler stopped after %d callbacks", executed)
        return executed
