"""Timers for the computer's thinking delays."""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Protocol

Callback = Callable[[], None]


class ScheduledCall(Protocol):
    """Handle for a pending callback."""

    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Runs a callback once after a delay."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> ScheduledCall:
        """
        Schedule ``callback`` to run after ``delay`` seconds.

        Returns:
            A handle whose ``cancel()`` drops the call if it has not run yet
        """
        ...


@dataclass(order=True)
class _ManualCall:
    due: float
    seq: int
    callback: Callback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """
    Scheduler driven by hand, for tests.

    Nothing runs until ``advance()`` or ``run_all()`` is called, and then
    callbacks run synchronously in due order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[_ManualCall] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> ScheduledCall:
        call = _ManualCall(self.now + delay, next(self._seq), callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        """Number of calls still waiting to run."""
        return sum(1 for call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running everything that falls due.

        Callbacks scheduled while advancing run too if they fall inside
        the window.

        Returns:
            Number of callbacks run
        """
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0].due <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.now = call.due
            call.callback()
            ran += 1
        self.now = target
        return ran

    def run_all(self, limit: int = 10_000) -> int:
        """Run queued callbacks (and anything they schedule) until idle."""
        ran = 0
        while self._queue and ran < limit:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.now = max(self.now, call.due)
            call.callback()
            ran += 1
        return ran


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callback) -> ScheduledCall:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
