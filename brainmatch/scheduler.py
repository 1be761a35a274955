# brainmatch/scheduler.py
"""
Single-shot deferred callbacks.

Every scheduler exposes call_later(delay, callback) and returns a handle
with cancel(). MatchGame only depends on that pair of methods, so the
mismatch unflip can run on a timer thread, on an asyncio loop, or on a
virtual clock in tests.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class TimerScheduler:
    """Runs each callback on its own daemon threading.Timer."""

    def call_later(self, delay: float, callback: Callback) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay), callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop (the running one by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)


class ManualHandle:
    def __init__(self, when: float, callback: Callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual clock. Nothing runs until advance() or run_all() is called;
    due callbacks then fire in deadline order (ties in scheduling order).
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, ManualHandle]] = []

    def call_later(self, delay: float, callback: Callback) -> ManualHandle:
        handle = ManualHandle(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire everything now due. Returns the number fired."""
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if handle.cancelled:
                continue
            handle.fired = True
            handle.callback()
            fired += 1
        self.now = target
        return fired

    def run_all(self) -> int:
        if not self._queue:
            return 0
        latest = max(when for when, _, _ in self._queue)
        return self.advance(max(0.0, latest - self.now))
