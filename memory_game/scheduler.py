# memory_game/scheduler.py
"""
Cooperative schedulers the engine uses for its timer and flip-back delay.

Nothing here sleeps or spawns threads: callbacks are queued and run to
completion one at a time, either when a ManualScheduler is advanced or
when an asyncio event loop gets to them.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

Callback = Callable[[], None]


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> Handle: ...


@dataclass(order=True)
class _Entry:
    when: float
    seq: int
    callback: Callback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual-clock scheduler.

    Tests call advance(); a request/response adapter calls advance_to() with
    the wall clock so due callbacks fire before each command.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[_Entry] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> _Entry:
        entry = _Entry(self._now + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._queue, entry)
        return entry

    def pending(self) -> int:
        return sum(1 for e in self._queue if not e.cancelled)

    def advance(self, seconds: float) -> int:
        return self.advance_to(self._now + seconds)

    def advance_to(self, when: float) -> int:
        """Run every callback due at or before `when`, in time order."""
        ran = 0
        while self._queue and self._queue[0].when <= when:
            entry = heapq.heappop(self._queue)
            if entry.cancelled:
                continue
            self._now = entry.when
            entry.callback()
            ran += 1
        self._now = max(self._now, when)
        return ran

    def run_due(self) -> int:
        return self.advance_to(self._now)


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop via loop.call_later."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)
