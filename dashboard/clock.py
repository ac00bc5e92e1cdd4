"""
Time source and timers for the dashboard.

Everything time-dependent (cache TTLs, the loading failsafe, toast expiry)
reads the clock through this interface so tests can move time by hand.
"""

import asyncio
import heapq
import itertools
import time
from typing import Callable, List, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def now_ms(self) -> int: ...

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class LoopClock:
    """Wall clock with timers scheduled on the running asyncio loop"""

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)


class ManualTimer:
    def __init__(self, due_ms: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class ManualClock:
    """Clock that only moves when advance() is called"""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self._now = start_ms
        self._timers: List[Tuple[int, int, ManualTimer]] = []
        self._seq = itertools.count()

    def now_ms(self) -> int:
        return self._now

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now + delay_ms, callback)
        heapq.heappush(self._timers, (timer.due_ms, next(self._seq), timer))
        return timer

    def advance(self, delta_ms: int) -> None:
        """Move time forward, firing due timers in order"""
        target = self._now + delta_ms
        while self._timers and self._timers[0][0] <= target:
            due, _, timer = heapq.heappop(self._timers)
            self._now = due
            if timer.pending:
                timer.fired = True
                timer.callback()
        self._now = target

    def pending_timers(self) -> List[ManualTimer]:
        return [t for _, _, t in self._timers if t.pending]
