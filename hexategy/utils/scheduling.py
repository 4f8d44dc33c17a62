"""One-shot, cancellable timers for the round lifecycle.

The orchestrator never sleeps or touches an event loop directly; it asks a
scheduler to call it back later. Two implementations are provided:

- ``AsyncioScheduler`` arms ``loop.call_later`` timers. Instead of running
  the callback on expiry it hands it to a dispatch hook, so a room actor can
  queue timer events alongside inbound messages and keep handling strictly
  one event at a time.
- ``ManualScheduler`` keeps a virtual clock that only moves when
  ``advance()`` is called. Tests and in-process games use it to play whole
  rounds without waiting.
"""

import asyncio
import heapq
import itertools
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle(Protocol):
    """A pending timer that can be cancelled."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...


class AsyncioScheduler:
    """Timers on an asyncio event loop.

    Args:
        dispatch: Receives the callback when its timer expires. Defaults to
            calling it directly on the loop.
        loop: Event loop to arm timers on. Defaults to the running loop at
            the time each timer is armed.
    """

    def __init__(
        self,
        dispatch: Optional[Callable[[Callback], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._dispatch = dispatch or (lambda callback: callback())
        self._loop = loop

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), self._dispatch, callback)


class ManualTimer:
    """Timer armed on a ManualScheduler."""

    def __init__(self, due: float, callback: Callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler driven by explicit ``advance()`` calls."""

    def __init__(self):
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> ManualTimer:
        timer = ManualTimer(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every timer that comes due.

        Timers armed by a firing callback also fire if they fall inside the
        window. Callbacks run in deadline order, ties in arming order.

        Returns:
            Number of callbacks run
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = due
            timer.callback()
            fired += 1
        self.now = target
        return fired

    def run_next(self) -> bool:
        """Jump straight to the next pending timer and fire it.

        Returns:
            True if a timer fired, False if nothing was pending
        """
        while self._queue:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = due
            timer.callback()
            return True
        logger.debug("run_next called with no pending timers")
        return False
