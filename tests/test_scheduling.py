"""Tests for round timers."""

import asyncio

from hexategy.utils.scheduling import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    """Test the virtual-clock scheduler."""

    def test_fires_in_deadline_order(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(3, lambda: fired.append("late"))
        scheduler.call_later(1, lambda: fired.append("early"))
        scheduler.call_later(1, lambda: fired.append("early-second"))

        assert scheduler.advance(2) == 2
        assert fired == ["early", "early-second"]
        assert scheduler.now == 2
        assert scheduler.pending == 1

        scheduler.advance(1)
        assert fired == ["early", "early-second", "late"]

    def test_cancelled_timer_never_fires(self):
        scheduler = ManualScheduler()
        fired = []
        timer = scheduler.call_later(1, lambda: fired.append(1))
        timer.cancel()

        assert scheduler.pending == 0
        assert scheduler.advance(5) == 0
        assert fired == []

    def test_chained_timers_inside_window(self):
        scheduler = ManualScheduler()
        fired = []

        def first():
            fired.append(scheduler.now)
            scheduler.call_later(2, lambda: fired.append(scheduler.now))

        scheduler.call_later(1, first)
        scheduler.advance(10)
        assert fired == [1, 3]

    def test_run_next(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(30, lambda: fired.append(1))

        assert scheduler.run_next() is True
        assert scheduler.now == 30
        assert scheduler.run_next() is False
        assert fired == [1]


class TestAsyncioScheduler:
    """Test the event-loop scheduler."""

    def test_dispatch_hook_receives_callback(self):
        async def scenario():
            fired, dispatched = [], []
            scheduler = AsyncioScheduler(dispatch=dispatched.append)
            scheduler.call_later(0.01, lambda: fired.append(1))
            await asyncio.sleep(0.05)
            return fired, dispatched

        fired, dispatched = asyncio.run(scenario())
        assert fired == []
        assert len(dispatched) == 1
        dispatched[0]()
        assert fired == [1]

    def test_cancel(self):
        async def scenario():
            fired = []
            handle = AsyncioScheduler().call_later(0.01, lambda: fired.append(1))
            handle.cancel()
            await asyncio.sleep(0.05)
            return fired

        assert asyncio.run(scenario()) == []
