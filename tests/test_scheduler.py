"""Frame scheduler tests."""

import asyncio

import pytest

from village_chase.game.scheduler import FrameScheduler


class Counter:
    def __init__(self):
        self.count = 0
        self.on_tick = None

    def __call__(self):
        self.count += 1
        if self.on_tick:
            self.on_tick(self.count)


@pytest.fixture
def counter():
    return Counter()


class TestPump:
    def test_pump_does_nothing_when_stopped(self, counter):
        scheduler = FrameScheduler(counter)
        assert not scheduler.pump()
        assert counter.count == 0

    def test_pump_runs_one_tick(self, counter):
        scheduler = FrameScheduler(counter)
        scheduler.start()
        assert scheduler.pump()
        assert scheduler.pump()
        assert counter.count == 2
        assert scheduler.ticks == 2

    def test_stop_blocks_pending_pumps(self, counter):
        scheduler = FrameScheduler(counter)
        scheduler.start()
        scheduler.pump()
        scheduler.stop()
        assert not scheduler.pump()
        assert counter.count == 1

    def test_restart_resets_tick_count(self, counter):
        scheduler = FrameScheduler(counter)
        scheduler.start()
        scheduler.pump()
        scheduler.stop()
        scheduler.start()
        assert scheduler.ticks == 0

    def test_interval(self, counter):
        assert FrameScheduler(counter, fps=60).interval == pytest.approx(1 / 60)


class TestRun:
    def test_run_returns_when_stopped_from_tick(self, counter):
        scheduler = FrameScheduler(counter, fps=1000)

        def stop_at_five(count):
            if count == 5:
                scheduler.stop()

        counter.on_tick = stop_at_five
        asyncio.run(asyncio.wait_for(scheduler.run(), timeout=5))

        assert counter.count == 5
        assert not scheduler.is_running

    def test_restart_inside_tick_ends_old_loop(self, counter):
        """A stop/start pair inside a tick leaves no ticks for the old loop."""
        scheduler = FrameScheduler(counter, fps=1000)

        def restart_at_three(count):
            if count == 3:
                scheduler.stop()
                scheduler.start()

        counter.on_tick = restart_at_three
        asyncio.run(asyncio.wait_for(scheduler.run(), timeout=5))

        assert counter.count == 3
        assert scheduler.is_running

    def test_run_starts_when_needed(self, counter):
        scheduler = FrameScheduler(counter, fps=1000)
        counter.on_tick = lambda count: scheduler.stop()

        asyncio.run(asyncio.wait_for(scheduler.run(), timeout=5))
        assert counter.count == 1

    def test_ticks_are_spaced(self, counter):
        scheduler = FrameScheduler(counter, fps=100)
        times = []

        async def scenario():
            loop = asyncio.get_running_loop()

            def record(count):
                times.append(loop.time())
                if count == 4:
                    scheduler.stop()

            counter.on_tick = record
            await scheduler.run()

        asyncio.run(scenario())
        # Three intervals of 10 ms, allow for coarse timers
        assert times[-1] - times[0] >= 0.025
