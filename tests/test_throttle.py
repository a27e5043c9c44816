import asyncio
import time

import pytest

from aurora_gold.utils.throttle import ThrottleQueue

from conftest import FakeClock


async def test_jobs_dispatch_in_order_with_spacing():
    interval = 0.05
    queue = ThrottleQueue(interval, name="test")
    dispatched = []

    def make_job(name):
        async def job():
            dispatched.append((name, time.monotonic()))
            return name
        return job

    results = await asyncio.gather(*(queue.enqueue(make_job(i)) for i in range(5)))

    assert results == [0, 1, 2, 3, 4]
    assert [name for name, _ in dispatched] == [0, 1, 2, 3, 4]
    for (_, earlier), (_, later) in zip(dispatched, dispatched[1:]):
        assert later - earlier >= interval * 0.9


async def test_single_worker_drains_queue():
    queue = ThrottleQueue(0.0, name="test")
    running = 0
    peak = 0

    async def job():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1

    await asyncio.gather(*(queue.enqueue(job) for _ in range(4)))
    assert peak == 1
    assert not queue.processing
    assert queue.pending == 0


async def test_failure_is_delivered_to_its_caller_only():
    queue = ThrottleQueue(0.0, name="test")

    async def bad():
        raise ValueError("nope")

    async def good():
        return "ok"

    results = await asyncio.gather(queue.enqueue(bad), queue.enqueue(good), return_exceptions=True)
    assert isinstance(results[0], ValueError)
    assert results[1] == "ok"


async def test_enqueue_after_idle_starts_a_new_drain():
    queue = ThrottleQueue(0.0, name="test")

    async def job():
        return 1

    assert await queue.enqueue(job) == 1
    assert not queue.processing
    assert await queue.enqueue(job) == 1


def test_ready_tracks_interval():
    clock = FakeClock()
    queue = ThrottleQueue(3.0, name="test", clock=clock)
    assert queue.ready()
    assert queue.seconds_since_last() is None

    queue.last_request_time = clock.now
    assert not queue.ready()
    clock.advance(2.9)
    assert not queue.ready()
    clock.advance(0.1)
    assert queue.ready()


async def test_records_dispatch_time_even_when_job_fails():
    clock = FakeClock()
    queue = ThrottleQueue(3.0, name="test", clock=clock)

    async def bad():
        raise RuntimeError("down")

    with pytest.raises(RuntimeError):
        await queue.enqueue(bad)
    assert queue.last_request_time == clock.now
    assert not queue.ready()
