from __future__ import annotations

import asyncio

from worldstatus.core import StatusPoller
from worldstatus.supervisor import Timer


def test_timer_fires_after_interval_and_can_be_fired_early() -> None:
    async def _run() -> tuple[float, float]:
        loop = asyncio.get_running_loop()
        async with Timer(0.05) as timer:
            start = loop.time()
            await timer.run()
            waited = loop.time() - start

            timer.interval = 3600
            timer.fire_now()
            start = loop.time()
            await timer.run()
            return waited, loop.time() - start

    waited, early = asyncio.run(_run())
    assert waited >= 0.04
    assert early < 1


def test_poller_overlaps_slow_cycles() -> None:
    async def _run() -> tuple[int, int]:
        started = 0

        async def slow_cycle() -> None:
            nonlocal started
            started += 1
            await asyncio.sleep(3600)

        poller = StatusPoller("test", 0.02, slow_cycle)
        async with poller:
            task = asyncio.create_task(poller.run())
            await asyncio.sleep(0.15)
            in_flight = poller.in_flight
            task.cancel()
        return started, in_flight

    started, in_flight = asyncio.run(_run())
    assert started >= 3
    assert in_flight == started


def test_poller_survives_failing_cycle() -> None:
    async def _run() -> int:
        calls = 0

        async def failing_cycle() -> None:
            nonlocal calls
            calls += 1
            raise RuntimeError("probe exploded")

        poller = StatusPoller("test", 0.02, failing_cycle)
        async with poller:
            task = asyncio.create_task(poller.run())
            await asyncio.sleep(0.1)
            task.cancel()
        return calls

    assert asyncio.run(_run()) >= 2


def test_poller_can_wait_before_first_cycle() -> None:
    async def _run() -> int:
        calls = 0

        async def cycle() -> None:
            nonlocal calls
            calls += 1

        poller = StatusPoller("test", 3600, cycle, immediate=False)
        async with poller:
            task = asyncio.create_task(poller.run())
            await asyncio.sleep(0.05)
            task.cancel()
        return calls

    assert asyncio.run(_run()) == 0
