"""Tick scheduler: fixed-period background updates that never overlap."""

import asyncio
import sys
import time
from typing import Awaitable, Callable, Optional


def _log(msg: str):
    print(msg, file=sys.stderr)


class TickScheduler:
    """Calls ``update(delta_ms)`` once per period, one call at a time.

    The wait after a tick is the period minus however long the tick took,
    floored at zero, so a slow tick is followed straight away by the next one
    instead of piling up.
    """

    def __init__(
        self,
        update: Callable[[float], Awaitable[None]],
        period_ms: float = 300,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._update = update
        self.period_ms = period_ms
        self._clock = clock
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self.last_tick_start: Optional[float] = None
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        if self._task and not self._task.done():
            return
        self._running = True
        self._task = asyncio.create_task(self._run_after_first_period())

    async def stop(self):
        self._running = False
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run_after_first_period(self, max_ticks: Optional[int] = None):
        # the first delta covers the initial wait
        baseline = self._clock()
        await self._sleep(self.period_ms / 1000)
        await self.run(max_ticks, baseline=baseline)

    async def run(self, max_ticks: Optional[int] = None, baseline: Optional[float] = None):
        """Tick until stopped (or ``max_ticks`` ticks have run).

        ``baseline`` is the clock reading the first delta is measured from;
        it defaults to now.
        """
        self._running = True
        last = self._clock() if baseline is None else baseline
        ticks = 0
        while self._running and (max_ticks is None or ticks < max_ticks):
            start = self._clock()
            self.last_tick_start = start
            try:
                await self._update((start - last) * 1000)
            except Exception as e:
                _log(f"[TickScheduler] update failed: {e}")
            elapsed_ms = (self._clock() - start) * 1000
            remaining_ms = self.period_ms - elapsed_ms
            await self._sleep(max(0.0, remaining_ms) / 1000)
            last = start
            ticks += 1
            self.tick_count += 1
