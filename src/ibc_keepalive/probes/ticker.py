"""
Fixed-rate ticker.

Deadlines sit on a fixed grid: start, start + interval, start + 2 * interval.
Slow work does not shift the grid. When work overruns one or more deadlines,
the missed ticks collapse into a single immediate tick, so the caller never
runs back-to-back catch-up iterations.
"""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field


@dataclass(slots=True)
class Ticker:
    """Waits for the next deadline on a fixed interval grid."""

    interval: float
    """Seconds between deadlines."""

    clock: Callable[[], float] = field(default=time.monotonic)
    """Monotonic time source (injectable for deterministic testing)."""

    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    """Sleep function (injectable for deterministic testing)."""

    _deadline: float | None = field(default=None, init=False, repr=False)
    """The next deadline, or None before the ticker is started."""

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")

    def start(self) -> None:
        """Anchor the grid at the current time. The first tick is one interval away."""
        self._deadline = self.clock() + self.interval

    async def wait(self) -> None:
        """Sleep until the next tick."""
        if self._deadline is None:
            self.start()
        assert self._deadline is not None

        now = self.clock()
        if now < self._deadline:
            await self.sleep(self._deadline - now)
            self._deadline += self.interval
            return

        # One or more deadlines passed while the caller was busy.
        #
        # Fire once now and move to the first deadline still in the future.
        missed = math.floor((now - self._deadline) / self.interval) + 1
        self._deadline += missed * self.interval
