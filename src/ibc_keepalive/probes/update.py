"""
Keep-alive update runner.

The Expiry Problem
------------------
An IBC light client freezes when it has not seen a header from its
counterparty within the trusting period. A frozen client cannot be revived
without governance, and every channel on top of it is lost. Quiet channels
hit this first: with no packets flowing, no relayer ever updates the client.

UpdateRunner is the fix: it submits a client update on a fixed interval,
whether or not there is traffic.

How It Works
------------
1. Submit one update immediately
2. Mark the direction healthy and record the update time
3. Wait for the next tick, submit again, record the time
4. Any failed submission ends the cycle and marks the direction unhealthy

The runner never retries on its own. A cycle only ever ends in failure,
and the supervisor decides when to start the next one.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ibc_keepalive.ledger import LedgerClient
from ibc_keepalive.metrics import UpdateGauges
from ibc_keepalive.paths import Direction

from .result import Failure
from .ticker import Ticker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UpdateRunner:
    """Drives repeated keep-alive submissions for one direction of a path."""

    client: LedgerClient
    """Submits the updates."""

    direction: Direction
    """Which client to update, on which chain."""

    interval: float
    """Seconds between updates."""

    gauges: UpdateGauges
    """Health and last-update gauges of this direction."""

    time_fn: Callable[[], float] = field(default=time.time)
    """Wall-clock source for the last-update timestamp (injectable for testing)."""

    clock: Callable[[], float] = field(default=time.monotonic)
    """Monotonic source for tick scheduling (injectable for testing)."""

    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    """Sleep function for tick scheduling (injectable for testing)."""

    _last_update: float = field(default=0.0, init=False, repr=False)
    """Latest published update time. The gauge never moves backwards."""

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")

    async def run_cycle(self) -> Failure:
        """
        Run one update cycle until a submission fails.

        The first submission happens immediately. Later submissions follow a
        fixed-rate ticker; ticks that fire while a submission is in flight are
        coalesced into one.

        The health gauge is reset to 0 whenever the cycle ends, including on
        cancellation.

        Returns:
            The failure that ended the cycle.
        """
        ticker = Ticker(self.interval, clock=self.clock, sleep=self.sleep)

        # First tick is one interval after the first submission starts.
        ticker.start()

        try:
            failure = await self._submit()
            if failure is not None:
                return failure

            # Only the first success flips health.
            #
            # Later successes keep it at 1, later failures end the cycle.
            self.gauges.health.set(1.0)
            self._record_update()

            while True:
                await ticker.wait()
                failure = await self._submit()
                if failure is not None:
                    return failure
                self._record_update()
        finally:
            self.gauges.health.set(0.0)

    async def _submit(self) -> Failure | None:
        logger.info("Updating client %s", self.direction)
        try:
            await self.client.submit_keep_alive(self.direction)
        except Exception as e:
            return Failure(reason=f"{self.direction}: {e}")
        return None

    def _record_update(self) -> None:
        # Wall clocks can step back. The published timestamp never does.
        self._last_update = max(self._last_update, self.time_fn())
        self.gauges.last_update.set(self._last_update)
