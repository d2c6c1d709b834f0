"""
Channel liveness probe.

A channel is healthy only when both of its ends report OPEN at the same
time. Anything else (an end still in handshake, a closed end, a query that
failed) publishes 0. Failures never escape the probe: the next tick retries.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from prometheus_client import Gauge

from ibc_keepalive.ledger import ChannelState, LedgerClient
from ibc_keepalive.paths import PathEnd, RelayPath

from .result import Failure, ProbeResult, Success

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChannelProbe:
    """Samples both ends of one channel on a fixed interval."""

    client: LedgerClient
    """Queries channel state."""

    path: RelayPath
    """The channel's two ends."""

    interval: float
    """Seconds to sleep between checks."""

    gauge: Gauge
    """channel_open gauge."""

    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    """Sleep function (injectable for testing)."""

    async def run(self) -> None:
        """Check the channel every interval until cancelled."""
        while True:
            await self.run_once()
            await self.sleep(self.interval)

    async def run_once(self) -> ProbeResult:
        """
        Check both channel ends and publish the combined result.

        The destination end is only queried when the source end is open.
        """
        for end in (self.path.src, self.path.dst):
            failure = await self._check_end(end)
            if failure is not None:
                self.gauge.set(0.0)
                return failure

        self.gauge.set(1.0)
        return Success()

    async def _check_end(self, end: PathEnd) -> Failure | None:
        try:
            state = await self.client.get_channel_state(end.chain_id, end.channel_id, end.port_id)
        except Exception as e:
            failure = Failure(
                reason=f"query of {end.channel_id}/{end.port_id} on {end.chain_id} failed: {e}"
            )
            logger.error("Couldn't get channel state: %s", failure.reason)
            return failure

        if state is not ChannelState.OPEN:
            failure = Failure(
                reason=(
                    f"expected {end.channel_id}/{end.port_id} on {end.chain_id} "
                    f"to be {ChannelState.OPEN} but was {state}"
                )
            )
            logger.warning("Wrong channel state: %s", failure.reason)
            return failure
        return None
