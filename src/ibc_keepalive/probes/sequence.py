"""
Unrelayed sequence probe.

Publishes how many packets are waiting to be relayed across both directions
of a path. A growing number means the relayer has stalled even if the
channel itself is open.

A failed probe publishes -1 instead of leaving the previous value in place.
That keeps "no backlog" (0) and "could not tell" (-1) apart on a dashboard,
and keeps the series free of gaps.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from prometheus_client import Gauge

from ibc_keepalive.ledger import LedgerClient
from ibc_keepalive.metrics import UNRELAYED_SENTINEL
from ibc_keepalive.paths import RelayPath

from .result import Failure, ProbeResult, Success

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SequenceProbe:
    """Samples the unrelayed packet backlog of a path on a fixed interval."""

    client: LedgerClient
    """Resolves chains and queries packet sequences."""

    path: RelayPath
    """The path whose backlog is measured."""

    interval: float
    """Seconds to sleep between checks."""

    gauge: Gauge
    """unrelayed_sequences gauge."""

    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    """Sleep function (injectable for testing)."""

    async def run(self) -> None:
        """Check the backlog every interval until cancelled."""
        while True:
            await self.run_once()
            await self.sleep(self.interval)

    async def run_once(self) -> ProbeResult:
        """Count unrelayed sequences and publish the total, or -1 on failure."""
        try:
            sequences = await self.client.unrelayed_sequences(self.path)
            total = sequences.total
        except Exception as e:
            logger.error("Couldn't get unrelayed sequences: %s", e)
            self.gauge.set(UNRELAYED_SENTINEL)
            return Failure(reason=str(e))

        logger.debug(
            "Unrelayed sequences: %d (src=%d dst=%d)",
            total,
            len(sequences.src),
            len(sequences.dst),
        )
        self.gauge.set(float(total))
        return Success(payload=total)
