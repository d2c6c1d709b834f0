"""
Keep-alive supervisor.

Wires the probes together and runs them with structured concurrency.

Every probe is an independent task. Probes share nothing but the metrics
registry, so a stalled or failing probe never holds up another one.

Restart policy:

- UpdateRunner: a cycle only ends on a failed submission. The supervisor
  logs the failure, waits a fixed delay and starts a fresh cycle, forever.
- ChannelProbe / SequenceProbe: absorb failures per check and never end,
  so they are never restarted.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from ibc_keepalive.api import MetricsServer, MetricsServerConfig
from ibc_keepalive.config import (
    CHANNEL_CHECK_INTERVAL,
    RESTART_DELAY,
    SEQUENCE_CHECK_INTERVAL,
)
from ibc_keepalive.ledger import LedgerClient
from ibc_keepalive.metrics import KeepAliveMetrics
from ibc_keepalive.paths import Direction, RelayPath
from ibc_keepalive.probes import ChannelProbe, SequenceProbe, UpdateRunner

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Supervisor:
    """
    Keep-alive orchestrator.

    Starts every probe and the metrics server as concurrent tasks and keeps
    the update runners alive for the lifetime of the process.
    """

    update_runners: list[UpdateRunner]
    """One runner per monitored direction."""

    channel_probe: ChannelProbe
    """Channel liveness probe."""

    sequence_probe: SequenceProbe
    """Unrelayed backlog probe."""

    metrics_server: MetricsServer | None = field(default=None)
    """Optional metrics endpoint. If None, nothing is served."""

    restart_delay: float = field(default=RESTART_DELAY)
    """Seconds to wait before restarting a failed update cycle."""

    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    """Sleep function for restart delays (injectable for testing)."""

    _tasks: list[asyncio.Task[None]] = field(default_factory=list, repr=False)
    """Probe tasks, cancelled on shutdown."""

    _shutdown: asyncio.Event = field(default_factory=asyncio.Event)
    """Event signaling shutdown request."""

    @classmethod
    def create(
        cls,
        *,
        client: LedgerClient,
        path: RelayPath,
        directions: Sequence[Direction],
        metrics: KeepAliveMetrics,
        update_interval: float,
        channel_interval: float = CHANNEL_CHECK_INTERVAL,
        sequence_interval: float = SEQUENCE_CHECK_INTERVAL,
        server_config: MetricsServerConfig | None = None,
    ) -> Supervisor:
        """
        Create a fully-wired supervisor for one path.

        Args:
            client: Ledger client shared by all probes.
            path: The path to keep alive.
            directions: Update directions. Each needs gauges under its label.
            metrics: Gauges the probes publish to.
            update_interval: Seconds between keep-alive updates.
            channel_interval: Seconds between channel state checks.
            sequence_interval: Seconds between unrelayed sequence checks.
            server_config: Metrics endpoint configuration. If None, no server runs.

        Raises:
            ValueError: If a direction has no gauges.
        """
        runners = []
        for direction in directions:
            gauges = metrics.updates.get(direction.label)
            if gauges is None:
                raise ValueError(f"no update gauges for direction label {direction.label!r}")
            runners.append(
                UpdateRunner(
                    client=client,
                    direction=direction,
                    interval=update_interval,
                    gauges=gauges,
                )
            )

        server: MetricsServer | None = None
        if server_config is not None:
            server = MetricsServer(config=server_config, registry=metrics.registry)

        return cls(
            update_runners=runners,
            channel_probe=ChannelProbe(
                client=client,
                path=path,
                interval=channel_interval,
                gauge=metrics.channel_open,
            ),
            sequence_probe=SequenceProbe(
                client=client,
                path=path,
                interval=sequence_interval,
                gauge=metrics.unrelayed_sequences,
            ),
            metrics_server=server,
        )

    async def run(self, *, install_signal_handlers: bool = True) -> None:
        """
        Run all probes until shutdown.

        Args:
            install_signal_handlers: Whether to handle SIGINT/SIGTERM.
                Disable for testing or non-main threads.
        """
        if install_signal_handlers:
            self._install_signal_handlers()

        # Bind the endpoint before any probe starts.
        #
        # A port that is already taken fails here, before the first update.
        if self.metrics_server is not None:
            await self.metrics_server.start()

        async with asyncio.TaskGroup() as tg:
            for runner in self.update_runners:
                self._tasks.append(tg.create_task(self.supervise_updates(runner)))
            self._tasks.append(tg.create_task(self.channel_probe.run()))
            self._tasks.append(tg.create_task(self.sequence_probe.run()))
            if self.metrics_server is not None:
                tg.create_task(self.metrics_server.run())
            tg.create_task(self._wait_shutdown())

    async def supervise_updates(self, runner: UpdateRunner) -> None:
        """
        Restart the runner's update cycle whenever it fails.

        Each restart waits a fixed delay. There is no backoff and no retry limit.
        """
        while not self._shutdown.is_set():
            failure = await runner.run_cycle()
            logger.error("Error on update: %s", failure.reason)
            await self.sleep(self.restart_delay)

    def _install_signal_handlers(self) -> None:
        """
        Install signal handlers for graceful shutdown.

        Silently ignores errors if handlers cannot be installed.
        This happens in non-main threads or embedded contexts.
        """
        try:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self._shutdown.set)
        except (ValueError, RuntimeError):
            # Cannot add handlers outside main thread.
            pass

    async def _wait_shutdown(self) -> None:
        """
        Wait for shutdown signal then stop every task.

        Probes may be parked in a long sleep or a hung ledger call,
        so they are cancelled rather than asked to stop.
        """
        await self._shutdown.wait()

        logger.info("Shutting down probes")
        for task in self._tasks:
            task.cancel()
        if self.metrics_server is not None:
            self.metrics_server.stop()

    def stop(self) -> None:
        """Request graceful shutdown."""
        self._shutdown.set()

    @property
    def is_running(self) -> bool:
        """Check if the supervisor is currently running."""
        return not self._shutdown.is_set()
