"""
Metrics server.

Provides a single HTTP endpoint:
- /metrics - Prometheus metrics endpoint

Scrapes only read the registry. They never trigger a probe, so repeated
scrapes between probe cycles return identical values.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from aiohttp import web
from prometheus_client import CollectorRegistry

from ibc_keepalive.config import METRICS_HOST, METRICS_PORT
from ibc_keepalive.metrics import generate_metrics

logger = logging.getLogger(__name__)

METRICS_PATH = "/metrics"
"""Path the exposition is served on."""

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"
"""Prometheus text exposition format."""


@dataclass(frozen=True, slots=True)
class MetricsServerConfig:
    """Configuration for the metrics server."""

    host: str = METRICS_HOST
    """Host address to bind to."""

    port: int = METRICS_PORT
    """Port to listen on."""


@dataclass(slots=True)
class MetricsServer:
    """
    HTTP server exposing the metrics registry.

    Uses aiohttp to handle HTTP protocol details efficiently.
    """

    config: MetricsServerConfig
    """Server configuration."""

    registry: CollectorRegistry
    """Registry whose gauges are exported."""

    _runner: web.AppRunner | None = field(default=None, init=False)
    """The aiohttp application runner."""

    _site: web.TCPSite | None = field(default=None, init=False)
    """The TCP site for the server."""

    async def start(self) -> None:
        """Start the metrics server in the background."""
        app = web.Application()
        app.add_routes([web.get(METRICS_PATH, self._handle_metrics)])

        self._runner = web.AppRunner(app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        logger.info(
            "Metrics server listening on %s:%d%s",
            self.config.host,
            self.config.port,
            METRICS_PATH,
        )

    async def run(self) -> None:
        """
        Run the metrics server until shutdown.

        This method blocks until stop() is called.
        """
        if self._runner is None:
            await self.start()

        # Keep running until stopped
        while self._runner is not None:
            await asyncio.sleep(1)

    def stop(self) -> None:
        """Request graceful shutdown."""
        if self._runner is not None:
            asyncio.create_task(self._async_stop())

    async def _async_stop(self) -> None:
        """Gracefully stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("Metrics server stopped")

    async def _handle_metrics(self, _request: web.Request) -> web.Response:
        """Handle Prometheus metrics endpoint."""
        return web.Response(
            body=generate_metrics(self.registry),
            headers={"Content-Type": CONTENT_TYPE},
        )
