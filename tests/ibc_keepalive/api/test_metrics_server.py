"""Tests for the metrics HTTP endpoint."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from ibc_keepalive.api import MetricsServer, MetricsServerConfig
from tests.ibc_keepalive.helpers import make_metrics


class TestMetricsServerConfiguration:
    """Tests for metrics server configuration behavior."""

    def test_default_config_uses_standard_port(self) -> None:
        """Default configuration uses port 20202 and binds to all interfaces."""
        config = MetricsServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 20202

    def test_custom_config_values_are_respected(self) -> None:
        """Custom configuration values override defaults."""
        config = MetricsServerConfig(host="127.0.0.1", port=8080)

        assert config.host == "127.0.0.1"
        assert config.port == 8080


class TestMetricsEndpoint:
    """Tests for the /metrics endpoint behavior."""

    def test_serves_registry_in_text_format(self) -> None:
        """The exposition carries every gauge with the Prometheus content type."""

        async def run_test() -> None:
            metrics = make_metrics(["src", "dst"])
            metrics.channel_open.set(1.0)
            metrics.unrelayed_sequences.set(5)

            config = MetricsServerConfig(host="127.0.0.1", port=15202)
            server = MetricsServer(config=config, registry=metrics.registry)

            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get("http://127.0.0.1:15202/metrics")

                    assert response.status_code == 200
                    content_type = response.headers["content-type"]
                    assert content_type.startswith("text/plain")
                    assert "version=0.0.4" in content_type
                    assert "GoZ_relayer_channel_open 1.0" in response.text
                    assert "GoZ_relayer_unrelayed_sequences 5.0" in response.text
                    assert "GoZ_relayer_script_health_src 0.0" in response.text
                    assert "GoZ_relayer_last_update_dst 0.0" in response.text

            finally:
                server.stop()
                await asyncio.sleep(0.1)

        asyncio.run(run_test())

    def test_scrapes_are_read_only(self) -> None:
        """Two scrapes with no probe in between return identical bodies."""

        async def run_test() -> None:
            metrics = make_metrics()
            metrics.updates[""].last_update.set(1_700_000_000)

            config = MetricsServerConfig(host="127.0.0.1", port=15204)
            server = MetricsServer(config=config, registry=metrics.registry)

            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    first = await client.get("http://127.0.0.1:15204/metrics")
                    second = await client.get("http://127.0.0.1:15204/metrics")

                    assert first.content == second.content

            finally:
                server.stop()
                await asyncio.sleep(0.1)

        asyncio.run(run_test())

    def test_scrape_reflects_latest_values(self) -> None:
        """Values written between scrapes are visible on the next one."""

        async def run_test() -> None:
            metrics = make_metrics()

            config = MetricsServerConfig(host="127.0.0.1", port=15206)
            server = MetricsServer(config=config, registry=metrics.registry)

            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    before = await client.get("http://127.0.0.1:15206/metrics")
                    metrics.updates[""].health.set(1.0)
                    after = await client.get("http://127.0.0.1:15206/metrics")

                    assert "GoZ_relayer_script_health 0.0" in before.text
                    assert "GoZ_relayer_script_health 1.0" in after.text

            finally:
                server.stop()
                await asyncio.sleep(0.1)

        asyncio.run(run_test())

    def test_other_paths_are_not_found(self) -> None:
        """Only /metrics is served."""

        async def run_test() -> None:
            config = MetricsServerConfig(host="127.0.0.1", port=15208)
            server = MetricsServer(config=config, registry=make_metrics().registry)

            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get("http://127.0.0.1:15208/")

                    assert response.status_code == 404

            finally:
                server.stop()
                await asyncio.sleep(0.1)

        asyncio.run(run_test())


class TestLifecycle:
    """Tests for starting and stopping the server."""

    def test_run_returns_after_stop(self) -> None:
        """run() blocks until stop() releases it."""

        async def run_test() -> None:
            config = MetricsServerConfig(host="127.0.0.1", port=15210)
            server = MetricsServer(config=config, registry=make_metrics().registry)

            task = asyncio.create_task(server.run())
            await asyncio.sleep(0.1)
            assert not task.done()

            server.stop()
            await asyncio.wait_for(task, timeout=3.0)

        asyncio.run(run_test())

    def test_port_in_use_fails_on_start(self) -> None:
        """A second server on a taken port fails to bind."""

        async def run_test() -> None:
            config = MetricsServerConfig(host="127.0.0.1", port=15212)
            first = MetricsServer(config=config, registry=make_metrics().registry)
            second = MetricsServer(config=config, registry=make_metrics().registry)

            await first.start()

            try:
                with pytest.raises(OSError):
                    await second.start()
                await second._async_stop()

            finally:
                first.stop()
                await asyncio.sleep(0.1)

        asyncio.run(run_test())
