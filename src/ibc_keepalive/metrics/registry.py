"""
Metric registry using prometheus_client.

Gauges are created once at startup and handed to the probes that own them.
Every probe writes only its own gauges; the exporter only reads.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from prometheus_client import CollectorRegistry, Gauge, generate_latest

NAMESPACE: Final = "GoZ"
"""Metric namespace. Kept stable so existing dashboards and alerts keep working."""

SUBSYSTEM: Final = "relayer"
"""Metric subsystem."""

UNRELAYED_SENTINEL: Final = -1.0
"""Value of unrelayed_sequences when the probe failed. Real counts are never negative."""


def create_registry() -> CollectorRegistry:
    """
    Create a dedicated registry.

    Using a dedicated registry avoids pollution from default Python process metrics.
    """
    return CollectorRegistry()


def _gauge(registry: CollectorRegistry, name: str, documentation: str) -> Gauge:
    return Gauge(
        name,
        documentation,
        namespace=NAMESPACE,
        subsystem=SUBSYSTEM,
        registry=registry,
    )


def _suffixed(name: str, label: str) -> str:
    return f"{name}_{label}" if label else name


@dataclass(frozen=True, slots=True)
class UpdateGauges:
    """Gauges owned by the update runner of one direction."""

    health: Gauge
    """1.0 while updates succeed, 0.0 after a failed update."""

    last_update: Gauge
    """Unix timestamp in seconds of the last successful update."""


@dataclass(frozen=True, slots=True)
class KeepAliveMetrics:
    """The fixed set of health dimensions published by the monitor."""

    registry: CollectorRegistry

    unrelayed_sequences: Gauge
    """Unrelayed packets across both directions, or -1 if the probe failed."""

    channel_open: Gauge
    """1.0 if the channel is open on both ends, else 0.0."""

    updates: dict[str, UpdateGauges]
    """Update gauges keyed by direction label."""

    @classmethod
    def create(cls, registry: CollectorRegistry, labels: Sequence[str]) -> KeepAliveMetrics:
        """
        Register every gauge in the given registry.

        Args:
            registry: Registry the gauges are exported from.
            labels: Direction labels. Use [""] to monitor a single client and
                ["src", "dst"] to monitor both directions of a path.

        Raises:
            ValueError: If labels are empty or repeated.
        """
        if not labels:
            raise ValueError("at least one update direction is required")
        if len(set(labels)) != len(labels):
            raise ValueError(f"duplicate direction labels: {list(labels)}")

        unrelayed = _gauge(
            registry,
            "unrelayed_sequences",
            "number of unrelayed sequences or negative if error occurred",
        )
        channel_open = _gauge(
            registry,
            "channel_open",
            "1.0 if channel open in both directions, else 0.0",
        )

        updates = {
            label: UpdateGauges(
                health=_gauge(
                    registry,
                    _suffixed("script_health", label),
                    "0.0 if script is not running successfully, else 1.0",
                ),
                last_update=_gauge(
                    registry,
                    _suffixed("last_update", label),
                    "unix timestamp in seconds of when the last update was executed",
                ),
            )
            for label in labels
        }

        return cls(
            registry=registry,
            unrelayed_sequences=unrelayed,
            channel_open=channel_open,
            updates=updates,
        )


def generate_metrics(registry: CollectorRegistry) -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(registry)
