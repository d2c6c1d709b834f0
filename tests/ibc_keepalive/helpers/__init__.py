"""Test helpers for ibc_keepalive unit tests."""

from __future__ import annotations

from prometheus_client import CollectorRegistry

from ibc_keepalive.metrics import NAMESPACE, SUBSYSTEM

from .builders import make_config, make_direction, make_metrics, make_path
from .mocks import FakeClock, MockLedgerClient


def sample(registry: CollectorRegistry, name: str) -> float | None:
    """Read the current value of a keep-alive gauge by its short name."""
    return registry.get_sample_value(f"{NAMESPACE}_{SUBSYSTEM}_{name}")


__all__ = [
    "FakeClock",
    "MockLedgerClient",
    "make_config",
    "make_direction",
    "make_metrics",
    "make_path",
    "sample",
]
