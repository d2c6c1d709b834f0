"""
Metrics module for observability.

Provides the gauges that describe keep-alive health.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    NAMESPACE,
    SUBSYSTEM,
    UNRELAYED_SENTINEL,
    KeepAliveMetrics,
    UpdateGauges,
    create_registry,
    generate_metrics,
)

__all__ = [
    "NAMESPACE",
    "SUBSYSTEM",
    "UNRELAYED_SENTINEL",
    "KeepAliveMetrics",
    "UpdateGauges",
    "create_registry",
    "generate_metrics",
]
