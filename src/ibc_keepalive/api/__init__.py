"""
API server module for the metrics endpoint.

Provides HTTP endpoints for:
- /metrics - Prometheus metrics endpoint
"""

from .server import MetricsServer, MetricsServerConfig

__all__ = [
    "MetricsServer",
    "MetricsServerConfig",
]
