"""
Global configuration for the keep-alive monitor.

This module contains environment-specific settings and the fixed cadences
shared by all probes.
"""

import os
from pathlib import Path
from typing import Final

DEFAULT_CONFIG_PATH: Final = Path(
    os.environ.get("IBC_KEEPALIVE_CONFIG", Path.home() / ".relayer" / "keepalive.yaml")
)
"""Config file used when --config is not given. Overridable via IBC_KEEPALIVE_CONFIG."""

DEFAULT_UPDATE_INTERVAL: Final = 5390
"""Seconds between keep-alive client updates."""

CHANNEL_CHECK_INTERVAL: Final = 10
"""Seconds between channel state checks."""

SEQUENCE_CHECK_INTERVAL: Final = 60
"""Seconds between unrelayed sequence checks."""

RESTART_DELAY: Final = 1.0
"""Seconds to wait before restarting a failed update cycle."""

METRICS_HOST: Final = "0.0.0.0"
"""Address the metrics endpoint binds to."""

METRICS_PORT: Final = 20202
"""Port the metrics endpoint listens on."""
