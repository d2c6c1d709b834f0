"""Outcome of a single probe execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class Success:
    """The probe completed. Carries the observed value, if any."""

    payload: Any = None


@dataclass(frozen=True, slots=True)
class Failure:
    """The probe failed. The reason is what gets logged."""

    reason: str


ProbeResult: TypeAlias = Success | Failure
"""Tagged probe outcome. Consumed immediately to update a gauge, never stored."""
