"""Probe loops that publish keep-alive health."""

from .channel import ChannelProbe
from .result import Failure, ProbeResult, Success
from .sequence import SequenceProbe
from .ticker import Ticker
from .update import UpdateRunner

__all__ = [
    "ChannelProbe",
    "Failure",
    "ProbeResult",
    "SequenceProbe",
    "Success",
    "Ticker",
    "UpdateRunner",
]
