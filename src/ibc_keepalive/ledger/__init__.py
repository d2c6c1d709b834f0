"""
Ledger access for the probes.

Provides the LedgerClient protocol the probes depend on and its default
implementation:
- RestLedgerClient: chain queries over REST
- RelayerCommand: keep-alive submission through the relayer binary
"""

from .client import ChannelState, LedgerClient, LedgerClientError, UnrelayedSequences
from .relayer import RelayerCommand
from .rest import RestLedgerClient

__all__ = [
    "ChannelState",
    "LedgerClient",
    "LedgerClientError",
    "RelayerCommand",
    "RestLedgerClient",
    "UnrelayedSequences",
]
