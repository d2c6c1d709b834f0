"""
Ledger client interface.

The probes never talk to a chain directly. They go through a LedgerClient,
which hides chain lookup, REST queries and transaction submission. This keeps
the probes testable with an in-memory fake.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from ibc_keepalive.paths import Direction, RelayPath


class LedgerClientError(Exception):
    """
    A ledger operation failed.

    Covers transport errors, unexpected responses, unknown chains and
    failed submissions. Probes treat it as transient: the next scheduled
    cycle is the retry.
    """


class ChannelState(Enum):
    """Lifecycle state of an IBC channel end."""

    UNINITIALIZED = "STATE_UNINITIALIZED_UNSPECIFIED"
    INIT = "STATE_INIT"
    TRYOPEN = "STATE_TRYOPEN"
    OPEN = "STATE_OPEN"
    CLOSED = "STATE_CLOSED"

    @classmethod
    def parse(cls, raw: str) -> ChannelState:
        """
        Parse a channel state as reported by a chain.

        Accepts the protobuf enum name ('STATE_OPEN') and the short name ('OPEN').

        Raises:
            LedgerClientError: If the state is unknown.
        """
        name = raw.strip().upper()
        for state in cls:
            if name in (state.value, state.name):
                return state
        raise LedgerClientError(f"unknown channel state {raw!r}")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class UnrelayedSequences:
    """Packet sequences sent on one end but not yet received on the other."""

    src: tuple[int, ...] = ()
    """Sent on the source chain, not received on the destination."""

    dst: tuple[int, ...] = ()
    """Sent on the destination chain, not received on the source."""

    @property
    def total(self) -> int:
        """Backlog across both directions."""
        return len(self.src) + len(self.dst)


class LedgerClient(Protocol):
    """
    Protocol for the operations the probes need from the chains.

    Implementers should:
    - Raise LedgerClientError for every expected failure
    - Apply their own timeouts; the probes never time out a call
    """

    async def submit_keep_alive(self, direction: Direction) -> None:
        """Submit one client update for the given direction."""
        ...

    async def get_channel_state(
        self,
        chain_id: str,
        channel_id: str,
        port_id: str,
    ) -> ChannelState:
        """Query the state of one channel end."""
        ...

    async def unrelayed_sequences(self, path: RelayPath) -> UnrelayedSequences:
        """Query unrelayed packet sequences in both directions of a path."""
        ...
