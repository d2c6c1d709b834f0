"""
Relay path model.

A relay path pairs two IBC endpoints that share a channel:

    src: chain ibc-0, client 07-tendermint-0, channel-0/transfer
    dst: chain ibc-1, client 07-tendermint-0, channel-0/transfer

Each end holds a light client of the *other* chain. Those clients expire
when they are not updated within their trusting period, which closes the
channel for good. Keeping the channel alive means updating both clients
before that happens.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

from pydantic import Field

from ibc_keepalive.types import StrictBaseModel

DEFAULT_PORT_ID: Final = "transfer"
"""Port used by ICS-20 fungible token transfer channels."""


class PathEnd(StrictBaseModel):
    """One side of a relay path."""

    chain_id: str = Field(min_length=1)
    """Chain identifier, e.g. 'cosmoshub-4'."""

    client_id: str = Field(min_length=1)
    """Light client hosted on this chain that tracks the counterparty."""

    connection_id: str | None = None
    """Connection the channel is built on. Informational only."""

    channel_id: str = Field(min_length=1)
    """Channel identifier on this chain."""

    port_id: str = DEFAULT_PORT_ID
    """Port the channel is bound to."""


class Direction(StrictBaseModel):
    """
    One direction of keep-alive updates.

    Updating client `client_id` on `src_chain_id` with the latest header
    of `dst_chain_id`.
    """

    src_chain_id: str
    dst_chain_id: str
    client_id: str

    label: str = ""
    """Gauge suffix for this direction: '', 'src' or 'dst'."""

    def __str__(self) -> str:
        return f"{self.src_chain_id}->{self.dst_chain_id} ({self.client_id})"


class RelayPath(StrictBaseModel):
    """A configured pairing of two endpoints to be kept alive."""

    src: PathEnd
    dst: PathEnd

    def directions(self) -> Iterator[Direction]:
        """
        Yield both update directions of the path.

        The source end's client is refreshed with destination headers and
        vice versa.
        """
        yield Direction(
            src_chain_id=self.src.chain_id,
            dst_chain_id=self.dst.chain_id,
            client_id=self.src.client_id,
            label="src",
        )
        yield Direction(
            src_chain_id=self.dst.chain_id,
            dst_chain_id=self.src.chain_id,
            client_id=self.dst.client_id,
            label="dst",
        )

    def single_direction(self, client_id: str) -> Direction:
        """Build the unlabeled src->dst direction for an explicit client."""
        return Direction(
            src_chain_id=self.src.chain_id,
            dst_chain_id=self.dst.chain_id,
            client_id=client_id,
        )
