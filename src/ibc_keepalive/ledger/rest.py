"""
Ledger client backed by the chains' REST (LCD) endpoints.

Queries go straight to each chain over HTTP. Update submission is handed to
the relayer binary, since it owns the signing keys.

Unrelayed packets are found the same way a relayer finds them:

1. Resolve both chains from the config and bind them to their path ends
2. Read the latest height of both chains (synchronized headers)
3. List packet commitments on each end at that height
4. Ask the counterparty which of those sequences it has not received
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Final

import httpx

from ibc_keepalive.paths import (
    ChainConfig,
    ChainNotFoundError,
    Direction,
    KeepAliveConfig,
    PathEnd,
    RelayPath,
)

from .client import ChannelState, LedgerClientError, UnrelayedSequences
from .relayer import RelayerCommand

logger = logging.getLogger(__name__)

LATEST_BLOCK_ENDPOINT: Final = "/cosmos/base/tendermint/v1beta1/blocks/latest"
"""Latest block of a chain. Its header height anchors consistent queries."""

CHANNEL_ENDPOINT: Final = "/ibc/core/channel/v1/channels/{channel}/ports/{port}"
"""Channel end query."""

PACKET_COMMITMENTS_ENDPOINT: Final = CHANNEL_ENDPOINT + "/packet_commitments"
"""Packets sent on a channel end whose commitments are still stored."""

UNRECEIVED_PACKETS_ENDPOINT: Final = PACKET_COMMITMENTS_ENDPOINT + "/{sequences}/unreceived_packets"
"""Subset of the given sequences the channel end has not received."""

HEIGHT_HEADER: Final = "x-cosmos-block-height"
"""Request header that pins a query to a block height."""


@dataclass(frozen=True, slots=True)
class _BoundEnd:
    """A path end paired with the chain it lives on."""

    chain: ChainConfig
    end: PathEnd


@dataclass(slots=True)
class RestLedgerClient:
    """LedgerClient implementation over HTTP plus the relayer binary."""

    config: KeepAliveConfig
    """Chain endpoints."""

    submitter: RelayerCommand
    """Runs keep-alive updates."""

    transport: httpx.AsyncBaseTransport | None = None
    """HTTP transport override (injectable for testing)."""

    async def submit_keep_alive(self, direction: Direction) -> None:
        """Submit one client update through the relayer."""
        await self.submitter.submit(direction)

    async def get_channel_state(
        self,
        chain_id: str,
        channel_id: str,
        port_id: str,
    ) -> ChannelState:
        """
        Query the state of one channel end at the chain's latest height.

        Raises:
            LedgerClientError: If the chain is unknown or the query fails.
        """
        chain = self._resolve(chain_id)
        data = await self._get_json(
            chain, CHANNEL_ENDPOINT.format(channel=channel_id, port=port_id)
        )
        try:
            raw = data["channel"]["state"]
        except (KeyError, TypeError) as e:
            raise LedgerClientError(
                f"{chain_id}: channel {channel_id}/{port_id} response has no state"
            ) from e
        return ChannelState.parse(str(raw))

    async def latest_height(self, chain: ChainConfig) -> int:
        """
        Read the latest block height of a chain.

        Raises:
            LedgerClientError: If the query fails or the response is malformed.
        """
        data = await self._get_json(chain, LATEST_BLOCK_ENDPOINT)
        block = data.get("sdk_block") or data.get("block") or {}
        try:
            return int(block["header"]["height"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerClientError(f"{chain.chain_id}: latest block has no height") from e

    async def unrelayed_sequences(self, path: RelayPath) -> UnrelayedSequences:
        """
        Query unrelayed packet sequences in both directions of a path.

        Raises:
            LedgerClientError: If any step fails. The message names the step and chain.
        """
        src = self._bind(path.src)
        dst = self._bind(path.dst)

        # Pin every query to one height per chain.
        #
        # Without this, packets relayed between two queries could be counted
        # as sent but not as received.
        src_height, dst_height = await asyncio.gather(
            self.latest_height(src.chain),
            self.latest_height(dst.chain),
        )

        src_sent = await self._packet_commitments(src, src_height)
        dst_sent = await self._packet_commitments(dst, dst_height)

        return UnrelayedSequences(
            src=await self._unreceived_packets(dst, src_sent, dst_height),
            dst=await self._unreceived_packets(src, dst_sent, src_height),
        )

    def _resolve(self, chain_id: str) -> ChainConfig:
        try:
            return self.config.get_chain(chain_id)
        except ChainNotFoundError as e:
            raise LedgerClientError(str(e)) from e

    def _bind(self, end: PathEnd) -> _BoundEnd:
        return _BoundEnd(chain=self._resolve(end.chain_id), end=end)

    async def _packet_commitments(self, bound: _BoundEnd, height: int) -> list[int]:
        """List sequences of packets sent on a channel end, following pagination."""
        endpoint = PACKET_COMMITMENTS_ENDPOINT.format(
            channel=bound.end.channel_id, port=bound.end.port_id
        )
        sequences: list[int] = []
        next_key: str | None = None

        while True:
            params = {"pagination.key": next_key} if next_key else None
            data = await self._get_json(bound.chain, endpoint, height=height, params=params)
            try:
                sequences.extend(int(c["sequence"]) for c in data.get("commitments") or [])
            except (KeyError, TypeError, ValueError) as e:
                raise LedgerClientError(
                    f"{bound.chain.chain_id}: malformed packet commitments"
                ) from e

            next_key = (data.get("pagination") or {}).get("next_key")
            if not next_key:
                return sequences

    async def _unreceived_packets(
        self,
        receiver: _BoundEnd,
        sequences: list[int],
        height: int,
    ) -> tuple[int, ...]:
        """Filter sent sequences down to those the receiving end has not seen."""
        if not sequences:
            return ()

        endpoint = UNRECEIVED_PACKETS_ENDPOINT.format(
            channel=receiver.end.channel_id,
            port=receiver.end.port_id,
            sequences=",".join(str(s) for s in sequences),
        )
        data = await self._get_json(receiver.chain, endpoint, height=height)
        try:
            return tuple(int(s) for s in data.get("sequences") or [])
        except (TypeError, ValueError) as e:
            raise LedgerClientError(
                f"{receiver.chain.chain_id}: malformed unreceived packets"
            ) from e

    async def _get_json(
        self,
        chain: ChainConfig,
        endpoint: str,
        *,
        height: int | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        GET a JSON object from a chain's REST endpoint.

        Raises:
            LedgerClientError: On network errors, non-2xx statuses and non-object bodies.
        """
        url = f"{chain.rest_address.rstrip('/')}{endpoint}"
        headers = {HEIGHT_HEADER: str(height)} if height is not None else None

        try:
            async with httpx.AsyncClient(timeout=chain.timeout, transport=self.transport) as client:
                response = await client.get(url, headers=headers, params=params)
                response.raise_for_status()
                data = response.json()

        except httpx.RequestError as exc:
            raise LedgerClientError(
                f"{chain.chain_id}: network error while connecting to {exc.request.url}: {exc}"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise LedgerClientError(
                f"{chain.chain_id}: HTTP error {exc.response.status_code}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except ValueError as exc:
            raise LedgerClientError(f"{chain.chain_id}: invalid JSON from {url}") from exc

        if not isinstance(data, dict):
            raise LedgerClientError(f"{chain.chain_id}: expected a JSON object from {url}")
        return data
