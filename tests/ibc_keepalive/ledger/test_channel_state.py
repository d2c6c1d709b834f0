"""Tests for channel state parsing."""

from __future__ import annotations

import pytest

from ibc_keepalive.ledger import ChannelState, LedgerClientError


class TestParse:
    """Tests for ChannelState.parse."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("STATE_OPEN", ChannelState.OPEN),
            ("STATE_INIT", ChannelState.INIT),
            ("STATE_TRYOPEN", ChannelState.TRYOPEN),
            ("STATE_CLOSED", ChannelState.CLOSED),
            ("STATE_UNINITIALIZED_UNSPECIFIED", ChannelState.UNINITIALIZED),
        ],
    )
    def test_protobuf_names(self, raw: str, expected: ChannelState) -> None:
        """Chains report the protobuf enum name."""
        assert ChannelState.parse(raw) is expected

    def test_short_name_case_insensitive(self) -> None:
        """Short names are accepted regardless of case."""
        assert ChannelState.parse("open") is ChannelState.OPEN
        assert ChannelState.parse(" Closed ") is ChannelState.CLOSED

    def test_unknown_state_raises(self) -> None:
        """Unknown states are ledger errors, not silently closed."""
        with pytest.raises(LedgerClientError, match="unknown channel state"):
            ChannelState.parse("STATE_FLUSHING")

    def test_str_is_short_name(self) -> None:
        """Log messages use the short name."""
        assert str(ChannelState.TRYOPEN) == "TRYOPEN"
