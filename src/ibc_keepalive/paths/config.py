"""Keep-alive configuration loader.

Loads chain endpoints, relay paths and relayer settings from a YAML file:

    chains:
      - chain_id: ibc-0
        rest_address: http://localhost:1317
      - chain_id: ibc-1
        rest_address: http://localhost:1318
    paths:
      demo:
        src: {chain_id: ibc-0, client_id: 07-tendermint-0, channel_id: channel-0}
        dst: {chain_id: ibc-1, client_id: 07-tendermint-0, channel_id: channel-0}
    relayer:
      binary: rly
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import Field, ValidationError, model_validator

from ibc_keepalive.types import StrictBaseModel

from .path import RelayPath

DEFAULT_UPDATE_ARGS: Final = (
    "tx",
    "raw",
    "update-client",
    "{src_chain}",
    "{dst_chain}",
    "{client_id}",
)
"""Relayer arguments that submit a single client update."""


class ConfigError(Exception):
    """
    The configuration cannot be used.

    Raised at startup only. Callers abort before any probe starts.
    """


class PathNotFoundError(ConfigError):
    """No path with the requested name is configured."""


class ChainNotFoundError(ConfigError):
    """No chain with the requested identifier is configured."""


class ChainConfig(StrictBaseModel):
    """Connection settings for one chain."""

    chain_id: str = Field(min_length=1)

    rest_address: str = Field(min_length=1)
    """Base URL of the chain's REST (LCD) endpoint."""

    timeout: float = Field(default=10.0, gt=0)
    """Per-request HTTP timeout in seconds."""


class RelayerConfig(StrictBaseModel):
    """How keep-alive transactions are submitted."""

    binary: str = "rly"
    """Relayer executable. Resolved through PATH when not absolute."""

    home: str | None = None
    """Relayer home directory, passed as --home when set."""

    update_args: tuple[str, ...] = DEFAULT_UPDATE_ARGS
    """
    Argument template for one client update.

    Placeholders: {src_chain}, {dst_chain}, {client_id}.
    """


class KeepAliveConfig(StrictBaseModel):
    """Everything the monitor needs to know about the outside world."""

    chains: list[ChainConfig] = Field(default_factory=list)
    paths: dict[str, RelayPath] = Field(default_factory=dict)
    relayer: RelayerConfig = Field(default_factory=RelayerConfig)

    @model_validator(mode="after")
    def validate_unique_chain_ids(self) -> KeepAliveConfig:
        """Reject duplicated chain entries."""
        seen: set[str] = set()
        for chain in self.chains:
            if chain.chain_id in seen:
                raise ValueError(f"chain {chain.chain_id!r} is configured more than once")
            seen.add(chain.chain_id)
        return self

    def get_path(self, name: str) -> RelayPath:
        """
        Look up a relay path by name.

        Raises:
            PathNotFoundError: If no path has that name.
        """
        try:
            return self.paths[name]
        except KeyError:
            known = ", ".join(sorted(self.paths)) or "none"
            raise PathNotFoundError(f"path {name!r} not found (configured: {known})") from None

    def get_chain(self, chain_id: str) -> ChainConfig:
        """
        Look up a chain by identifier.

        Raises:
            ChainNotFoundError: If the chain is not configured.
        """
        for chain in self.chains:
            if chain.chain_id == chain_id:
                return chain
        raise ChainNotFoundError(f"chain {chain_id!r} not found in config")

    @classmethod
    def from_dict(cls, data: Any) -> KeepAliveConfig:
        """
        Validate already-parsed config data.

        Raises:
            ConfigError: If the data fails validation.
        """
        if data is None:
            data = {}
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"invalid config: {e}") from e

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> KeepAliveConfig:
        """
        Load configuration from a YAML file.

        Raises:
            ConfigError: If the file is missing, not valid YAML, or fails validation.
        """
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"config {path} is not valid YAML: {e}") from e
        return cls.from_dict(data)
