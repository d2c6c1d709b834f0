"""Tests for loading the keep-alive configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from ibc_keepalive.paths import (
    ChainNotFoundError,
    ConfigError,
    KeepAliveConfig,
    PathNotFoundError,
    RelayerConfig,
)
from tests.ibc_keepalive.helpers.builders import make_config, make_config_data


class TestFromYamlFile:
    """Tests for reading config files from disk."""

    def test_loads_chains_paths_and_relayer(self, tmp_path: Path) -> None:
        """A well-formed file produces a fully populated config."""
        data = make_config_data(relayer={"binary": "/usr/local/bin/rly", "home": "/data/rly"})
        config_file = tmp_path / "keepalive.yaml"
        config_file.write_text(yaml.safe_dump(data), encoding="utf-8")

        config = KeepAliveConfig.from_yaml_file(config_file)

        assert [c.chain_id for c in config.chains] == ["ibc-0", "ibc-1"]
        assert config.get_path("demo").src.channel_id == "channel-0"
        assert config.relayer.binary == "/usr/local/bin/rly"
        assert config.relayer.home == "/data/rly"

    def test_missing_file_raises_config_error(self, tmp_path: Path) -> None:
        """A missing file is a startup error, not an OSError."""
        with pytest.raises(ConfigError, match="cannot read config"):
            KeepAliveConfig.from_yaml_file(tmp_path / "absent.yaml")

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        """Unparseable YAML is reported as a config error."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("chains: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="not valid YAML"):
            KeepAliveConfig.from_yaml_file(config_file)

    def test_empty_file_yields_empty_config(self, tmp_path: Path) -> None:
        """An empty file is valid but configures nothing."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("", encoding="utf-8")

        config = KeepAliveConfig.from_yaml_file(config_file)

        assert config.chains == []
        assert config.paths == {}


class TestValidation:
    """Tests for config validation rules."""

    def test_unknown_keys_are_rejected(self) -> None:
        """Typos in keys fail loudly."""
        with pytest.raises(ConfigError, match="invalid config"):
            KeepAliveConfig.from_dict(make_config_data(chainz=[]))

    def test_duplicate_chain_ids_are_rejected(self) -> None:
        """Each chain may only be configured once."""
        chains = [
            {"chain_id": "ibc-0", "rest_address": "http://a:1317"},
            {"chain_id": "ibc-0", "rest_address": "http://b:1317"},
        ]
        with pytest.raises(ConfigError, match="more than once"):
            KeepAliveConfig.from_dict(make_config_data(chains=chains))

    def test_non_positive_timeout_is_rejected(self) -> None:
        """HTTP timeouts must be positive."""
        chains = [{"chain_id": "ibc-0", "rest_address": "http://a:1317", "timeout": 0}]
        with pytest.raises(ConfigError):
            KeepAliveConfig.from_dict(make_config_data(chains=chains))

    def test_port_defaults_to_transfer(self) -> None:
        """Path ends without a port use the transfer port."""
        config = make_config()

        assert config.get_path("demo").src.port_id == "transfer"
        assert config.get_path("demo").dst.port_id == "transfer"

    def test_relayer_defaults(self) -> None:
        """Without a relayer section, rly's raw update-client command is used."""
        relayer = make_config().relayer

        assert relayer == RelayerConfig()
        assert relayer.binary == "rly"
        assert relayer.update_args[:3] == ("tx", "raw", "update-client")

    def test_update_args_list_becomes_tuple(self) -> None:
        """YAML lists are accepted for the argument template."""
        config = make_config(relayer={"update_args": ["tx", "update-clients", "demo"]})

        assert config.relayer.update_args == ("tx", "update-clients", "demo")

    def test_config_is_immutable(self) -> None:
        """Loaded configuration cannot be modified."""
        config = make_config()

        with pytest.raises(ValidationError):
            config.relayer = RelayerConfig(binary="other")  # type: ignore[misc]


class TestLookups:
    """Tests for path and chain lookups."""

    def test_unknown_path_lists_configured_paths(self) -> None:
        """The error names the paths that do exist."""
        with pytest.raises(PathNotFoundError, match="'missing' not found .*demo"):
            make_config().get_path("missing")

    def test_unknown_path_is_a_config_error(self) -> None:
        """Callers can handle every startup failure as ConfigError."""
        assert issubclass(PathNotFoundError, ConfigError)
        assert issubclass(ChainNotFoundError, ConfigError)

    def test_get_chain(self) -> None:
        """Chains are found by ID."""
        chain = make_config().get_chain("ibc-1")

        assert chain.rest_address == "http://ibc-1.test:1317"
        assert chain.timeout == 5.0

    def test_unknown_chain_raises(self) -> None:
        """Unknown chain IDs raise ChainNotFoundError."""
        with pytest.raises(ChainNotFoundError, match="ibc-9"):
            make_config().get_chain("ibc-9")
