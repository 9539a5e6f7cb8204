from __future__ import annotations

import json
from pathlib import Path

import pytest

from meson_bridge.config import DEFAULT_API_URL, ConfigError, load_config


def test_defaults_without_file_or_env():
    config = load_config(env={})

    assert config.api.base_url == DEFAULT_API_URL
    assert config.api.timeout == 30
    assert config.chain.receipt_timeout == 300
    assert config.chain.transfer_contract_artifact is None
    assert config.api.swap_explorer_url("sw1") == "https://explorer.meson.fi/swap/sw1"


def test_file_values_are_overridden_by_env(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "api": {"base_url": "https://relayer.file/api/v1/", "timeout": 12},
                "chain": {"rpc_timeout": 20, "transfer_contract_artifact": "artifacts/TransferToMeson.json"},
            }
        )
    )

    config = load_config(path, env={"MESON_API_TIMEOUT": "7", "MESON_RECEIPT_TIMEOUT": ""})

    assert config.api.base_url == "https://relayer.file/api/v1"
    assert config.api.timeout == 7
    assert config.chain.rpc_timeout == 20
    assert config.chain.receipt_timeout == 300
    assert config.chain.transfer_contract_artifact == Path("artifacts/TransferToMeson.json")
    assert config.to_dict()["api"]["timeout"] == "7"


def test_env_only_configuration():
    config = load_config(env={"MESON_API_URL": "http://localhost:3000/api/v1", "TRANSFER_TO_MESON_ARTIFACT": "/tmp/a.json"})

    assert config.api.base_url == "http://localhost:3000/api/v1"
    assert config.chain.transfer_contract_artifact == Path("/tmp/a.json")


@pytest.mark.parametrize(
    "env,message",
    [
        ({"MESON_API_TIMEOUT": "0"}, "api.timeout must be positive"),
        ({"MESON_RPC_TIMEOUT": "soon"}, "chain.rpc_timeout must be an integer"),
        ({"MESON_API_URL": "relayer.meson.fi"}, "Invalid URL for api.base_url"),
    ],
)
def test_invalid_values_raise_config_error(env, message):
    with pytest.raises(ConfigError, match=message):
        load_config(env=env)


def test_missing_and_invalid_files(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.json", env={})

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigError, match="invalid JSON"):
        load_config(broken, env={})

    wrong_shape = tmp_path / "list.json"
    wrong_shape.write_text("[]")
    with pytest.raises(ConfigError, match="JSON object"):
        load_config(wrong_shape, env={})
