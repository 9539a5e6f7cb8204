from __future__ import annotations

import pytest

from conftest import (
    API_URL,
    PRIVATE_KEY,
    RECIPIENT,
    FakeContractService,
    FakeSession,
    chains_payload,
    encode_result,
    limits_payload,
)
from meson_bridge.cli.main import main
from meson_bridge.core.api import MesonApiClient
from meson_bridge.core.bridge import BridgeExecutor

ENCODED = encode_result()["encoded"]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PRIVATE_KEY", raising=False)
    monkeypatch.setenv("MESON_API_URL", API_URL)


@pytest.fixture
def cli_session():
    return FakeSession(
        {
            ("GET", "/list"): {"result": chains_payload()},
            ("GET", "/limits"): {"result": limits_payload()},
            ("POST", "/swap"): {"result": encode_result()},
            ("POST", f"/swap/{ENCODED}"): {"result": {"swapId": "sw1"}},
        }
    )


@pytest.fixture
def factory(cli_session):
    def build(config):
        return BridgeExecutor(config=config, api=MesonApiClient(config.api, session=cli_session))

    return build


def _bridge_args(*extra):
    return ["bridge", "--from", "eth:usdc", "--to", "base:usdc", "--amount", "5", "--recipient", RECIPIENT, *extra]


def test_bridge_command_submits(factory, cli_session, capsys):
    code = main(_bridge_args("--private-key", PRIVATE_KEY), executor_factory=factory)

    out = capsys.readouterr().out
    assert code == 0
    assert "Swap ID: sw1" in out
    assert "https://explorer.meson.fi/swap/sw1" in out
    assert cli_session.paths("POST") == ["/swap", f"/swap/{ENCODED}"]


def test_bridge_command_reads_key_from_env(factory, monkeypatch, capsys):
    monkeypatch.setenv("PRIVATE_KEY", PRIVATE_KEY)

    code = main(_bridge_args("--dry-run"), executor_factory=factory)

    out = capsys.readouterr().out
    assert code == 0
    assert "-- DRY RUN --" in out
    assert PRIVATE_KEY not in out


def test_missing_private_key_exits_with_error(factory, cli_session, capsys):
    code = main(_bridge_args(), executor_factory=factory)

    err = capsys.readouterr().err
    assert code == 1
    assert "Private key must be provided" in err
    assert cli_session.calls == []


def test_validation_errors_go_to_stderr(factory, capsys):
    code = main(
        ["bridge", "--from", "sol:usdc", "--to", "base:usdc", "--amount", "5", "--recipient", RECIPIENT,
         "--private-key", PRIVATE_KEY],
        executor_factory=factory,
    )

    assert code == 1
    assert "Source chain 'sol' is not supported." in capsys.readouterr().err


def test_bridge_contract_dry_run(factory, cli_session, capsys):
    code = main(
        [
            "bridge-contract",
            "--from", "base:eth",
            "--to", "eth:eth",
            "--amount", "0.01",
            "--recipient", RECIPIENT,
            "--rpc-url", "http://localhost:8545",
            "--private-key", PRIVATE_KEY,
            "--dry-run",
        ],
        executor_factory=factory,
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "Meson Contract Address: 0xAAA" in out
    assert "TransferToMeson Contract: not requested" in out
    assert cli_session.calls[-1]["json"]["fromContract"] is True


def test_bridge_contract_requires_rpc_url(factory):
    with pytest.raises(SystemExit):
        main(["bridge-contract", "--from", "base:eth", "--to", "eth:eth", "--amount", "1", "--recipient", RECIPIENT],
             executor_factory=factory)


def test_chains_command_lists_registry(factory, capsys):
    code = main(["chains"], executor_factory=factory)

    out = capsys.readouterr().out
    assert code == 0
    assert "bsc - BNB Chain [chainId 0x38]" in out
    assert "(destination only)" in out
    assert "bsc:usdc limits 1 - 10000" in out


def test_config_errors_are_reported(factory, monkeypatch, capsys):
    monkeypatch.setenv("MESON_API_TIMEOUT", "-1")

    assert main(["chains"], executor_factory=factory) == 1
    assert "api.timeout must be positive" in capsys.readouterr().err


def test_commands_close_http_session(factory, cli_session):
    assert main(["chains"], executor_factory=factory) == 0
    assert cli_session.closed


def test_failed_commands_close_http_session(factory, cli_session, capsys):
    assert main(_bridge_args(), executor_factory=factory) == 1
    assert cli_session.closed


def test_token_for_index_command(cli_session, capsys):
    service = FakeContractService()

    def build(config):
        return BridgeExecutor(
            config=config,
            api=MesonApiClient(config.api, session=cli_session),
            contract_factory=lambda url: service,
        )

    code = main(
        ["token-for-index", "--rpc-url", "http://localhost:8545", "--meson-contract", "0xAAA", "--index", "0x02"],
        executor_factory=build,
    )

    assert code == 0
    assert capsys.readouterr().out.strip() == "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
    assert service.calls[-1] == ("token_for_index", "0xAAA", 2)
    assert cli_session.calls == []


@pytest.mark.parametrize("index", ["256", "-1", "usdc"])
def test_token_for_index_rejects_bad_index(factory, index):
    with pytest.raises(SystemExit):
        main(["token-for-index", "--rpc-url", "http://localhost:8545", "--meson-contract", "0xAAA", "--index", index],
             executor_factory=factory)
