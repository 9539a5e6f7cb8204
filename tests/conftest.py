from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

# Well-known development key (Hardhat/Anvil account #0), never funded on mainnet.
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
TRANSFER_CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
SIGNING_HASH = "0x" + "ab" * 32
API_URL = "https://relayer.test/api/v1"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else "json"
        self.reason = "OK" if status_code < 400 else "Error"

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Routes ``(method, path)`` to canned responses and records every call."""

    def __init__(self, routes: Optional[Dict[Tuple[str, str], Any]] = None):
        self.routes: Dict[Tuple[str, str], Any] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def close(self):
        self.closed = True

    def request(self, method, url, json=None, headers=None, timeout=None):  # noqa: A002 - mirrors requests
        path = url[len(API_URL):] if url.startswith(API_URL) else url
        self.calls.append({"method": method, "path": path, "json": json, "headers": headers, "timeout": timeout})
        try:
            route = self.routes[(method, path)]
        except KeyError:
            raise AssertionError(f"unexpected request {method} {path}")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(200, route)

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [c["path"] for c in self.calls if method is None or c["method"] == method]


def chains_payload() -> List[Dict[str, Any]]:
    return [
        {
            "id": "eth",
            "name": "Ethereum",
            "chainId": "0x1",
            "address": "0x25aB3Efd52e6470681CE037cD546Dc60726948D3",
            "tokens": [{"id": "usdc", "addr": "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"}, {"id": "eth"}],
        },
        {
            "id": "base",
            "name": "Base",
            "chainId": "0x2105",
            "address": "0xAAA",
            "tokens": [{"id": "eth"}, {"id": "usdc"}],
        },
        {
            "id": "bsc",
            "name": "BNB Chain",
            "chainId": "0x38",
            "address": "0x25aB3Efd52e6470681CE037cD546Dc60726948D3",
            "destinationChainOnly": True,
            "tokens": [{"id": "usdc"}, {"id": "eth"}],
        },
    ]


def limits_payload() -> List[Dict[str, Any]]:
    return [
        {"id": "bsc", "name": "BNB Chain", "tokens": [{"id": "usdc", "min": "1", "max": "10000"}]},
    ]


def encode_result(**overrides) -> Dict[str, Any]:
    result = {
        "encoded": "0x00000000000000000000000000000000000000000000000000abc",
        "recipient": RECIPIENT,
        "fee": {"serviceFee": "0.01", "lpFee": "0.02", "totalFee": "0.03"},
        "signingRequest": {"message": "Sign to bridge", "hash": SIGNING_HASH},
    }
    result.update(overrides)
    return result


@pytest.fixture
def session() -> FakeSession:
    return FakeSession(
        {
            ("GET", "/list"): {"result": chains_payload()},
            ("GET", "/limits"): {"result": limits_payload()},
            ("POST", "/swap"): {"result": encode_result()},
        }
    )


@pytest.fixture
def api(session):
    from meson_bridge.config import ApiConfig
    from meson_bridge.core.api import MesonApiClient

    return MesonApiClient(ApiConfig(base_url=API_URL, timeout=5), session=session)


class FakeContractService:
    def __init__(
        self,
        deployed: str = TRANSFER_CONTRACT,
        tx_hash: str = "0x" + "11" * 32,
        ensure_error: Optional[Exception] = None,
    ):
        self.deployed = deployed
        self.tx_hash = tx_hash
        self.ensure_error = ensure_error
        self.calls: List[Tuple[str, Any]] = []

    def ensure_chain(self, expected_chain_id):
        self.calls.append(("ensure_chain", expected_chain_id))
        if self.ensure_error is not None:
            raise self.ensure_error

    def token_for_index(self, meson_contract, index):
        self.calls.append(("token_for_index", meson_contract, index))
        return "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"

    def deploy_transfer_contract(self, meson_contract, account):
        self.calls.append(("deploy", meson_contract, account.address))
        return self.deployed

    def call_transfer_to_meson(self, transfer_contract, encoded_swap, account, amount):
        self.calls.append(("transfer", transfer_contract, encoded_swap, account.address, amount))
        return self.tx_hash

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]
