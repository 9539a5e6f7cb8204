"""Typed records for relayer data and bridge requests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping, Optional, Tuple

from meson_bridge.core.errors import ProtocolError


def _require(data: Mapping[str, Any], key: str, context: str) -> Any:
    if not isinstance(data, Mapping):
        raise ProtocolError(f"{context} must be an object, got {type(data).__name__}")
    if key not in data:
        raise ProtocolError(f"{context} missing required key: {key}")
    return data[key]


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Token:
    """Token entry scoped to a chain."""

    id: str
    addr: Optional[str] = None
    min: Optional[str] = None
    max: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Token":
        return cls(
            id=str(_require(data, "id", "token")),
            addr=_optional_str(data.get("addr")),
            min=_optional_str(data.get("min")),
            max=_optional_str(data.get("max")),
        )


def _tokens(data: Mapping[str, Any], context: str) -> Tuple[Token, ...]:
    tokens = data.get("tokens") or []
    if not isinstance(tokens, list):
        raise ProtocolError(f"{context} tokens must be a list")
    return tuple(Token.from_dict(token) for token in tokens)


@dataclass(frozen=True)
class Chain:
    """Chain published by the relayer's ``/list`` endpoint."""

    id: str
    name: str
    chain_id: str
    address: Optional[str]
    destination_only: bool = False
    tokens: Tuple[Token, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Chain":
        chain_key = str(_require(data, "id", "chain"))
        return cls(
            id=chain_key,
            name=str(data.get("name") or chain_key),
            chain_id=str(data.get("chainId") or ""),
            address=_optional_str(data.get("address")),
            destination_only=bool(data.get("destinationChainOnly", False)),
            tokens=_tokens(data, f"chain {chain_key}"),
        )

    def find_token(self, token_id: str) -> Optional[Token]:
        return next((token for token in self.tokens if token.id == token_id), None)

    @property
    def numeric_chain_id(self) -> Optional[int]:
        """Return ``chain_id`` as an integer (it is published as hex, e.g. ``0x38``)."""
        if not self.chain_id:
            return None
        try:
            return int(self.chain_id, 0)
        except ValueError:
            return None


@dataclass(frozen=True)
class ChainLimit:
    """Per-token swap limits published by ``/limits``."""

    id: str
    name: str
    tokens: Tuple[Token, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChainLimit":
        chain_key = str(_require(data, "id", "chain limit"))
        return cls(
            id=chain_key,
            name=str(data.get("name") or chain_key),
            tokens=_tokens(data, f"limits for {chain_key}"),
        )

    def find_token(self, token_id: str) -> Optional[Token]:
        return next((token for token in self.tokens if token.id == token_id), None)


@dataclass(frozen=True)
class SwapFee:
    service_fee: str
    lp_fee: str
    total_fee: str

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SwapFee":
        data = data or {}
        return cls(
            service_fee=str(data.get("serviceFee", "0")),
            lp_fee=str(data.get("lpFee", "0")),
            total_fee=str(data.get("totalFee", "0")),
        )

    def to_dict(self) -> dict:
        return {"serviceFee": self.service_fee, "lpFee": self.lp_fee, "totalFee": self.total_fee}


@dataclass(frozen=True)
class ConvertedAmount:
    amount: str
    token: str


@dataclass(frozen=True)
class SigningRequest:
    message: str
    hash: str


@dataclass(frozen=True)
class EncodedSwap:
    """Relayer-issued encoding of one specific swap request."""

    encoded: str
    recipient: Optional[str]
    fee: SwapFee
    converted: Optional[ConvertedAmount] = None
    signing_request: Optional[SigningRequest] = None
    from_address: Optional[str] = None
    from_contract: Optional[str] = None
    initiator: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EncodedSwap":
        if not isinstance(data, Mapping):
            raise ProtocolError("encoded swap result must be an object")

        converted = data.get("converted")
        signing = data.get("signingRequest")
        return cls(
            encoded=str(data.get("encoded") or ""),
            recipient=_optional_str(data.get("recipient")),
            fee=SwapFee.from_dict(data.get("fee")),
            converted=(
                ConvertedAmount(amount=str(converted.get("amount", "")), token=str(converted.get("token", "")))
                if isinstance(converted, Mapping)
                else None
            ),
            signing_request=(
                SigningRequest(message=str(signing.get("message", "")), hash=str(signing.get("hash", "")))
                if isinstance(signing, Mapping) and signing.get("hash")
                else None
            ),
            from_address=_optional_str(data.get("fromAddress")),
            from_contract=_optional_str(data.get("fromContract")),
            initiator=_optional_str(data.get("initiator")),
        )

    def with_initiator(self, initiator: str) -> "EncodedSwap":
        """Return a copy carrying ``initiator`` unless the relayer already set one."""
        if self.initiator:
            return self
        return replace(self, initiator=initiator)

    @property
    def encoded_int(self) -> int:
        """The encoded swap as the ``uint256`` the contracts expect."""
        return int(self.encoded, 16)


@dataclass(frozen=True)
class SubmissionResult:
    swap_id: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SubmissionResult":
        return cls(swap_id=str(_require(data, "swapId", "submission result")))


@dataclass(frozen=True)
class ChainToken:
    """A ``chain:token`` pair as typed on the command line."""

    chain: str
    token: str

    def __str__(self) -> str:
        return f"{self.chain}:{self.token}"


@dataclass(frozen=True)
class BridgeRequest:
    """Caller input for the direct (signed) bridge workflow."""

    source: ChainToken
    destination: ChainToken
    amount: str
    recipient: str
    private_key: str = field(repr=False)
    dry_run: bool = False


@dataclass(frozen=True)
class ContractBridgeRequest(BridgeRequest):
    """Caller input for the bridge workflow routed through a transfer contract."""

    rpc_url: str = ""
    meson_contract: Optional[str] = None
    transfer_contract: Optional[str] = None
    deploy_if_missing: bool = False
    notify_relayer: bool = False


STATUS_SUBMITTED = "submitted"
STATUS_DRY_RUN = "dry_run"

TRANSFER_CONTRACT_PROVIDED = "provided"
TRANSFER_CONTRACT_DEPLOYED = "deployed"
TRANSFER_CONTRACT_WILL_DEPLOY = "will deploy"
TRANSFER_CONTRACT_NOT_REQUESTED = "not requested"


@dataclass(frozen=True)
class BridgeOutcome:
    """Terminal state reached by either bridge workflow."""

    status: str
    encoded_swap: EncodedSwap
    from_address: str
    recipient: str
    signature: Optional[str] = None
    swap_id: Optional[str] = None
    tx_hash: Optional[str] = None
    meson_contract: Optional[str] = None
    transfer_contract: Optional[str] = None
    transfer_contract_status: Optional[str] = None
    explorer_url: Optional[str] = None

    @property
    def dry_run(self) -> bool:
        return self.status == STATUS_DRY_RUN


def parse_chains(payload: Any) -> List[Chain]:
    if not isinstance(payload, list):
        raise ProtocolError("Expected a list of chains from the relayer")
    return [Chain.from_dict(item) for item in payload]


def parse_limits(payload: Any) -> List[ChainLimit]:
    if not isinstance(payload, list):
        raise ProtocolError("Expected a list of chain limits from the relayer")
    return [ChainLimit.from_dict(item) for item in payload]


__all__ = [
    "BridgeOutcome",
    "BridgeRequest",
    "Chain",
    "ChainLimit",
    "ChainToken",
    "ContractBridgeRequest",
    "ConvertedAmount",
    "EncodedSwap",
    "STATUS_DRY_RUN",
    "STATUS_SUBMITTED",
    "SigningRequest",
    "SubmissionResult",
    "SwapFee",
    "TRANSFER_CONTRACT_DEPLOYED",
    "TRANSFER_CONTRACT_NOT_REQUESTED",
    "TRANSFER_CONTRACT_PROVIDED",
    "TRANSFER_CONTRACT_WILL_DEPLOY",
    "Token",
    "parse_chains",
    "parse_limits",
]
