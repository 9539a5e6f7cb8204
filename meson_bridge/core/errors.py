"""Exception hierarchy for the bridge workflow."""

from __future__ import annotations

from typing import Any, Optional


class BridgeError(Exception):
    """Base class for every error raised by the bridge workflow."""


class ApiError(BridgeError):
    """Raised when talking to the relayer fails."""


class ServiceError(ApiError):
    """The relayer answered with an ``{"error": {...}}`` envelope."""

    def __init__(self, message: str, *, code: Optional[int] = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


class ProtocolError(ApiError):
    """The relayer response matched neither the success nor the error envelope."""


class TransportError(ApiError):
    """Connection, timeout or HTTP-level failure reaching a remote endpoint."""


class ValidationError(BridgeError, ValueError):
    """Raised when the requested bridge parameters are rejected."""


class UnsupportedChainError(ValidationError):
    pass


class UnsupportedTokenError(ValidationError):
    pass


class AmountOutOfRangeError(ValidationError):
    pass


class InvalidRequestError(ValidationError):
    """Malformed caller input (chain:token pair, amount, missing key)."""


class CredentialError(BridgeError):
    """Raised for unusable key material or signatures."""


class InvalidKeyError(CredentialError):
    pass


class SigningError(CredentialError):
    pass


class ContractError(BridgeError):
    """Raised by the contract submission pathway."""


class ContractAddressNotFoundError(ContractError):
    pass


class MissingIntermediaryContractError(ContractError):
    pass


class ContractCallError(ContractError):
    pass


class ChainMismatchError(ContractError):
    """The RPC endpoint serves a different chain than the swap source."""


__all__ = [
    "AmountOutOfRangeError",
    "ApiError",
    "BridgeError",
    "ChainMismatchError",
    "ContractAddressNotFoundError",
    "ContractCallError",
    "ContractError",
    "CredentialError",
    "InvalidKeyError",
    "InvalidRequestError",
    "MissingIntermediaryContractError",
    "ProtocolError",
    "ServiceError",
    "SigningError",
    "TransportError",
    "UnsupportedChainError",
    "UnsupportedTokenError",
    "ValidationError",
]
