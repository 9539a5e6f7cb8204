"""Core domain logic for the bridge workflows."""

from .api import MesonApiClient
from .bridge import BridgeExecutor
from .contract import MesonContractService, compute_gas_limit, resolve_contract_address
from .signature import derive_address, sign_hash
from .validation import validate_amount, validate_chain_token

__all__ = [
    "BridgeExecutor",
    "MesonApiClient",
    "MesonContractService",
    "compute_gas_limit",
    "derive_address",
    "resolve_contract_address",
    "sign_hash",
    "validate_amount",
    "validate_chain_token",
]
