"""On-chain side of the contract bridge pathway."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from web3 import Web3
from web3.exceptions import ContractLogicError

from meson_bridge.config import ChainConfig
from meson_bridge.contracts import (
    MESON_ABI_FILE,
    TRANSFER_TO_MESON_ABI_FILE,
    load_contract_abi,
    load_contract_artifact,
)
from meson_bridge.core.errors import ContractAddressNotFoundError, ContractCallError, InvalidRequestError
from meson_bridge.core.models import Chain, EncodedSwap
from meson_bridge.core.utils import ensure_web3_connected, get_logger

LOGGER = get_logger("meson_bridge.contract")

GAS_BUFFER_NUMERATOR = 12
GAS_BUFFER_DENOMINATOR = 10


def compute_gas_limit(estimate: int) -> int:
    """Add a 20% buffer to a gas estimate, truncating to an integer."""
    return int(estimate) * GAS_BUFFER_NUMERATOR // GAS_BUFFER_DENOMINATOR


def to_checksum(value: str, *, field_name: str) -> str:
    try:
        return Web3.to_checksum_address(value)
    except Exception as exc:  # web3 raises ValueError for malformed inputs
        raise InvalidRequestError(f"Invalid address for {field_name}: {value}") from exc


def find_contract_address(chains: Sequence[Chain], chain_id: str) -> Optional[str]:
    """Return the relayer contract address published for ``chain_id``."""
    chain = next((c for c in chains if c.id == chain_id), None)
    return chain.address if chain else None


def resolve_contract_address(chains: Sequence[Chain], chain_id: str, override: Optional[str] = None) -> str:
    """Resolve the Meson contract: explicit override first, then the chain listing."""
    candidates = (
        ("--meson-contract", override),
        ("chain data", find_contract_address(chains, chain_id)),
    )
    for source, address in candidates:
        if address:
            LOGGER.debug("Meson contract for %s resolved from %s: %s", chain_id, source, address)
            return address
    raise ContractAddressNotFoundError(
        f"Could not find Meson contract address for chain {chain_id}. "
        "Please provide it with --meson-contract option."
    )


class MesonContractService:
    """Deploys and calls the TransferToMeson contract on a source chain."""

    def __init__(self, web3: Web3, config: Optional[ChainConfig] = None) -> None:
        self.web3 = web3
        self.config = config or ChainConfig()

    @classmethod
    def from_rpc_url(cls, rpc_url: str, config: Optional[ChainConfig] = None) -> "MesonContractService":
        config = config or ChainConfig()
        provider = Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": config.rpc_timeout})
        return cls(Web3(provider), config)

    def ensure_chain(self, expected_chain_id: Optional[int]) -> None:
        """Fail unless the RPC endpoint is reachable and serves ``expected_chain_id``."""
        ensure_web3_connected(self.web3, expected_chain_id=expected_chain_id)

    def token_for_index(self, meson_contract: str, index: int) -> str:
        """Read ``tokenForIndex`` from the Meson contract."""
        contract = self.web3.eth.contract(
            address=to_checksum(meson_contract, field_name="meson contract"),
            abi=load_contract_abi(MESON_ABI_FILE),
        )
        try:
            return contract.functions.tokenForIndex(index).call()
        except Exception as exc:  # web3 surfaces RPC failures as several exception types
            raise ContractCallError(f"tokenForIndex({index}) failed: {exc}") from exc

    def deploy_transfer_contract(self, meson_contract: str, account, *, artifact: Optional[Path] = None) -> str:
        """Deploy a TransferToMeson contract bound to ``meson_contract`` and wait for it."""
        abi, bytecode = load_contract_artifact(artifact or self.config.transfer_contract_artifact)
        meson_address = to_checksum(meson_contract, field_name="meson contract")
        LOGGER.info("Deploying TransferToMeson contract for Meson contract %s", meson_address)

        factory = self.web3.eth.contract(abi=abi, bytecode=bytecode)
        try:
            tx = factory.constructor(meson_address).build_transaction(self._tx_params(account))
            receipt = self._sign_and_wait(tx, account)
        except ContractCallError:
            raise
        except Exception as exc:  # web3/eth-account raise many unrelated types
            raise ContractCallError(f"Failed to deploy TransferToMeson contract: {exc}") from exc

        deployed = receipt.get("contractAddress")
        if not deployed:
            raise ContractCallError("Deployment receipt did not include a contract address")
        LOGGER.info("TransferToMeson contract deployed at %s", deployed)
        return Web3.to_checksum_address(deployed)

    def call_transfer_to_meson(
        self,
        transfer_contract: str,
        encoded_swap: EncodedSwap,
        account,
        amount: str,
    ) -> str:
        """Post ``encoded_swap`` through ``transferToMeson`` and return the confirmed tx hash."""
        if not encoded_swap.initiator:
            raise ContractCallError("Encoded swap has no initiator")

        contract = self.web3.eth.contract(
            address=to_checksum(transfer_contract, field_name="transfer contract"),
            abi=load_contract_abi(TRANSFER_TO_MESON_ABI_FILE),
        )
        try:
            value = Web3.to_wei(Decimal(amount), "ether")
            call = contract.functions.transferToMeson(
                encoded_swap.encoded_int,
                Web3.to_checksum_address(encoded_swap.initiator),
            )
            LOGGER.debug(
                "Calling transferToMeson on %s (encoded=%s initiator=%s value=%s)",
                contract.address,
                encoded_swap.encoded,
                encoded_swap.initiator,
                value,
            )

            estimate = call.estimate_gas({"from": account.address, "value": value})
            gas_limit = compute_gas_limit(estimate)
            LOGGER.info("Gas estimate %s, sending with limit %s", estimate, gas_limit)

            params = self._tx_params(account)
            params.update({"value": value, "gas": gas_limit})
            tx = call.build_transaction(params)
            receipt = self._sign_and_wait(tx, account)
        except ContractCallError:
            raise
        except ContractLogicError as exc:
            raise ContractCallError(f"transferToMeson would revert: {exc}") from exc
        except Exception as exc:  # web3/eth-account raise many unrelated types
            raise ContractCallError(f"transferToMeson call failed: {exc}") from exc

        tx_hash = Web3.to_hex(receipt["transactionHash"])
        LOGGER.info(
            "Transaction confirmed in block %s (gasUsed=%s)",
            receipt.get("blockNumber"),
            receipt.get("gasUsed"),
        )
        return tx_hash

    def _tx_params(self, account) -> Dict[str, Any]:
        return {
            "from": account.address,
            "nonce": self.web3.eth.get_transaction_count(account.address),
            "chainId": self.web3.eth.chain_id,
        }

    def _sign_and_wait(self, tx: Dict[str, Any], account) -> Any:
        signed = account.sign_transaction(tx)
        tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hex = Web3.to_hex(tx_hash)
        LOGGER.info("Transaction sent: %s, awaiting confirmation", tx_hex)

        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.config.receipt_timeout)
        except Exception as exc:  # web3.exceptions.TimeExhausted and RPC errors
            raise ContractCallError(
                f"Transaction {tx_hex} was broadcast but not confirmed: {exc}. Track it on the source chain explorer."
            ) from exc
        if receipt.get("status") != 1:
            raise ContractCallError(f"Transaction {tx_hex} reverted (status={receipt.get('status')})")
        return receipt


__all__ = [
    "GAS_BUFFER_DENOMINATOR",
    "GAS_BUFFER_NUMERATOR",
    "MesonContractService",
    "compute_gas_limit",
    "find_contract_address",
    "resolve_contract_address",
    "to_checksum",
]
