"""Bridge workflows: direct signed submission and TransferToMeson contract routing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional

from meson_bridge.config import MesonConfig
from meson_bridge.core.api import MesonApiClient
from meson_bridge.core.contract import MesonContractService, resolve_contract_address
from meson_bridge.core.errors import (
    ApiError,
    ContractCallError,
    MissingIntermediaryContractError,
    ProtocolError,
    SigningError,
    TransportError,
)
from meson_bridge.core.models import (
    STATUS_DRY_RUN,
    STATUS_SUBMITTED,
    TRANSFER_CONTRACT_DEPLOYED,
    TRANSFER_CONTRACT_NOT_REQUESTED,
    TRANSFER_CONTRACT_PROVIDED,
    TRANSFER_CONTRACT_WILL_DEPLOY,
    BridgeOutcome,
    BridgeRequest,
    Chain,
    ChainLimit,
    ContractBridgeRequest,
    EncodedSwap,
)
from meson_bridge.core.signature import load_account, recover_hash_signer, sign_hash
from meson_bridge.core.utils import get_logger
from meson_bridge.core.validation import parse_amount, validate_amount, validate_chain_token

LOGGER = get_logger("meson_bridge.bridge")

ContractServiceFactory = Callable[[str], MesonContractService]


@dataclass(frozen=True)
class PreparedBridge:
    """Registry snapshot and validated inputs shared by both workflows."""

    from_address: str
    amount: Decimal
    chains: List[Chain]
    limits: List[ChainLimit]
    source_chain: Chain
    destination_chain: Chain


class BridgeExecutor:
    """High-level orchestrator for both bridge pathways."""

    def __init__(
        self,
        *,
        config: Optional[MesonConfig] = None,
        api: Optional[MesonApiClient] = None,
        contract_factory: Optional[ContractServiceFactory] = None,
    ) -> None:
        self.config = config or MesonConfig()
        self.api = api or MesonApiClient(self.config.api)
        self.contract_factory = contract_factory or (
            lambda url: MesonContractService.from_rpc_url(url, self.config.chain)
        )

    def prepare(self, request: BridgeRequest) -> PreparedBridge:
        """Derive the sender, fetch the registry and validate the request against it."""
        from_address = load_account(request.private_key).address
        LOGGER.info("Using source address: %s", from_address)
        amount = parse_amount(request.amount)

        LOGGER.info("Fetching supported chains and tokens...")
        chains = self.api.list_chains()
        LOGGER.info("Fetching swap limits...")
        limits = self.api.list_limits()

        source_chain, _ = validate_chain_token(chains, request.source.chain, request.source.token, "source")
        destination_chain, _ = validate_chain_token(
            chains, request.destination.chain, request.destination.token, "destination"
        )
        validate_amount(limits, request.destination.chain, request.destination.token, amount)
        LOGGER.info("Input validation passed.")

        return PreparedBridge(
            from_address=from_address,
            amount=amount,
            chains=chains,
            limits=limits,
            source_chain=source_chain,
            destination_chain=destination_chain,
        )

    def run_bridge(self, request: BridgeRequest) -> BridgeOutcome:
        """Encode, sign and submit a swap for the relayer to execute."""
        prepared = self.prepare(request)
        from_address = prepared.from_address

        LOGGER.info("Encoding swap: %s %s -> %s for %s", request.amount, request.source, request.destination, request.recipient)
        encoded = self.api.encode_swap(
            str(request.source),
            str(request.destination),
            request.amount,
            from_address,
            request.recipient,
        )
        if not encoded.encoded or not encoded.signing_request:
            raise ProtocolError("Failed to encode swap: missing required data in response")
        self._log_encoded(encoded)
        LOGGER.info("Hash to sign: %s", encoded.signing_request.hash)

        LOGGER.info("Signing swap...")
        signature = sign_hash(encoded.signing_request.hash, request.private_key)
        recovered = recover_hash_signer(encoded.signing_request.hash, signature)
        if recovered != from_address:
            raise SigningError(f"Signature recovers to {recovered}, expected {from_address}")
        LOGGER.info("Signature: %s...", signature[:20])

        if request.dry_run:
            LOGGER.info("Dry run: swap encoded and signed, but not submitted.")
            return BridgeOutcome(
                status=STATUS_DRY_RUN,
                encoded_swap=encoded,
                from_address=from_address,
                recipient=request.recipient,
                signature=signature,
            )

        LOGGER.info("Submitting swap...")
        submission = self.api.submit_swap(encoded.encoded, from_address, request.recipient, signature)
        LOGGER.info("Swap submitted. Swap ID: %s", submission.swap_id)
        return BridgeOutcome(
            status=STATUS_SUBMITTED,
            encoded_swap=encoded,
            from_address=from_address,
            recipient=request.recipient,
            signature=signature,
            swap_id=submission.swap_id,
            explorer_url=self.config.api.swap_explorer_url(submission.swap_id),
        )

    def run_contract_bridge(self, request: ContractBridgeRequest) -> BridgeOutcome:
        """Post a swap on-chain through a TransferToMeson contract."""
        prepared = self.prepare(request)
        from_address = prepared.from_address
        source_chain = prepared.source_chain

        meson_contract = resolve_contract_address(prepared.chains, request.source.chain, request.meson_contract)
        LOGGER.info("Using Meson contract %s", meson_contract)

        service: Optional[MesonContractService] = None
        transfer_contract = request.transfer_contract
        if transfer_contract:
            transfer_status = TRANSFER_CONTRACT_PROVIDED
        elif request.deploy_if_missing and request.dry_run:
            transfer_status = TRANSFER_CONTRACT_WILL_DEPLOY
        elif request.deploy_if_missing:
            service = self._connect(request.rpc_url, source_chain)
            transfer_contract = service.deploy_transfer_contract(meson_contract, load_account(request.private_key))
            transfer_status = TRANSFER_CONTRACT_DEPLOYED
        elif request.dry_run:
            transfer_status = TRANSFER_CONTRACT_NOT_REQUESTED
            LOGGER.warning("No TransferToMeson contract provided and deployment not requested")
        else:
            raise MissingIntermediaryContractError(
                "TransferToMeson contract address not provided and deployment not requested"
            )
        if transfer_contract:
            LOGGER.info("Using TransferToMeson contract %s (%s)", transfer_contract, transfer_status)

        encoding_from = transfer_contract or from_address
        LOGGER.info("Encoding contract swap: %s %s -> %s for %s", request.amount, request.source, request.destination, request.recipient)
        LOGGER.info("Using address for swap encoding: %s, initiator: %s", encoding_from, from_address)
        try:
            encoded = self.api.encode_swap(
                str(request.source),
                str(request.destination),
                request.amount,
                encoding_from,
                request.recipient,
                from_contract=True,
            )
        except ApiError as exc:
            raise ContractCallError(str(exc)) from exc
        if not encoded.encoded:
            raise ContractCallError("Failed to encode swap: missing required data in response")
        encoded = encoded.with_initiator(from_address)
        self._log_encoded(encoded)

        if encoded.from_contract and not transfer_contract:
            LOGGER.info("Relayer response included fromContract address: %s", encoded.from_contract)

        if request.dry_run:
            LOGGER.info("Dry run: swap encoded, but contract call not executed.")
            return BridgeOutcome(
                status=STATUS_DRY_RUN,
                encoded_swap=encoded,
                from_address=encoding_from,
                recipient=request.recipient,
                meson_contract=meson_contract,
                transfer_contract=transfer_contract or encoded.from_contract,
                transfer_contract_status=transfer_status,
            )

        service = service or self._connect(request.rpc_url, source_chain)
        LOGGER.info("Submitting transaction using TransferToMeson contract...")
        tx_hash = service.call_transfer_to_meson(
            transfer_contract,
            encoded,
            load_account(request.private_key),
            request.amount,
        )
        LOGGER.info("Transaction confirmed: %s", tx_hash)

        swap_id = None
        if request.notify_relayer:
            swap_id = self.api.submit_swap_from_contract(encoded.encoded, tx_hash).swap_id
            LOGGER.info("Relayer acknowledged contract swap. Swap ID: %s", swap_id)

        return BridgeOutcome(
            status=STATUS_SUBMITTED,
            encoded_swap=encoded,
            from_address=encoding_from,
            recipient=request.recipient,
            swap_id=swap_id,
            tx_hash=tx_hash,
            meson_contract=meson_contract,
            transfer_contract=transfer_contract,
            transfer_contract_status=transfer_status,
            explorer_url=self.config.api.swap_explorer_url(swap_id or encoded.encoded),
        )

    def token_for_index(self, rpc_url: str, meson_contract: str, index: int) -> str:
        """Look up the token registered at ``index`` on a Meson contract."""
        try:
            service = self.contract_factory(rpc_url)
            service.ensure_chain(None)
        except TransportError as exc:
            raise ContractCallError(str(exc)) from exc
        return service.token_for_index(meson_contract, index)

    def close(self) -> None:
        self.api.close()

    def __enter__(self) -> "BridgeExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _connect(self, rpc_url: str, source_chain: Chain) -> MesonContractService:
        try:
            service = self.contract_factory(rpc_url)
            service.ensure_chain(source_chain.numeric_chain_id)
        except TransportError as exc:
            raise ContractCallError(str(exc)) from exc
        return service

    @staticmethod
    def _log_encoded(encoded: EncodedSwap) -> None:
        LOGGER.info("Encoded swap: %s", encoded.encoded)
        LOGGER.info(
            "Fee: service=%s lp=%s total=%s",
            encoded.fee.service_fee,
            encoded.fee.lp_fee,
            encoded.fee.total_fee,
        )
        if encoded.converted:
            LOGGER.info("Converted: %s %s", encoded.converted.amount, encoded.converted.token)


__all__ = ["BridgeExecutor", "ContractServiceFactory", "PreparedBridge"]
