"""CLI entrypoint for bridging tokens through the Meson relayer."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

from dotenv import load_dotenv

from meson_bridge.config import ConfigError, MesonConfig, load_config
from meson_bridge.core.bridge import BridgeExecutor
from meson_bridge.core.errors import BridgeError
from meson_bridge.core.models import BridgeOutcome, BridgeRequest, ContractBridgeRequest
from meson_bridge.core.signature import resolve_private_key
from meson_bridge.core.utils import get_logger, set_debug
from meson_bridge.core.validation import parse_chain_token

LOGGER = get_logger("meson_bridge.cli")

ExecutorFactory = Callable[[MesonConfig], BridgeExecutor]


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--from", dest="from_", required=True, metavar="CHAIN:TOKEN", help="Source chain and token (e.g., eth:usdc)")
    parser.add_argument("--to", required=True, metavar="CHAIN:TOKEN", help="Destination chain and token (e.g., bsc:usdc)")
    parser.add_argument("--amount", required=True, help="Amount to bridge")
    parser.add_argument("--recipient", required=True, help="Recipient address on the destination chain")
    parser.add_argument("--private-key", help="Private key for signing (can also be set via PRIVATE_KEY env var)")
    parser.add_argument("--dry-run", action="store_true", help="Execute all steps without submitting the final transaction")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="meson-bridge", description="Bridge tokens between chains using MesonFi")
    parser.add_argument("--config", type=Path, help="Path to a JSON config file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    bridge = subparsers.add_parser("bridge", help="Bridge tokens with a signed swap submitted to the relayer")
    _add_common_options(bridge)

    contract = subparsers.add_parser(
        "bridge-contract", help="Bridge tokens via the TransferToMeson contract"
    )
    _add_common_options(contract)
    contract.add_argument("--rpc-url", required=True, help="RPC URL for the source chain")
    contract.add_argument(
        "--meson-contract",
        help="Address of the Meson contract (looked up from the chain data if not provided)",
    )
    contract.add_argument("--transfer-contract", help="Address of your deployed TransferToMeson contract")
    contract.add_argument(
        "--deploy-if-missing",
        action="store_true",
        help="Deploy a new TransferToMeson contract if one is not provided",
    )
    contract.add_argument(
        "--notify-relayer",
        action="store_true",
        help="Report the confirmed transaction hash to the relayer",
    )

    chains = subparsers.add_parser("chains", help="List supported chains, tokens and swap limits")
    chains.add_argument("--debug", action="store_true", help="Enable debug logging")

    token = subparsers.add_parser("token-for-index", help="Read the token registered at an index on a Meson contract")
    token.add_argument("--rpc-url", required=True, help="RPC URL for the chain hosting the Meson contract")
    token.add_argument("--meson-contract", required=True, help="Address of the Meson contract")
    token.add_argument("--index", required=True, type=_token_index, help="Token index (0-255)")
    token.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def _token_index(value: str) -> int:
    try:
        index = int(value, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid token index: {value}") from exc
    if not 0 <= index <= 255:
        raise argparse.ArgumentTypeError("token index must fit in uint8 (0-255)")
    return index


def _build_request(args: argparse.Namespace) -> BridgeRequest:
    common = dict(
        source=parse_chain_token(args.from_),
        destination=parse_chain_token(args.to),
        amount=args.amount.strip(),
        recipient=args.recipient.strip(),
        private_key=resolve_private_key(args.private_key),
        dry_run=args.dry_run,
    )
    if args.command == "bridge-contract":
        return ContractBridgeRequest(
            **common,
            rpc_url=args.rpc_url,
            meson_contract=args.meson_contract,
            transfer_contract=args.transfer_contract,
            deploy_if_missing=args.deploy_if_missing,
            notify_relayer=args.notify_relayer,
        )
    return BridgeRequest(**common)


def _print_outcome(outcome: BridgeOutcome) -> None:
    encoded = outcome.encoded_swap
    if outcome.dry_run:
        print("\n-- DRY RUN --")
        print(f"Encoded Swap: {encoded.encoded}")
        if outcome.signature:
            print(f"Signature: {outcome.signature}")
        if outcome.meson_contract:
            print(f"Meson Contract Address: {outcome.meson_contract}")
            if outcome.transfer_contract:
                print(f"TransferToMeson Contract Address: {outcome.transfer_contract}")
            print(f"TransferToMeson Contract: {outcome.transfer_contract_status}")
        print(f"Recipient: {outcome.recipient}")
        print(f"From Address: {outcome.from_address}")
        return

    if outcome.tx_hash:
        print("\nTransaction submitted successfully!")
        print(f"Transaction Hash: {outcome.tx_hash}")
    else:
        print("\nSwap submitted successfully!")
    if outcome.swap_id:
        print(f"Swap ID: {outcome.swap_id}")
    print(f"Track status on Meson Explorer: {outcome.explorer_url}")


def _print_chains(executor: BridgeExecutor) -> None:
    chains = executor.api.list_chains()
    limits = {limit.id: limit for limit in executor.api.list_limits()}
    for chain in chains:
        suffix = " (destination only)" if chain.destination_only else ""
        print(f"{chain.id} - {chain.name} [chainId {chain.chain_id}] contract={chain.address}{suffix}")
        chain_limit = limits.get(chain.id)
        for token in chain.tokens:
            token_limit = chain_limit.find_token(token.id) if chain_limit else None
            bounds = f" limits {token_limit.min or 0} - {token_limit.max or 'unbounded'}" if token_limit else ""
            print(f"  {chain.id}:{token.id}{bounds}")


def _default_executor(config: MesonConfig) -> BridgeExecutor:
    return BridgeExecutor(config=config)


def main(argv: Optional[List[str]] = None, executor_factory: ExecutorFactory = _default_executor) -> int:
    load_dotenv()
    args = _parse_args(argv)
    set_debug(args.debug)

    try:
        with executor_factory(load_config(args.config)) as executor:
            if args.command == "chains":
                _print_chains(executor)
                return 0
            if args.command == "token-for-index":
                print(executor.token_for_index(args.rpc_url, args.meson_contract, args.index))
                return 0

            request = _build_request(args)
            LOGGER.debug("Options: %s", request)
            if isinstance(request, ContractBridgeRequest):
                outcome = executor.run_contract_bridge(request)
            else:
                outcome = executor.run_bridge(request)
    except (BridgeError, ConfigError) as exc:
        print(f"\nError: {exc}", file=sys.stderr)
        return 1

    _print_outcome(outcome)
    return 0


def run() -> None:  # pragma: no cover - console script entry
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry
    run()
