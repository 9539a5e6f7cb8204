"""Utility helpers shared across bridge core modules."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from web3 import Web3

from meson_bridge.core.errors import ChainMismatchError, TransportError

ROOT_LOGGER_NAME = "meson_bridge"


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return a configured logger that prints to stderr."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def set_debug(enabled: bool) -> None:
    """Switch every ``meson_bridge.*`` logger between INFO and DEBUG."""
    level = logging.DEBUG if enabled else logging.INFO
    for name in list(logging.root.manager.loggerDict):
        if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
            logging.getLogger(name).setLevel(level)


def dump_json(data: Any) -> str:
    """Pretty-print ``data`` for debug output."""
    return json.dumps(data, indent=2, sort_keys=True, default=str)


def hex_to_bytes(data: str) -> bytes:
    """Convert a hex string (with or without ``0x``) to bytes."""
    data = data[2:] if data.startswith(("0x", "0X")) else data
    return bytes.fromhex(data)


def ensure_web3_connected(web3: Web3, *, expected_chain_id: Optional[int] = None) -> None:
    """Validate that ``web3`` is connected and optionally matches the expected chain id."""
    if not web3.is_connected():
        raise TransportError("Failed to connect to the configured RPC endpoint")
    if expected_chain_id is not None and web3.eth.chain_id != expected_chain_id:
        raise ChainMismatchError(f"RPC chain ID mismatch: expected {expected_chain_id}, got {web3.eth.chain_id}")


__all__ = [
    "dump_json",
    "ensure_web3_connected",
    "get_logger",
    "hex_to_bytes",
    "set_debug",
]
