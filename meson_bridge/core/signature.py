"""Key handling and raw-hash signing for relayer signing requests."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from eth_account import Account
from eth_keys import keys
from web3 import Web3

from meson_bridge.core.errors import InvalidKeyError, InvalidRequestError, SigningError
from meson_bridge.core.utils import hex_to_bytes

PRIVATE_KEY_ENV = "PRIVATE_KEY"


def resolve_private_key(explicit: Optional[str], env: Optional[Mapping[str, str]] = None) -> str:
    """Return the ``--private-key`` value, falling back to ``PRIVATE_KEY``."""
    env = os.environ if env is None else env
    private_key = (explicit or "").strip() or (env.get(PRIVATE_KEY_ENV) or "").strip()
    if not private_key:
        raise InvalidRequestError(
            "Private key must be provided via --private-key option or PRIVATE_KEY environment variable."
        )
    return private_key


def load_account(private_key: str):
    """Build an eth-account ``LocalAccount`` or raise ``InvalidKeyError``."""
    try:
        return Account.from_key(private_key)
    except Exception as exc:  # eth-account raises ValueError/binascii.Error/ValidationError
        raise InvalidKeyError("Invalid private key") from exc


def derive_address(private_key: str) -> str:
    """Return the checksummed address controlled by ``private_key``."""
    return load_account(private_key).address


def _hash_bytes(message_hash: str) -> bytes:
    try:
        digest = hex_to_bytes(message_hash)
    except (AttributeError, TypeError, ValueError) as exc:
        raise SigningError(f"Hash to sign is not valid hex: {message_hash!r}") from exc
    if len(digest) != 32:
        raise SigningError(f"Hash to sign must be 32 bytes, got {len(digest)}")
    return digest


def sign_hash(message_hash: str, private_key: str) -> str:
    """Sign ``message_hash`` directly, without the ``\\x19Ethereum Signed Message`` prefix.

    The relayer verifies the signature against the raw hash it handed out in the
    signing request, so the hash must not be wrapped again here.
    """
    digest = _hash_bytes(message_hash)
    account = load_account(private_key)
    try:
        signed = account.unsafe_sign_hash(digest)
    except Exception as exc:  # pragma: no cover - eth-account validates inputs above
        raise SigningError(f"Failed to sign hash: {exc}") from exc
    return Web3.to_hex(signed.signature)


def recover_hash_signer(message_hash: str, signature: str) -> str:
    """Recover the address that produced ``signature`` over the raw ``message_hash``."""
    digest = _hash_bytes(message_hash)
    try:
        raw = hex_to_bytes(signature)
        if len(raw) != 65:
            raise ValueError(f"signature must be 65 bytes, got {len(raw)}")
        v = raw[64] - 27 if raw[64] >= 27 else raw[64]
        sig = keys.Signature(signature_bytes=raw[:64] + bytes([v]))
        public_key = sig.recover_public_key_from_msg_hash(digest)
    except Exception as exc:  # eth-keys raises BadSignature/ValidationError
        raise SigningError(f"Could not recover signer: {exc}") from exc
    return public_key.to_checksum_address()


__all__ = [
    "PRIVATE_KEY_ENV",
    "derive_address",
    "load_account",
    "recover_hash_signer",
    "resolve_private_key",
    "sign_hash",
]
