"""Validation helpers for bridge parameters."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence, Tuple

from meson_bridge.core.errors import (
    AmountOutOfRangeError,
    InvalidRequestError,
    ProtocolError,
    UnsupportedChainError,
    UnsupportedTokenError,
)
from meson_bridge.core.models import Chain, ChainLimit, ChainToken, Token
from meson_bridge.core.utils import get_logger

LOGGER = get_logger("meson_bridge.validation")


def parse_chain_token(value: str) -> ChainToken:
    """Split a ``chain:token`` argument such as ``eth:usdc``."""
    chain, sep, token = (value or "").strip().partition(":")
    if not sep or not chain or not token or ":" in token:
        raise InvalidRequestError(f"Expected <chain>:<token>, got '{value}'")
    return ChainToken(chain=chain, token=token)


def parse_amount(value: str) -> Decimal:
    """Parse a positive decimal amount."""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidRequestError(f"Amount '{value}' is not a number") from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidRequestError(f"Amount '{value}' must be a positive number")
    return amount


def _to_decimal(value: Optional[str], default: Optional[Decimal], *, field_name: str) -> Optional[Decimal]:
    if not value:
        return default
    try:
        number = Decimal(value)
    except InvalidOperation as exc:
        raise ProtocolError(f"Relayer published an invalid {field_name}: {value!r}") from exc
    if not number.is_finite():
        raise ProtocolError(f"Relayer published an invalid {field_name}: {value!r}")
    return number


def validate_chain_token(chains: Sequence[Chain], chain_id: str, token_id: str, role: str) -> Tuple[Chain, Token]:
    """Ensure ``chain_id``/``token_id`` is published by the relayer."""
    label = role.capitalize()
    chain = next((c for c in chains if c.id == chain_id), None)
    if chain is None:
        raise UnsupportedChainError(f"{label} chain '{chain_id}' is not supported.")

    token = chain.find_token(token_id)
    if token is None:
        raise UnsupportedTokenError(f"{label} token '{token_id}' is not supported on chain '{chain_id}'.")
    return chain, token


def validate_amount(limits: Sequence[ChainLimit], chain_id: str, token_id: str, amount: Decimal) -> bool:
    """Check ``amount`` against the published limits.

    Returns ``False`` when no limit is published for the pair; the check is then
    skipped with a warning and the amount is treated as unbounded.
    """
    chain_limit = next((c for c in limits if c.id == chain_id), None)
    if chain_limit is None:
        LOGGER.warning(
            "Could not find swap limits for destination chain '%s'. Proceeding without amount limit check.",
            chain_id,
        )
        return False

    token_limit = chain_limit.find_token(token_id)
    if token_limit is None:
        LOGGER.warning(
            "Could not find swap limits for token '%s' on chain '%s'. Proceeding without amount limit check.",
            token_id,
            chain_id,
        )
        return False

    min_swap = _to_decimal(token_limit.min, Decimal(0), field_name=f"minimum for {token_id} on {chain_id}")
    max_swap = _to_decimal(token_limit.max, None, field_name=f"maximum for {token_id} on {chain_id}")

    if amount < min_swap or (max_swap is not None and amount > max_swap):
        upper = max_swap if max_swap is not None else "unbounded"
        raise AmountOutOfRangeError(
            f"Amount {amount} is outside the allowed limits for {token_id} on {chain_id} ({min_swap} - {upper})."
        )
    return True


__all__ = [
    "parse_amount",
    "parse_chain_token",
    "validate_amount",
    "validate_chain_token",
]
