"""HTTP client for the Meson relayer API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from meson_bridge.config import ApiConfig
from meson_bridge.core.errors import ProtocolError, ServiceError, TransportError
from meson_bridge.core.models import (
    Chain,
    ChainLimit,
    EncodedSwap,
    SubmissionResult,
    parse_chains,
    parse_limits,
)
from meson_bridge.core.utils import dump_json, get_logger

LOGGER = get_logger("meson_bridge.api")

_HEADERS = {"Accept": "application/json"}


class MesonApiClient:
    """Thin wrapper over the relayer's JSON endpoints.

    Every call issues exactly one request; nothing is cached or retried.
    """

    def __init__(self, config: Optional[ApiConfig] = None, *, session: Optional[requests.Session] = None) -> None:
        self.config = config or ApiConfig()
        self.session = session or requests.Session()

    def close(self) -> None:
        """Release pooled connections held by the HTTP session."""
        self.session.close()

    def __enter__(self) -> "MesonApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def list_chains(self) -> List[Chain]:
        """Fetch supported chains and tokens."""
        LOGGER.debug("Fetching supported chains and tokens")
        chains = parse_chains(self._request("GET", "/list", action="fetching supported chains"))
        LOGGER.debug("Received %s supported chains", len(chains))
        return chains

    def list_limits(self) -> List[ChainLimit]:
        """Fetch per-token swap limits."""
        LOGGER.debug("Fetching swap limits")
        limits = parse_limits(self._request("GET", "/limits", action="fetching swap limits"))
        LOGGER.debug("Received limits for %s chains", len(limits))
        return limits

    def encode_swap(
        self,
        from_chain_token: str,
        to_chain_token: str,
        amount: str,
        from_address: str,
        recipient: str,
        from_contract: bool = False,
        data_to_contract: Optional[str] = None,
    ) -> EncodedSwap:
        """Ask the relayer to encode a swap and quote its fees."""
        payload: Dict[str, Any] = {
            "from": from_chain_token,
            "to": to_chain_token,
            "amount": amount,
            "fromAddress": from_address,
            "recipient": recipient,
        }
        if from_contract:
            payload["fromContract"] = from_contract
        if data_to_contract:
            payload["dataToContract"] = data_to_contract

        LOGGER.debug("Encoding swap: %s %s -> %s for %s", amount, from_chain_token, to_chain_token, recipient)
        result = self._request("POST", "/swap", payload=payload, action="encoding swap")
        return EncodedSwap.from_dict(result)

    def submit_swap(self, encoded_swap: str, from_address: str, recipient: str, signature: str) -> SubmissionResult:
        """Submit a signed swap for the relayer to execute."""
        payload = {"fromAddress": from_address, "recipient": recipient, "signature": signature}
        result = self._request("POST", f"/swap/{encoded_swap}", payload=payload, action="submitting swap")
        submission = SubmissionResult.from_dict(result)
        LOGGER.debug("Submitted swap %s", submission.swap_id)
        return submission

    def submit_swap_from_contract(self, encoded_swap: str, tx_hash: str) -> SubmissionResult:
        """Tell the relayer about a swap posted through a transfer contract."""
        result = self._request(
            "POST",
            f"/swap/from-contract/{encoded_swap}",
            payload={"hash": tx_hash},
            action="submitting contract swap",
        )
        submission = SubmissionResult.from_dict(result)
        LOGGER.debug("Submitted contract swap %s", submission.swap_id)
        return submission

    def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        url = f"{self.config.base_url}{path}"
        LOGGER.debug("%s %s", method, url)
        if payload is not None and LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug("Request payload:\n%s", dump_json(payload))

        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=_HEADERS,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Failed {action} at {url}: {exc}") from exc

        return self._decode_envelope(response, action=action)

    @staticmethod
    def _decode_envelope(response: requests.Response, *, action: str) -> Any:
        """Unwrap ``{"result": ...}`` or raise for ``{"error": ...}``/unknown shapes."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug("Response (HTTP %s):\n%s", response.status_code, dump_json(body))

        if isinstance(body, Mapping):
            error = body.get("error")
            if isinstance(error, Mapping):
                message = str(error.get("message") or "unknown error")
                raise ServiceError(
                    f"Error {action}: {message}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            if body.get("result") is not None:
                return body["result"]

        if not response.ok:
            raise TransportError(f"Error {action}: HTTP {response.status_code} {response.reason}")
        raise ProtocolError("Invalid response format from Meson API")


__all__ = ["MesonApiClient"]
