"""Config loader for the Meson bridge CLI."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

DEFAULT_API_URL = "https://relayer.meson.fi/api/v1"
DEFAULT_EXPLORER_URL = "https://explorer.meson.fi/swap"
DEFAULT_API_TIMEOUT = 30
DEFAULT_RPC_TIMEOUT = 60
DEFAULT_RECEIPT_TIMEOUT = 300

_ENV_KEYS = {
    ("api", "base_url"): "MESON_API_URL",
    ("api", "explorer_url"): "MESON_EXPLORER_URL",
    ("api", "timeout"): "MESON_API_TIMEOUT",
    ("chain", "rpc_timeout"): "MESON_RPC_TIMEOUT",
    ("chain", "receipt_timeout"): "MESON_RECEIPT_TIMEOUT",
    ("chain", "transfer_contract_artifact"): "TRANSFER_TO_MESON_ARTIFACT",
}


class ConfigError(ValueError):
    """Raised when configuration data is invalid or missing."""


def _to_url(value: Any, *, field_name: str) -> str:
    url = str(value).strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"Invalid URL for {field_name}: {value}")
    return url


def _to_positive_int(value: Any, *, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{field_name} must be positive")
    return number


@dataclass(frozen=True)
class ApiConfig:
    """Relayer HTTP endpoints and request timeout."""

    base_url: str = DEFAULT_API_URL
    explorer_url: str = DEFAULT_EXPLORER_URL
    timeout: int = DEFAULT_API_TIMEOUT

    def swap_explorer_url(self, swap_id: str) -> str:
        return f"{self.explorer_url}/{swap_id}"


@dataclass(frozen=True)
class ChainConfig:
    """Settings used when talking to a source chain over JSON-RPC."""

    rpc_timeout: int = DEFAULT_RPC_TIMEOUT
    receipt_timeout: int = DEFAULT_RECEIPT_TIMEOUT
    transfer_contract_artifact: Optional[Path] = None


@dataclass(frozen=True)
class MesonConfig:
    """Typed wrapper around the CLI configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Return the merged configuration mapping."""
        return {section: dict(values) for section, values in self.raw.items()}


def _load_json(path: Path) -> MutableMapping[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file contains invalid JSON: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {path}")
    return data


def _merge_sources(file_data: Mapping[str, Any], env: Mapping[str, str]) -> Dict[str, Dict[str, Any]]:
    merged: Dict[str, Dict[str, Any]] = {"api": {}, "chain": {}}
    for section in merged:
        values = file_data.get(section, {})
        if not isinstance(values, Mapping):
            raise ConfigError(f"{section} must be a JSON object")
        merged[section].update(values)

    for (section, key), env_name in _ENV_KEYS.items():
        value = (env.get(env_name) or "").strip()
        if value:
            merged[section][key] = value
    return merged


def load_config(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> MesonConfig:
    """Load configuration from defaults, an optional JSON file and the environment."""
    env = os.environ if env is None else env
    file_data = _load_json(config_path) if config_path else {}
    data = _merge_sources(file_data, env)

    api_data = data["api"]
    api_config = ApiConfig(
        base_url=_to_url(api_data.get("base_url", DEFAULT_API_URL), field_name="api.base_url"),
        explorer_url=_to_url(api_data.get("explorer_url", DEFAULT_EXPLORER_URL), field_name="api.explorer_url"),
        timeout=_to_positive_int(api_data.get("timeout", DEFAULT_API_TIMEOUT), field_name="api.timeout"),
    )

    chain_data = data["chain"]
    artifact = chain_data.get("transfer_contract_artifact")
    chain_config = ChainConfig(
        rpc_timeout=_to_positive_int(chain_data.get("rpc_timeout", DEFAULT_RPC_TIMEOUT), field_name="chain.rpc_timeout"),
        receipt_timeout=_to_positive_int(
            chain_data.get("receipt_timeout", DEFAULT_RECEIPT_TIMEOUT), field_name="chain.receipt_timeout"
        ),
        transfer_contract_artifact=Path(artifact).expanduser() if artifact else None,
    )

    return MesonConfig(api=api_config, chain=chain_config, raw=data)


__all__ = [
    "ApiConfig",
    "ChainConfig",
    "ConfigError",
    "DEFAULT_API_URL",
    "DEFAULT_EXPLORER_URL",
    "MesonConfig",
    "load_config",
]
