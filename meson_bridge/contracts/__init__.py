"""Contract ABIs shipped with the bridge CLI."""

from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json

from meson_bridge.config import ConfigError

MESON_ABI_FILE = "meson_abi.json"
TRANSFER_TO_MESON_ABI_FILE = "transfer_to_meson_abi.json"


def load_contract_abi(filename: str) -> List[Dict[str, Any]]:
    """Load an ABI JSON file from the contracts package."""
    with resources.files(__package__).joinpath(filename).open("r", encoding="utf-8") as fh:
        return json.load(fh)


def load_contract_artifact(path: Optional[Path]) -> Tuple[List[Dict[str, Any]], str]:
    """Load ``(abi, bytecode)`` from a compiled TransferToMeson artifact.

    The artifact uses the ``{"abi": [...], "data": {"bytecode": "0x..."}}`` layout;
    a top-level ``bytecode`` key is accepted as well.
    """
    if path is None:
        raise ConfigError(
            "Deploying a TransferToMeson contract requires a compiled artifact; "
            "set TRANSFER_TO_MESON_ARTIFACT or chain.transfer_contract_artifact"
        )
    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            artifact = json.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Contract artifact not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Contract artifact contains invalid JSON: {path}") from exc

    data = artifact.get("data") if isinstance(artifact.get("data"), dict) else {}
    bytecode = data.get("bytecode") or artifact.get("bytecode")
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")
    if not bytecode:
        raise ConfigError(f"Contract artifact has no bytecode: {path}")
    if not str(bytecode).startswith("0x"):
        bytecode = f"0x{bytecode}"

    abi = artifact.get("abi") or load_contract_abi(TRANSFER_TO_MESON_ABI_FILE)
    return abi, str(bytecode)


__all__ = [
    "MESON_ABI_FILE",
    "TRANSFER_TO_MESON_ABI_FILE",
    "load_contract_abi",
    "load_contract_artifact",
]
