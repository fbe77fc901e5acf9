"""
Counter contract artifact and calldata helpers.

The artifact (ABI + creation bytecode) ships as package data in
``artifacts/Counter.json`` using the Foundry artifact layout.  The contract
keeps one uint256 in storage slot 0 and exposes ``count()`` and
``increment()``.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from eth_abi import decode, encode
from eth_hash.auto import keccak

from ..errors import ConfigError, EncodingError, ProtocolError

ARTIFACTS_DIR = Path(__file__).resolve().parent / "artifacts"


@lru_cache(maxsize=8)
def load_artifact(contract_name: str = "Counter") -> dict[str, Any]:
    """
    Load a bundled contract artifact.

    Raises:
        ConfigError: If the artifact is not bundled or is not valid JSON
    """
    path = ARTIFACTS_DIR / f"{contract_name}.json"
    if not path.exists():
        raise ConfigError(f"Artifact not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read artifact {path}: {exc}") from exc


def load_abi(contract_name: str = "Counter") -> list[dict[str, Any]]:
    return load_artifact(contract_name)["abi"]


def load_bytecode(contract_name: str = "Counter") -> bytes:
    """Creation bytecode as raw bytes."""
    code = load_artifact(contract_name).get("bytecode", {}).get("object", "")
    if not code:
        raise ConfigError(f"No bytecode in artifact for {contract_name}")
    try:
        return bytes.fromhex(code[2:] if code.startswith("0x") else code)
    except ValueError as exc:
        raise ConfigError(f"Invalid bytecode in artifact for {contract_name}") from exc


def _find_function(abi: list[dict[str, Any]], name: str) -> dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            return entry
    raise EncodingError(f"Function {name} not found in ABI")


def function_selector(abi: list[dict[str, Any]], name: str) -> bytes:
    """First 4 bytes of keccak256 of the canonical signature."""
    func = _find_function(abi, name)
    input_types = [inp["type"] for inp in func.get("inputs", [])]
    signature = f"{name}({','.join(input_types)})"
    return keccak(signature.encode("utf-8"))[:4]


def encode_call(abi: list[dict[str, Any]], name: str, args: list | None = None) -> bytes:
    """ABI-encode a function call."""
    func = _find_function(abi, name)
    input_types = [inp["type"] for inp in func.get("inputs", [])]
    try:
        encoded_args = encode(input_types, args) if args else b""
    except Exception as exc:
        raise EncodingError(f"Cannot encode arguments for {name}: {exc}") from exc
    return function_selector(abi, name) + encoded_args


def decode_result(abi: list[dict[str, Any]], name: str, data: bytes) -> Any:
    """
    ABI-decode a function's return data.

    Returns:
        None for no outputs, the value for one output, else a tuple
    """
    func = _find_function(abi, name)
    output_types = [out["type"] for out in func.get("outputs", [])]
    if not output_types:
        return None
    try:
        decoded = decode(output_types, data)
    except Exception as exc:
        raise ProtocolError(f"Cannot decode {name} result: {exc}") from exc
    if len(decoded) == 1:
        return decoded[0]
    return decoded
