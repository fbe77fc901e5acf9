"""Typed views over node JSON-RPC responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import ProtocolError

EMPTY_ADDRESS = "0x0000000000000000000000000000000000000000"


def hex_to_int(value: Any, field_name: str) -> int:
    """Decode a JSON-RPC quantity (``0x``-prefixed hex)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ProtocolError(f"Expected hex quantity for {field_name}, got {value!r}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise ProtocolError(f"Invalid hex quantity for {field_name}: {value!r}") from exc


def _require(data: dict, key: str) -> Any:
    if key not in data or data[key] is None:
        raise ProtocolError(f"Response is missing {key!r}")
    return data[key]


@dataclass(frozen=True)
class LogEntry:
    address: str
    topics: tuple[str, ...]
    data: str
    log_index: Optional[int] = None

    @classmethod
    def from_rpc(cls, data: dict) -> LogEntry:
        index = data.get("logIndex")
        return cls(
            address=data.get("address", ""),
            topics=tuple(data.get("topics", [])),
            data=data.get("data", "0x"),
            log_index=hex_to_int(index, "logIndex") if index is not None else None,
        )


@dataclass(frozen=True)
class Receipt:
    """Node-issued record of a mined transaction's outcome."""

    tx_hash: str
    block_hash: str
    block_number: int
    transaction_index: int
    success: bool
    contract_address: Optional[str] = None
    gas_used: Optional[int] = None
    logs: tuple[LogEntry, ...] = field(default_factory=tuple)

    @property
    def has_contract_address(self) -> bool:
        return bool(self.contract_address) and self.contract_address.lower() != EMPTY_ADDRESS

    @classmethod
    def from_rpc(cls, data: Any) -> Receipt:
        if not isinstance(data, dict):
            raise ProtocolError(f"Malformed receipt: {data!r}")
        gas_used = data.get("gasUsed")
        contract_address = data.get("contractAddress")
        if contract_address and contract_address.lower() == EMPTY_ADDRESS:
            contract_address = None
        return cls(
            tx_hash=_require(data, "transactionHash"),
            block_hash=_require(data, "blockHash"),
            block_number=hex_to_int(_require(data, "blockNumber"), "blockNumber"),
            transaction_index=hex_to_int(
                _require(data, "transactionIndex"), "transactionIndex"
            ),
            success=hex_to_int(data.get("status", "0x0"), "status") == 1,
            contract_address=contract_address or None,
            gas_used=hex_to_int(gas_used, "gasUsed") if gas_used is not None else None,
            logs=tuple(LogEntry.from_rpc(log) for log in data.get("logs", [])),
        )


@dataclass(frozen=True)
class Block:
    number: int
    hash: str
    parent_hash: str
    timestamp: int
    transaction_count: int
    gas_used: int
    miner: Optional[str] = None

    @classmethod
    def from_rpc(cls, data: Any) -> Block:
        if not isinstance(data, dict):
            raise ProtocolError(f"Malformed block: {data!r}")
        return cls(
            number=hex_to_int(_require(data, "number"), "number"),
            hash=_require(data, "hash"),
            parent_hash=data.get("parentHash", ""),
            timestamp=hex_to_int(_require(data, "timestamp"), "timestamp"),
            transaction_count=len(data.get("transactions", [])),
            gas_used=hex_to_int(data.get("gasUsed", "0x0"), "gasUsed"),
            miner=data.get("miner"),
        )


@dataclass(frozen=True)
class TransactionLookup:
    """Result of looking a transaction up by hash."""

    found: bool
    pending: bool = False
    block_number: Optional[int] = None

    @classmethod
    def from_rpc(cls, data: Any) -> TransactionLookup:
        if data is None:
            return cls(found=False)
        if not isinstance(data, dict):
            raise ProtocolError(f"Malformed transaction: {data!r}")
        block_number = data.get("blockNumber")
        if block_number is None:
            return cls(found=True, pending=True)
        return cls(
            found=True,
            pending=False,
            block_number=hex_to_int(block_number, "blockNumber"),
        )
