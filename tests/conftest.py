"""Shared fixtures: an in-memory node that records every call."""

from __future__ import annotations

from typing import Any, Optional

import pytest
from eth_abi import encode

from ledgerline.node.models import Block, Receipt, TransactionLookup

# Well-known development key (Hardhat/Anvil account #0). Never use on mainnet.
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
SEPOLIA_CHAIN_ID = 11155111

LEDGERLINE_KEYS = (
    "API_KEY",
    "PRIVATE_KEY",
    "RPC_URL",
    "WS_URL",
    "PROXY_URL",
    "CONFIRM_MAX_ATTEMPTS",
    "CONFIRM_POLL_INTERVAL",
    "CONTRACT_ADDRESS_FILE",
)


def make_receipt(
    tx_hash: str = "0x" + "ab" * 32,
    success: bool = True,
    contract_address: Optional[str] = None,
) -> Receipt:
    return Receipt(
        tx_hash=tx_hash,
        block_hash="0x" + "cd" * 32,
        block_number=7_000_000,
        transaction_index=3,
        success=success,
        contract_address=contract_address,
        gas_used=21_000,
    )


class FakeNode:
    """Stand-in for NodeClient.  Every call is appended to ``calls``."""

    def __init__(
        self,
        receipt_success: bool = True,
        contract_address: Optional[str] = None,
        count_value: int = 0,
    ):
        self.calls: list[str] = []
        self.sent: list[str] = []
        self.estimates: list[dict[str, Any]] = []
        self.receipt_success = receipt_success
        self.contract_address = contract_address
        self.count_value = count_value
        self.closed = False
        self.events: list[str] = []
        self.block: Optional[Block] = None

    def get_block(self, number: int) -> Block:
        self.calls.append("get_block")
        if self.block is not None:
            return self.block
        return Block(
            number=number,
            hash="0x" + "11" * 32,
            parent_hash="0x" + "10" * 32,
            timestamp=1_700_000_000,
            transaction_count=42,
            gas_used=12_345,
        )

    def pending_nonce(self, address: str) -> int:
        self.calls.append("pending_nonce")
        return len(self.sent)

    def suggest_gas_price(self) -> int:
        self.calls.append("suggest_gas_price")
        return 2_000_000_000

    def chain_id(self) -> int:
        self.calls.append("chain_id")
        return SEPOLIA_CHAIN_ID

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        self.calls.append("estimate_gas")
        self.estimates.append(tx)
        return 120_000

    def call(self, to: str, data: str, block: str = "latest") -> bytes:
        self.calls.append("call")
        return encode(["uint256"], [self.count_value])

    def send_raw_transaction(self, raw_tx: str) -> str:
        self.calls.append("send_raw_transaction")
        self.sent.append(raw_tx)
        return "0x" + "ef" * 32

    def transaction_by_hash(self, tx_hash: str) -> TransactionLookup:
        self.calls.append("transaction_by_hash")
        return TransactionLookup(found=True, pending=False, block_number=7_000_000)

    def transaction_receipt(self, tx_hash: str) -> Receipt:
        self.calls.append("transaction_receipt")
        return make_receipt(tx_hash, self.receipt_success, self.contract_address)

    def close(self) -> None:
        self.closed = True
        self.events.append("close")

    def __enter__(self) -> FakeNode:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@pytest.fixture()
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ledgerline keys from the process environment."""
    for key in LEDGERLINE_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def node_factory() -> type[FakeNode]:
    return FakeNode


@pytest.fixture()
def receipt_factory():
    return make_receipt
