"""
Node client for Ethereum-compatible JSON-RPC endpoints.

Thin, blocking wrapper over a transport: one method per node query,
responses decoded into the dataclasses in :mod:`ledgerline.node.models`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..errors import NotFoundError, ProtocolError
from .models import Block, Receipt, TransactionLookup, hex_to_int
from .transport import Transport, TransportConfig, open_transport

logger = logging.getLogger(__name__)


def _quantity(value: int) -> str:
    return hex(value)


class NodeClient:
    """Blocking operations against one node over one transport."""

    def __init__(self, transport: Transport):
        self.transport = transport
        self._closed = False

    @classmethod
    def connect(cls, config: TransportConfig) -> NodeClient:
        logger.debug("Opening %s transport to %s", config.kind, config.endpoint)
        return cls(open_transport(config))

    def _call(self, method: str, params: Optional[list] = None) -> Any:
        return self.transport.request(method, params or [])

    # ------------------------------------------------------------------
    # Chain state
    # ------------------------------------------------------------------
    def get_block(self, number: int) -> Block:
        """
        Fetch a block by number.

        Raises:
            NotFoundError: If the node has no such block
        """
        result = self._call("eth_getBlockByNumber", [_quantity(number), False])
        if result is None:
            raise NotFoundError(f"Block {number} not found")
        return Block.from_rpc(result)

    def block_number(self) -> int:
        return hex_to_int(self._call("eth_blockNumber"), "blockNumber")

    def pending_nonce(self, address: str) -> int:
        """Nonce for the next transaction from ``address``, counting the mempool."""
        return hex_to_int(
            self._call("eth_getTransactionCount", [address, "pending"]), "nonce"
        )

    def suggest_gas_price(self) -> int:
        return hex_to_int(self._call("eth_gasPrice"), "gasPrice")

    def chain_id(self) -> int:
        return hex_to_int(self._call("eth_chainId"), "chainId")

    def get_balance(self, address: str) -> int:
        return hex_to_int(self._call("eth_getBalance", [address, "latest"]), "balance")

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        return hex_to_int(self._call("eth_estimateGas", [tx]), "gas")

    def call(self, to: str, data: str, block: str = "latest") -> bytes:
        """Execute a read-only contract call (``eth_call``) and return raw output."""
        result = self._call("eth_call", [{"to": to, "data": data}, block])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise ProtocolError(f"Malformed eth_call result: {result!r}")
        try:
            return bytes.fromhex(result[2:])
        except ValueError as exc:
            raise ProtocolError(f"Malformed eth_call result: {result!r}") from exc

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def transaction_by_hash(self, tx_hash: str) -> TransactionLookup:
        return TransactionLookup.from_rpc(
            self._call("eth_getTransactionByHash", [tx_hash])
        )

    def transaction_receipt(self, tx_hash: str) -> Receipt:
        """
        Fetch a transaction receipt.

        Raises:
            NotFoundError: If the node has no receipt for the hash
        """
        result = self._call("eth_getTransactionReceipt", [tx_hash])
        if result is None:
            raise NotFoundError(f"Receipt for {tx_hash} not found")
        return Receipt.from_rpc(result)

    def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed transaction; returns the hash the node reports."""
        result = self._call("eth_sendRawTransaction", [raw_tx])
        if not isinstance(result, str):
            raise ProtocolError(f"Malformed eth_sendRawTransaction result: {result!r}")
        return result

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.transport.close()

    def __enter__(self) -> NodeClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
