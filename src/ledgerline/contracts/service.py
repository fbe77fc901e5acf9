"""
Contract Service - deploy the counter contract and call its methods.

The deployed address survives across invocations in a plain-text file
holding exactly one address.  The file is read when the service is built
and overwritten when it is closed (last writer wins).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from ..errors import InvalidArgumentError, ProtocolError, UnsupportedMethodError
from ..node.client import NodeClient
from ..node.models import Receipt
from ..tx.builder import account_address, build_transaction, sign_transaction
from ..tx.lifecycle import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    Outcome,
    await_confirmation,
    interpret_receipt,
)
from .counter import decode_result, encode_call, load_abi, load_bytecode

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS_FILE = "~/.ledgerline_contract_address"

READ_METHODS = ("count",)
WRITE_METHODS = ("increment",)
SUPPORTED_METHODS = READ_METHODS + WRITE_METHODS

# Confirmer signature: (client, tx_hash, max_attempts, poll_interval) -> Receipt
Confirmer = Callable[[NodeClient, str, int, float], Receipt]


class AddressStore:
    """Plain-text file holding one contract address."""

    def __init__(self, path: str | Path = DEFAULT_ADDRESS_FILE):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        """Stored address, or None when the file is missing or empty."""
        try:
            content = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return content or None

    def save(self, address: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(address, encoding="utf-8")


@dataclass(frozen=True)
class CallResult:
    method: str
    value: Any = None
    tx_hash: Optional[str] = None
    receipt: Optional[Receipt] = None

    @property
    def is_transaction(self) -> bool:
        return self.tx_hash is not None


class ContractService:
    """Counter contract deployment and invocation for one account."""

    def __init__(
        self,
        client: NodeClient,
        private_key: str,
        store: AddressStore,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        confirm: Optional[Confirmer] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.store = store
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self._private_key = private_key
        self._sleep = sleep
        self._confirm = confirm or self._await
        self._abi = load_abi("Counter")
        self._closed = False
        self.last_receipt: Optional[Receipt] = None
        self.address: Optional[str] = store.load()
        if self.address:
            logger.info("Loaded deployed contract address: %s", self.address)

    def _await(
        self, client: NodeClient, tx_hash: str, max_attempts: int, poll_interval: float
    ) -> Receipt:
        return await_confirmation(
            client, tx_hash, max_attempts, poll_interval, sleep=self._sleep
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def _transact(self, to: Optional[str], data: bytes) -> tuple[str, Receipt, Outcome]:
        """Build, sign, broadcast and confirm one transaction."""
        sender = account_address(self._private_key)
        nonce = self.client.pending_nonce(sender)
        gas_price = self.client.suggest_gas_price()
        chain_id = self.client.chain_id()

        estimate: dict[str, Any] = {"from": sender, "data": "0x" + data.hex()}
        if to is not None:
            estimate["to"] = to
        gas_limit = self.client.estimate_gas(estimate)

        request = build_transaction(
            sender=sender,
            recipient=to,
            value=0,
            gas_limit=gas_limit,
            gas_price=gas_price,
            nonce=nonce,
            data=data,
        )
        signed = sign_transaction(request, chain_id, self._private_key)
        self.client.send_raw_transaction(signed.raw_hex)
        logger.info("Transaction sent: %s", signed.tx_hash)

        receipt = self._confirm(
            self.client, signed.tx_hash, self.max_attempts, self.poll_interval
        )
        return signed.tx_hash, receipt, interpret_receipt(receipt)

    def deploy(self, force_redeploy: bool = False) -> str:
        """
        Deploy the counter contract.

        A no-op returning the cached address when one is loaded, unless
        ``force_redeploy`` is set.

        Returns:
            The deployed contract address
        """
        if self.address and not force_redeploy:
            logger.info(
                "Contract already deployed at %s (use redeploy to replace it)",
                self.address,
            )
            return self.address

        logger.info("Deploying Counter contract")
        tx_hash, receipt, outcome = self._transact(None, load_bytecode("Counter"))
        if outcome is not Outcome.DEPLOYED or not receipt.contract_address:
            raise ProtocolError(
                f"Deployment {tx_hash} confirmed without a contract address"
            )
        if not receipt.success:
            logger.warning(
                "Deployment %s reported failure status but created %s",
                tx_hash,
                receipt.contract_address,
            )
        self.address = receipt.contract_address
        self.last_receipt = receipt
        logger.info("Counter deployed at %s", self.address)
        return self.address

    def call(self, method: str) -> CallResult:
        """
        Call a counter method by name (case-insensitive).

        ``count`` is a read-only eth_call; ``increment`` is a transaction and
        waits for confirmation.

        Raises:
            UnsupportedMethodError: Unknown method (no network call is made)
            InvalidArgumentError: No deployed address is known
        """
        name = method.strip().lower()
        if name not in SUPPORTED_METHODS:
            raise UnsupportedMethodError(method, SUPPORTED_METHODS)
        if not self.address:
            raise InvalidArgumentError(
                "No deployed contract address; run deploy first",
                field="address",
            )

        calldata = encode_call(self._abi, name)
        if name in READ_METHODS:
            raw = self.client.call(self.address, "0x" + calldata.hex())
            if not raw:
                raise ProtocolError(f"No contract code at {self.address}")
            return CallResult(method=name, value=decode_result(self._abi, name, raw))

        logger.info("Calling %s on %s", name, self.address)
        tx_hash, receipt, _ = self._transact(self.address, calldata)
        return CallResult(method=name, tx_hash=tx_hash, receipt=receipt)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Persist the address, then release the node connection."""
        if self._closed:
            return
        self._closed = True
        try:
            if self.address:
                self.store.save(self.address)
        finally:
            self.client.close()

    def __enter__(self) -> ContractService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
