"""
Transfer - send native currency from the configured account.

Flow: value conversion -> nonce/gas/chain lookups -> build -> sign ->
broadcast -> await confirmation -> interpret receipt.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..node.client import NodeClient
from ..node.models import Receipt
from .builder import (
    TRANSFER_GAS_LIMIT,
    account_address,
    build_transaction,
    sign_transaction,
    to_wei,
)
from .lifecycle import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    Outcome,
    confirm,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    tx_hash: str
    sender: str
    recipient: str
    value: int
    receipt: Receipt
    outcome: Outcome


def send_transfer(
    client: NodeClient,
    private_key: str,
    recipient: str,
    amount: int,
    digits: int,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
) -> TransferResult:
    """
    Transfer ``amount * 10**digits`` wei to ``recipient`` and wait for it.

    Raises:
        InvalidArgumentError: Bad amount/digits/recipient
        SigningKeyError: Malformed private key
        RevertedError: The transfer was mined but failed
        ConfirmationTimeoutError: Not mined within the poll budget
    """
    value = to_wei(amount, digits)
    sender = account_address(private_key)
    logger.info("Transferring %d wei (~%s ETH) to %s", value, _ether(value), recipient)

    nonce = client.pending_nonce(sender)
    gas_price = client.suggest_gas_price()
    chain_id = client.chain_id()

    request = build_transaction(
        sender=sender,
        recipient=recipient,
        value=value,
        gas_limit=TRANSFER_GAS_LIMIT,
        gas_price=gas_price,
        nonce=nonce,
    )
    signed = sign_transaction(request, chain_id, private_key)

    client.send_raw_transaction(signed.raw_hex)
    logger.info("Transaction sent: %s", signed.tx_hash)

    receipt, outcome = confirm(
        client, signed.tx_hash, max_attempts, poll_interval, sleep=sleep
    )
    return TransferResult(
        tx_hash=signed.tx_hash,
        sender=sender,
        recipient=request.recipient or recipient,
        value=value,
        receipt=receipt,
        outcome=outcome,
    )


def _ether(value: int) -> str:
    whole, frac = divmod(value, 10**18)
    return f"{whole}.{frac:018d}".rstrip("0").rstrip(".")
