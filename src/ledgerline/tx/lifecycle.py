"""
Transaction lifecycle - wait for a submitted transaction to be mined.

The node only offers pull-style queries, so confirmation is a polling loop
on a fixed cadence:

    Submitted -> Waiting -> Confirmed | TimedOut | Failed

Transient transport failures consume an attempt and the loop carries on.
Everything else ends the wait.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from ..errors import (
    ConfirmationTimeoutError,
    InvalidArgumentError,
    ProtocolError,
    RevertedError,
)
from ..node.models import Receipt, TransactionLookup

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_POLL_INTERVAL = 5.0

RETRYABLE_CATEGORIES = frozenset({"connection", "timeout", "dns", "stream", "http_status"})

# Only consulted for errors that carry no transport category.
RETRYABLE_MARKERS = (
    "connection",
    "timeout",
    "timed out",
    "network",
    "eof",
    "name resolution",
    "reset by peer",
    "broken pipe",
    "temporarily unavailable",
)


class ConfirmationSource(Protocol):
    def transaction_by_hash(self, tx_hash: str) -> TransactionLookup: ...

    def transaction_receipt(self, tx_hash: str) -> Receipt: ...


class Outcome(enum.Enum):
    SUCCEEDED = "succeeded"
    DEPLOYED = "deployed"


@dataclass
class RetryState:
    max_attempts: int
    poll_interval: float
    attempt: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    @property
    def elapsed(self) -> float:
        return self.attempt * self.poll_interval


def is_retryable(exc: BaseException) -> bool:
    """
    Decide whether a failed status query is worth another attempt.

    Errors that expose a category (ledgerline errors) are classified by it.
    Builtin connection/timeout errors are retryable.  Anything else falls
    back to matching the message against known transport symptoms.
    """
    category = getattr(exc, "category", None)
    if category is not None:
        return category in RETRYABLE_CATEGORIES
    if isinstance(exc, (ConnectionError, TimeoutError, EOFError)):
        return True
    text = str(exc).lower()
    return any(marker in text for marker in RETRYABLE_MARKERS)


def await_confirmation(
    client: ConfirmationSource,
    tx_hash: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> Receipt:
    """
    Poll the node until ``tx_hash`` is mined.

    Args:
        client: Node client (or anything with the two lookup methods)
        tx_hash: Hash returned at submission
        max_attempts: Poll budget, must be positive
        poll_interval: Seconds to wait before each poll
        sleep: Injected for tests

    Returns:
        The transaction receipt

    Raises:
        InvalidArgumentError: If max_attempts <= 0
        ProtocolError: On a non-retryable status error or any receipt error
        ConfirmationTimeoutError: If the budget is exhausted
    """
    if max_attempts <= 0:
        raise InvalidArgumentError(
            f"max_attempts must be greater than 0, got {max_attempts}",
            field="max_attempts",
            value=max_attempts,
        )

    state = RetryState(max_attempts=max_attempts, poll_interval=poll_interval)
    logger.info("Waiting for transaction %s (max attempts: %d)", tx_hash, max_attempts)

    while not state.exhausted:
        state.attempt += 1
        sleep(poll_interval)

        try:
            lookup = client.transaction_by_hash(tx_hash)
        except Exception as exc:
            if is_retryable(exc):
                logger.warning(
                    "Attempt %d: network error for %s: %s", state.attempt, tx_hash, exc
                )
                continue
            if isinstance(exc, ProtocolError):
                raise
            raise ProtocolError(
                f"Failed to get status of transaction {tx_hash}: {exc}"
            ) from exc

        if not lookup.found:
            logger.debug("Attempt %d: %s not visible to node yet", state.attempt, tx_hash)
            continue
        if lookup.pending:
            logger.info("Attempt %d: %s still pending...", state.attempt, tx_hash)
            continue

        # The node says it is no longer pending; a missing receipt now means
        # the node is inconsistent, not that we should wait longer.
        try:
            receipt = client.transaction_receipt(tx_hash)
        except ProtocolError:
            raise
        except Exception as exc:
            raise ProtocolError(
                f"Failed to get receipt of transaction {tx_hash}: {exc}"
            ) from exc

        logger.info("Transaction %s confirmed after %gs", tx_hash, state.elapsed)
        return receipt

    raise ConfirmationTimeoutError(tx_hash, state.attempt, state.elapsed)


def interpret_receipt(receipt: Receipt) -> Outcome:
    """
    Turn a receipt into a caller-facing outcome.

    A receipt that names a created contract is a deployment whatever its
    status flag says.  A failed receipt without one is a revert.

    Raises:
        RevertedError: If the transaction failed and created nothing
    """
    if receipt.has_contract_address:
        return Outcome.DEPLOYED
    if receipt.success:
        return Outcome.SUCCEEDED
    raise RevertedError(f"Transaction {receipt.tx_hash} reverted", receipt=receipt)


def confirm(
    client: ConfirmationSource,
    tx_hash: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[Receipt, Outcome]:
    """Await confirmation and interpret the receipt."""
    receipt = await_confirmation(
        client, tx_hash, max_attempts, poll_interval, sleep=sleep
    )
    return receipt, interpret_receipt(receipt)
