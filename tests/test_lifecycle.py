"""Tests for transaction confirmation polling and receipt interpretation."""

from __future__ import annotations

import logging
from typing import Union

import pytest

from ledgerline.errors import (
    ConfirmationTimeoutError,
    InvalidArgumentError,
    NotFoundError,
    ProtocolError,
    RevertedError,
    RpcError,
    TransportError,
)
from ledgerline.node.models import Receipt, TransactionLookup
from ledgerline.tx.lifecycle import (
    Outcome,
    RetryState,
    await_confirmation,
    confirm,
    interpret_receipt,
    is_retryable,
)

TX_HASH = "0x" + "ab" * 32
CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

PENDING = TransactionLookup(found=True, pending=True)
MINED = TransactionLookup(found=True, pending=False, block_number=100)
UNKNOWN = TransactionLookup(found=False)

Step = Union[TransactionLookup, Exception]


def _receipt(success: bool = True, contract_address: str | None = None) -> Receipt:
    return Receipt(
        tx_hash=TX_HASH,
        block_hash="0x" + "cd" * 32,
        block_number=100,
        transaction_index=0,
        success=success,
        contract_address=contract_address,
    )


class ScriptedNode:
    """Answers transaction_by_hash from a script, one step per poll."""

    def __init__(
        self,
        steps: list[Step],
        receipt: Union[Receipt, Exception, None] = None,
        repeat_last: bool = False,
    ):
        self.steps = steps
        self.receipt = receipt if receipt is not None else _receipt()
        self.repeat_last = repeat_last
        self.lookups = 0
        self.receipt_calls = 0

    def transaction_by_hash(self, tx_hash: str) -> TransactionLookup:
        assert tx_hash == TX_HASH
        index = self.lookups
        self.lookups += 1
        if index >= len(self.steps):
            if not self.repeat_last:
                raise AssertionError(f"Unexpected poll #{index + 1}")
            index = len(self.steps) - 1
        step = self.steps[index]
        if isinstance(step, Exception):
            raise step
        return step

    def transaction_receipt(self, tx_hash: str) -> Receipt:
        self.receipt_calls += 1
        if isinstance(self.receipt, Exception):
            raise self.receipt
        return self.receipt


@pytest.fixture()
def delays() -> list[float]:
    return []


class TestAwaitConfirmation:
    """Tests for the polling state machine."""

    def test_rejects_non_positive_budget(self, delays: list[float]) -> None:
        node = ScriptedNode([MINED])
        for budget in (0, -1):
            with pytest.raises(InvalidArgumentError):
                await_confirmation(node, TX_HASH, budget, 1.0, sleep=delays.append)
        assert node.lookups == 0
        assert delays == []

    def test_mined_on_first_poll(self, delays: list[float]) -> None:
        node = ScriptedNode([MINED])
        receipt = await_confirmation(node, TX_HASH, 5, 2.0, sleep=delays.append)
        assert receipt.tx_hash == TX_HASH
        assert node.lookups == 1
        assert node.receipt_calls == 1
        # The cadence waits before every poll, including the first.
        assert delays == [2.0]

    def test_always_pending_times_out_after_exactly_max_attempts(
        self, delays: list[float]
    ) -> None:
        node = ScriptedNode([PENDING], repeat_last=True)
        with pytest.raises(ConfirmationTimeoutError) as excinfo:
            await_confirmation(node, TX_HASH, 3, 5.0, sleep=delays.append)

        assert node.lookups == 3
        assert node.receipt_calls == 0
        assert delays == [5.0, 5.0, 5.0]
        assert excinfo.value.attempts == 3
        assert excinfo.value.elapsed == 15.0
        assert excinfo.value.tx_hash == TX_HASH

    def test_transport_errors_consume_attempts_then_succeed(
        self, delays: list[float]
    ) -> None:
        node = ScriptedNode(
            [
                TransportError("connection refused", category="connection"),
                TransportError("read timed out", category="timeout"),
                MINED,
            ]
        )
        receipt = await_confirmation(node, TX_HASH, 3, 1.0, sleep=delays.append)
        assert receipt.success
        assert node.lookups == 3
        assert len(delays) == 3

    def test_transport_errors_exhaust_budget(self, delays: list[float]) -> None:
        node = ScriptedNode(
            [TransportError("stream closed", category="stream")], repeat_last=True
        )
        with pytest.raises(ConfirmationTimeoutError):
            await_confirmation(node, TX_HASH, 4, 0.5, sleep=delays.append)
        assert node.lookups == 4

    def test_protocol_error_aborts_on_first_attempt(self, delays: list[float]) -> None:
        error = ProtocolError("Malformed JSON-RPC response to eth_getTransactionByHash")
        node = ScriptedNode([error, MINED])
        with pytest.raises(ProtocolError) as excinfo:
            await_confirmation(node, TX_HASH, 5, 1.0, sleep=delays.append)
        assert excinfo.value is error
        assert node.lookups == 1
        assert delays == [1.0]

    def test_rpc_rejection_is_not_retried(self, delays: list[float]) -> None:
        node = ScriptedNode([RpcError("invalid argument 0: hex string has length 10", code=-32602)])
        with pytest.raises(RpcError):
            await_confirmation(node, TX_HASH, 5, 1.0, sleep=delays.append)
        assert node.lookups == 1

    def test_unknown_error_is_surfaced_as_protocol_error(
        self, delays: list[float]
    ) -> None:
        cause = KeyError("blockNumber")
        node = ScriptedNode([cause, MINED])
        with pytest.raises(ProtocolError) as excinfo:
            await_confirmation(node, TX_HASH, 5, 1.0, sleep=delays.append)
        assert excinfo.value.__cause__ is cause
        assert node.lookups == 1

    def test_uncategorised_transport_error_uses_message(
        self, delays: list[float]
    ) -> None:
        node = ScriptedNode([TransportError("unexpected EOF"), MINED])
        await_confirmation(node, TX_HASH, 3, 1.0, sleep=delays.append)
        assert node.lookups == 2

        node = ScriptedNode([TransportError("certificate verify failed"), MINED])
        with pytest.raises(ProtocolError):
            await_confirmation(node, TX_HASH, 3, 1.0, sleep=delays.append)
        assert node.lookups == 1

    def test_builtin_connection_error_is_retried(self, delays: list[float]) -> None:
        node = ScriptedNode([ConnectionResetError(104, "Connection reset by peer"), MINED])
        await_confirmation(node, TX_HASH, 3, 1.0, sleep=delays.append)
        assert node.lookups == 2

    def test_unknown_then_pending_then_mined(self, delays: list[float]) -> None:
        node = ScriptedNode([UNKNOWN, PENDING, PENDING, MINED])
        receipt = await_confirmation(node, TX_HASH, 10, 1.0, sleep=delays.append)
        assert receipt.tx_hash == TX_HASH
        assert node.lookups == 4
        assert node.receipt_calls == 1

    def test_receipt_failure_is_fatal(self, delays: list[float]) -> None:
        node = ScriptedNode(
            [MINED, MINED], receipt=NotFoundError(f"Receipt for {TX_HASH} not found")
        )
        with pytest.raises(ProtocolError) as excinfo:
            await_confirmation(node, TX_HASH, 5, 1.0, sleep=delays.append)
        assert isinstance(excinfo.value.__cause__, NotFoundError)
        assert node.lookups == 1

    def test_receipt_transport_error_is_not_retried(self, delays: list[float]) -> None:
        node = ScriptedNode(
            [MINED, MINED],
            receipt=TransportError("connection reset", category="connection"),
        )
        with pytest.raises(ProtocolError):
            await_confirmation(node, TX_HASH, 5, 1.0, sleep=delays.append)
        assert node.lookups == 1
        assert node.receipt_calls == 1

    def test_logs_transient_failures(
        self, delays: list[float], caplog: pytest.LogCaptureFixture
    ) -> None:
        node = ScriptedNode([TransportError("connection refused", category="connection"), MINED])
        with caplog.at_level(logging.WARNING, logger="ledgerline.tx.lifecycle"):
            await_confirmation(node, TX_HASH, 3, 1.0, sleep=delays.append)
        assert "Attempt 1: network error" in caplog.text


class TestIsRetryable:
    """Tests for transient-failure classification."""

    @pytest.mark.parametrize("category", ["connection", "timeout", "dns", "stream", "http_status"])
    def test_transport_categories_are_retryable(self, category: str) -> None:
        assert is_retryable(TransportError("boom", category=category))

    def test_category_wins_over_message(self) -> None:
        # A protocol error mentioning "connection" is still a protocol error.
        assert not is_retryable(ProtocolError("connection header malformed"))
        assert not is_retryable(RpcError("request timeout exceeded by tracer", code=-32000))

    @pytest.mark.parametrize(
        "message",
        [
            "Connection refused",
            "i/o timeout",
            "read: operation timed out",
            "network is unreachable",
            "unexpected EOF",
            "Temporary failure in name resolution",
        ],
    )
    def test_message_fallback(self, message: str) -> None:
        assert is_retryable(Exception(message))

    @pytest.mark.parametrize(
        "message", ["invalid character 'x' looking for beginning of value", "nonce too low"]
    )
    def test_other_messages_are_fatal(self, message: str) -> None:
        assert not is_retryable(Exception(message))

    def test_builtin_timeout(self) -> None:
        assert is_retryable(TimeoutError())


class TestInterpretReceipt:
    """Tests for the caller-facing receipt rule."""

    def test_success(self) -> None:
        assert interpret_receipt(_receipt(success=True)) is Outcome.SUCCEEDED

    def test_successful_deployment(self) -> None:
        assert interpret_receipt(_receipt(True, CONTRACT)) is Outcome.DEPLOYED

    def test_failed_flag_with_contract_address_is_deployment(self) -> None:
        assert interpret_receipt(_receipt(False, CONTRACT)) is Outcome.DEPLOYED

    def test_failed_without_contract_address_is_reverted(self) -> None:
        receipt = _receipt(False, None)
        with pytest.raises(RevertedError) as excinfo:
            interpret_receipt(receipt)
        assert excinfo.value.receipt is receipt

    def test_zero_address_counts_as_empty(self) -> None:
        receipt = _receipt(False, "0x" + "0" * 40)
        with pytest.raises(RevertedError):
            interpret_receipt(receipt)


class TestConfirm:
    """Tests for await + interpret."""

    def test_reverted_transfer(self) -> None:
        node = ScriptedNode([MINED], receipt=_receipt(success=False))
        with pytest.raises(RevertedError):
            confirm(node, TX_HASH, 3, 0.0, sleep=lambda _: None)

    def test_returns_receipt_and_outcome(self) -> None:
        node = ScriptedNode([PENDING, MINED], receipt=_receipt(True, CONTRACT))
        receipt, outcome = confirm(node, TX_HASH, 3, 0.0, sleep=lambda _: None)
        assert outcome is Outcome.DEPLOYED
        assert receipt.contract_address == CONTRACT


class TestRetryState:
    def test_elapsed_and_exhausted(self) -> None:
        state = RetryState(max_attempts=2, poll_interval=5.0)
        assert not state.exhausted
        state.attempt = 2
        assert state.exhausted
        assert state.elapsed == 10.0
