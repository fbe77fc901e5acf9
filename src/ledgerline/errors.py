"""Exception hierarchy for ledgerline.

Every error carries an ``exit_code`` used by the CLI and a ``category``
used by the retry classifier in :mod:`ledgerline.tx.lifecycle`.
"""

from __future__ import annotations

from typing import Any, Optional


class LedgerlineError(RuntimeError):
    """Base exception for all ledgerline errors."""

    exit_code: int = 1
    category: Optional[str] = None

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(LedgerlineError):
    """Raised when the node cannot be reached."""

    exit_code = 10

    def __init__(
        self,
        message: str,
        category: Optional[str] = None,
        endpoint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        # None means the transport did not say; the classifier falls back
        # to inspecting the message text.
        self.category = category
        self.endpoint = endpoint


class ProtocolError(LedgerlineError):
    """Raised when the node answered but the answer is unusable."""

    exit_code = 11
    category = "protocol"


class RpcError(ProtocolError):
    """Raised when the node returns a JSON-RPC error object."""

    category = "rpc"

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.data = data


class NotFoundError(LedgerlineError):
    """Raised when the node has no such block or receipt."""

    exit_code = 12
    category = "not_found"


class ConfirmationTimeoutError(LedgerlineError):
    """Raised when a transaction is not confirmed within the retry budget."""

    exit_code = 13
    category = "confirmation_timeout"

    def __init__(self, tx_hash: str, attempts: int, elapsed: float):
        super().__init__(
            f"Transaction {tx_hash} not confirmed within {elapsed:g}s "
            f"({attempts} attempts)",
            details={"tx_hash": tx_hash, "attempts": attempts, "elapsed": elapsed},
        )
        self.tx_hash = tx_hash
        self.attempts = attempts
        self.elapsed = elapsed


class RevertedError(LedgerlineError):
    """Raised when a mined transaction failed."""

    exit_code = 14
    category = "reverted"

    def __init__(self, message: str, receipt: Any = None):
        super().__init__(message)
        self.receipt = receipt


class InvalidArgumentError(LedgerlineError, ValueError):
    """Raised when a caller supplies invalid parameters."""

    exit_code = 2
    category = "invalid_argument"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class ValueOverflowError(InvalidArgumentError):
    """Raised when a transfer value does not fit the network's integer width."""


class UnsupportedMethodError(InvalidArgumentError):
    """Raised when an unknown contract method is requested."""

    def __init__(self, method: str, supported: tuple[str, ...] = ()):
        message = f"Unsupported contract method: {method!r}"
        if supported:
            message += f" (expected one of: {', '.join(supported)})"
        super().__init__(message, field="method", value=method)
        self.method = method


class SigningKeyError(LedgerlineError):
    """Raised when the private key is malformed or does not match the sender."""

    exit_code = 3
    category = "signing_key"


class EncodingError(LedgerlineError):
    """Raised when a transaction cannot be canonically serialized."""

    exit_code = 4
    category = "encoding"


class ConfigError(LedgerlineError):
    """Raised when configuration cannot be loaded or written."""

    exit_code = 5
    category = "config"
