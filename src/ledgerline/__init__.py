__all__ = [
    # Configuration
    "Settings",
    "write_env_template",
    # Node access
    "NodeClient",
    "TransportConfig",
    "Block",
    "Receipt",
    "TransactionLookup",
    # Transactions
    "TransactionRequest",
    "SignedTransaction",
    "build_transaction",
    "sign_transaction",
    "to_wei",
    "send_transfer",
    "TransferResult",
    # Confirmation
    "Outcome",
    "await_confirmation",
    "interpret_receipt",
    "is_retryable",
    # Contracts
    "AddressStore",
    "ContractService",
    # Errors
    "LedgerlineError",
    "TransportError",
    "ProtocolError",
    "RpcError",
    "NotFoundError",
    "ConfirmationTimeoutError",
    "RevertedError",
    "InvalidArgumentError",
    "ValueOverflowError",
    "UnsupportedMethodError",
    "SigningKeyError",
    "EncodingError",
    "ConfigError",
]

from .config import Settings, write_env_template
from .contracts.service import AddressStore, ContractService
from .errors import (
    ConfigError,
    ConfirmationTimeoutError,
    EncodingError,
    InvalidArgumentError,
    LedgerlineError,
    NotFoundError,
    ProtocolError,
    RevertedError,
    RpcError,
    SigningKeyError,
    TransportError,
    UnsupportedMethodError,
    ValueOverflowError,
)
from .node.client import NodeClient
from .node.models import Block, Receipt, TransactionLookup
from .node.transport import TransportConfig
from .tx.builder import (
    SignedTransaction,
    TransactionRequest,
    build_transaction,
    sign_transaction,
    to_wei,
)
from .tx.lifecycle import Outcome, await_confirmation, interpret_receipt, is_retryable
from .tx.transfer import TransferResult, send_transfer
