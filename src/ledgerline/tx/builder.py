"""
Transaction Builder - Build and sign legacy EIP-155 transactions.

Uses eth-account for signing.  The chain id is bound into the signature,
so a transaction signed for one network cannot be replayed on another.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address

from ..errors import (
    EncodingError,
    InvalidArgumentError,
    SigningKeyError,
    ValueOverflowError,
)

UINT256_MAX = 2**256 - 1
MAX_DIGITS = 77
TRANSFER_GAS_LIMIT = 21_000


def to_wei(amount: int, digits: int) -> int:
    """
    Convert an integer magnitude and decimal-place count to the smallest unit.

    The result is ``amount * 10**digits`` computed with integers only, e.g.
    ``to_wei(1, 18)`` is one ether and ``to_wei(1, 15)`` is 0.001 ether.

    Raises:
        InvalidArgumentError: If amount or digits is negative or not an int
        ValueOverflowError: If the result does not fit in uint256
    """
    for name, value in (("amount", amount), ("digits", digits)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentError(
                f"{name} must be an integer, got {value!r}", field=name, value=value
            )
        if value < 0:
            raise InvalidArgumentError(
                f"{name} must be non-negative, got {value}", field=name, value=value
            )

    if amount == 0:
        return 0
    # 10**78 > 2**256, so larger exponents never fit; check before multiplying.
    if digits > MAX_DIGITS or amount > UINT256_MAX // 10**digits:
        raise ValueOverflowError(
            f"{amount} x 10^{digits} does not fit in uint256",
            field="amount",
            value=amount,
            details={"digits": digits},
        )
    return amount * 10**digits


def checksum(address: str, field: str = "address") -> str:
    if not isinstance(address, str) or not is_address(address):
        raise InvalidArgumentError(f"Invalid {field}: {address!r}", field=field, value=address)
    return to_checksum_address(address)


def load_account(private_key: str) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a hex private key.

    Raises:
        SigningKeyError: If the key is malformed (the key itself is never
            included in the message)
    """
    try:
        return Account.from_key(private_key)
    except Exception as exc:
        raise SigningKeyError(
            f"Malformed private key ({type(exc).__name__})"
        ) from None


def account_address(private_key: str) -> str:
    """Checksummed address for a private key."""
    return load_account(private_key).address


@dataclass(frozen=True)
class TransactionRequest:
    """Unsigned transaction.  ``recipient=None`` creates a contract."""

    sender: str
    recipient: Optional[str]
    value: int
    gas_limit: int
    gas_price: int
    nonce: int
    chain_id: Optional[int] = None
    data: bytes = b""

    @property
    def is_contract_creation(self) -> bool:
        return self.recipient is None

    def as_dict(self) -> dict[str, Any]:
        """eth-account transaction dict (legacy fields)."""
        tx: dict[str, Any] = {
            "value": self.value,
            "gas": self.gas_limit,
            "gasPrice": self.gas_price,
            "nonce": self.nonce,
            "data": "0x" + self.data.hex(),
        }
        if self.recipient is not None:
            tx["to"] = self.recipient
        if self.chain_id is not None:
            tx["chainId"] = self.chain_id
        return tx


@dataclass(frozen=True)
class SignedTransaction:
    request: TransactionRequest
    raw: bytes
    tx_hash: str

    @property
    def raw_hex(self) -> str:
        return "0x" + self.raw.hex()


def build_transaction(
    sender: str,
    recipient: Optional[str],
    value: int,
    gas_limit: int,
    gas_price: int,
    nonce: int,
    data: bytes = b"",
) -> TransactionRequest:
    """
    Build an unsigned transaction.

    Args:
        sender: Address that will sign
        recipient: Destination address, or None for contract creation
        value: Amount in wei
        gas_limit: Gas limit
        gas_price: Gas price in wei
        nonce: Sender nonce
        data: Calldata or creation bytecode

    Returns:
        TransactionRequest with no chain id; it is bound at signing time
    """
    for name, number in (
        ("value", value),
        ("gas_limit", gas_limit),
        ("gas_price", gas_price),
        ("nonce", nonce),
    ):
        if isinstance(number, bool) or not isinstance(number, int) or number < 0:
            raise InvalidArgumentError(
                f"{name} must be a non-negative integer, got {number!r}",
                field=name,
                value=number,
            )
    if value > UINT256_MAX:
        raise ValueOverflowError("value does not fit in uint256", field="value", value=value)

    return TransactionRequest(
        sender=checksum(sender, "sender"),
        recipient=checksum(recipient, "recipient") if recipient is not None else None,
        value=value,
        gas_limit=gas_limit,
        gas_price=gas_price,
        nonce=nonce,
        data=bytes(data),
    )


def sign_transaction(
    request: TransactionRequest,
    chain_id: int,
    private_key: str,
) -> SignedTransaction:
    """
    Sign a transaction for ``chain_id`` (EIP-155).

    Signing is deterministic: identical inputs give identical bytes.

    Raises:
        SigningKeyError: If the key is malformed or does not belong to the sender
        EncodingError: If the request cannot be serialized
    """
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id <= 0:
        raise InvalidArgumentError(
            f"chain_id must be a positive integer, got {chain_id!r}",
            field="chain_id",
            value=chain_id,
        )

    account = load_account(private_key)
    if account.address != request.sender:
        raise SigningKeyError(
            f"Private key does not belong to sender {request.sender}"
        )

    bound = replace(request, chain_id=chain_id)
    try:
        signed = account.sign_transaction(bound.as_dict())
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Cannot serialize transaction: {exc}") from exc

    return SignedTransaction(
        request=bound,
        raw=bytes(signed.raw_transaction),
        tx_hash="0x" + bytes(signed.hash).hex(),
    )
