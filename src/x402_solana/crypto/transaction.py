"""Build, sign, serialize and submit native SOL payment transactions.

Wire form of a transaction is standard base-64 of its bincode bytes. A
transaction is signed once when built and its bytes are never altered
afterwards; the facilitator submits exactly what the client signed.
"""

from __future__ import annotations

import base64
import binascii
import logging
import struct
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from ..domain.errors import DecodeError, InvalidInputError, NotImplementedPaymentError
from ..domain.payments import U64_MAX

if TYPE_CHECKING:
    from ..domain.shared.ledger_client_protocol import LedgerClientProtocol
    from .wallet import Wallet

logger = logging.getLogger(__name__)

# System program instruction layout: u32 LE discriminant + u64 LE lamports.
_SYSTEM_TRANSFER_DISCRIMINANT = 2
_SYSTEM_TRANSFER_LAYOUT = struct.Struct("<IQ")


@dataclass(frozen=True)
class NativeTransfer:
    """A system-program transfer read back from a compiled transaction."""

    source: Pubkey
    destination: Pubkey
    lamports: int


def parse_address(value: str, what: str = "address") -> Pubkey:
    """Parse a base58 account address.

    Raises:
        InvalidInputError: If the value is not a valid 32-byte base58 address.
    """
    if not value:
        raise InvalidInputError(f"Invalid {what}: empty")
    try:
        return Pubkey.from_string(value)
    except Exception as e:
        raise InvalidInputError(f"Invalid {what} {value!r}: {e}") from e


def validate_lamports(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInputError(f"Amount must be an integer, got {amount!r}")
    if amount < 0 or amount > U64_MAX:
        raise InvalidInputError(f"Amount {amount} is outside the u64 range")
    return amount


def serialize_transaction(transaction: Transaction) -> str:
    """Encode a signed transaction as base-64 text. Deterministic."""
    return base64.b64encode(bytes(transaction)).decode("ascii")


def deserialize_transaction(encoded: str) -> Transaction:
    """Decode base-64 text back into a transaction.

    The whole input must be consumed: trailing bytes are rejected.

    Raises:
        DecodeError: If the text is not strict base-64 or not a transaction.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Transaction is not valid base64: {e}") from e
    if not raw:
        raise DecodeError("Transaction is empty")
    try:
        transaction = Transaction.from_bytes(raw)
    except Exception as e:
        raise DecodeError(f"Transaction bytes could not be parsed: {e}") from e
    if bytes(transaction) != raw:
        raise DecodeError("Transaction has trailing or non-canonical bytes")
    return transaction


def decode_native_transfer(
    transaction: Transaction, index: int = 0
) -> Optional[NativeTransfer]:
    """Read instruction `index` as a system transfer, or None if it is not one."""
    message = transaction.message
    instructions = message.instructions
    if index >= len(instructions):
        return None
    instruction = instructions[index]
    keys = message.account_keys

    if instruction.program_id_index >= len(keys):
        return None
    if keys[instruction.program_id_index] != SYSTEM_PROGRAM_ID:
        return None

    data = bytes(instruction.data)
    if len(data) != _SYSTEM_TRANSFER_LAYOUT.size:
        return None
    discriminant, lamports = _SYSTEM_TRANSFER_LAYOUT.unpack(data)
    if discriminant != _SYSTEM_TRANSFER_DISCRIMINANT:
        return None

    accounts = list(instruction.accounts)
    if len(accounts) < 2 or max(accounts[:2]) >= len(keys):
        return None
    return NativeTransfer(
        source=keys[accounts[0]],
        destination=keys[accounts[1]],
        lamports=lamports,
    )


class TransactionBuilder:
    """Creates payment transactions anchored to a recent ledger blockhash."""

    def __init__(self, ledger: "LedgerClientProtocol") -> None:
        self._ledger = ledger

    async def build_transfer(
        self, wallet: "Wallet", recipient: str, amount: int
    ) -> Transaction:
        """Build a single native transfer from the wallet to `recipient`.

        The wallet is the fee payer and the only signer.

        Raises:
            InvalidInputError: If the recipient or amount is invalid.
            LedgerError: If no recent blockhash could be obtained. Not retried.
        """
        to_pubkey = parse_address(recipient, "recipient address")
        lamports = validate_lamports(amount)

        blockhash = await self._ledger.get_latest_blockhash()

        instruction = transfer(
            TransferParams(
                from_pubkey=wallet.public_key,
                to_pubkey=to_pubkey,
                lamports=lamports,
            )
        )
        message = Message([instruction], wallet.public_key)
        transaction = wallet.sign_message(message, blockhash)
        logger.debug(
            "Built transfer of %d lamports %s -> %s",
            lamports,
            wallet.address,
            to_pubkey,
        )
        return transaction

    async def build_token_transfer(
        self,
        wallet: "Wallet",
        recipient: str,
        mint: str,
        amount: int,
        decimals: int,
    ) -> Transaction:
        """SPL token payments are declared but not supported."""
        raise NotImplementedPaymentError(
            f"SPL token transfers are not supported (mint {mint})"
        )

    async def submit(self, transaction: Transaction) -> str:
        """Submit the exact signed bytes and return the confirmed signature.

        Raises:
            LedgerError: If the ledger rejects or does not confirm the transaction.
        """
        return await self._ledger.send_and_confirm_transaction(transaction)
