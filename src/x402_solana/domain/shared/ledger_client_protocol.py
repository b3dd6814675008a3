"""Protocol interface for ledger (Solana RPC) client implementations.

The codec and the facilitator only talk to the ledger through this protocol,
which keeps them testable against an in-memory ledger.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from solders.hash import Hash
    from solders.pubkey import Pubkey
    from solders.transaction import Transaction


class LedgerClientProtocol(Protocol):
    """Protocol defining the ledger operations used by the payment flow."""

    async def get_latest_blockhash(self) -> "Hash":
        """Fetch a recent blockhash to anchor a new transaction.

        Raises:
            LedgerError: If the ledger cannot be reached or answers with an error.
        """
        ...

    async def send_and_confirm_transaction(self, transaction: "Transaction") -> str:
        """Submit the exact signed transaction bytes and wait for confirmation.

        Args:
            transaction: Fully signed transaction. It is never re-signed.

        Returns:
            Base58 transaction signature.

        Raises:
            LedgerError: If submission is rejected or confirmation fails.
        """
        ...

    async def get_balance(self, pubkey: "Pubkey") -> int:
        """Return the balance of an account in lamports."""
        ...

    async def aclose(self) -> None:
        """Release any underlying connection resources."""
        ...
