from __future__ import annotations

from typing import Any, Optional, TYPE_CHECKING

import base58
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from ..domain.payments import Network
from ..domain.errors import InvalidInputError

if TYPE_CHECKING:
    from ..domain.shared.ledger_client_protocol import LedgerClientProtocol


def load_keypair_from_base58(private_key: str) -> Keypair:
    """Decode a base58-encoded 64-byte secret key into a keypair.

    Raises:
        InvalidInputError: If the text is not base58 or not a valid keypair.
    """
    if not private_key:
        raise InvalidInputError("Private key cannot be empty")
    try:
        raw = base58.b58decode(private_key.strip())
    except ValueError as e:
        raise InvalidInputError(f"Private key is not valid base58: {e}") from e
    if len(raw) != 64:
        raise InvalidInputError(
            f"Private key must decode to 64 bytes, got {len(raw)}"
        )
    try:
        return Keypair.from_bytes(raw)
    except Exception as e:
        raise InvalidInputError(f"Invalid private key: {e}") from e


class Wallet:
    """Signing identity for outgoing payments.

    The keypair never leaves the wallet: callers get the public key and signed
    transactions only. Copies of a wallet are the wallet itself, so a duplicated
    reference always signs with the same key.
    """

    def __init__(self, keypair: Optional[Keypair] = None) -> None:
        self._keypair = keypair if keypair is not None else Keypair()

    @classmethod
    def from_private_key(cls, private_key: str) -> "Wallet":
        return cls(load_keypair_from_base58(private_key))

    @property
    def public_key(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def address(self) -> str:
        return str(self._keypair.pubkey())

    def sign_message(self, message: Message, recent_blockhash: Hash) -> Transaction:
        """Sign a message exactly once and return the finished transaction."""
        return Transaction([self._keypair], message, recent_blockhash)

    async def get_balance(self, ledger: "LedgerClientProtocol") -> int:
        """Balance of this wallet in lamports."""
        return await ledger.get_balance(self.public_key)

    def __copy__(self) -> "Wallet":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "Wallet":
        return self

    def __repr__(self) -> str:
        return f"Wallet(address={self.address!r})"


def create_signer(network: Network | str, private_key: str) -> Wallet:
    """Build the signing wallet for a network.

    Only Solana cluster networks are accepted; the key format is the same for
    all of them.
    """
    try:
        Network(network)
    except ValueError as e:
        raise InvalidInputError(f"Unsupported network: {network}") from e
    return Wallet.from_private_key(private_key)
