"""Unit tests for the signing wallet."""

from __future__ import annotations

import copy

import base58
import pytest
from solders.keypair import Keypair

from x402_solana.crypto.wallet import Wallet, create_signer, load_keypair_from_base58
from x402_solana.domain.errors import InvalidInputError
from tests.fixtures import InMemoryLedger


def _encoded_secret(keypair: Keypair) -> str:
    return base58.b58encode(bytes(keypair)).decode("ascii")


class TestWalletKeys:
    def test_from_private_key_keeps_identity(self) -> None:
        keypair = Keypair()

        wallet = Wallet.from_private_key(_encoded_secret(keypair))

        assert wallet.public_key == keypair.pubkey()
        assert wallet.address == str(keypair.pubkey())

    @pytest.mark.parametrize("secret", ["", "0OIl", base58.b58encode(b"short").decode()])
    def test_invalid_private_key_raises(self, secret: str) -> None:
        with pytest.raises(InvalidInputError):
            load_keypair_from_base58(secret)

    def test_repr_does_not_leak_secret(self) -> None:
        keypair = Keypair()
        wallet = Wallet(keypair)

        assert _encoded_secret(keypair) not in repr(wallet)
        assert wallet.address in repr(wallet)


class TestWalletDuplication:
    def test_copies_share_the_same_key(self) -> None:
        wallet = Wallet()

        assert copy.copy(wallet) is wallet
        assert copy.deepcopy(wallet) is wallet
        assert copy.deepcopy({"w": wallet})["w"].public_key == wallet.public_key


class TestCreateSigner:
    def test_accepts_solana_networks(self) -> None:
        keypair = Keypair()

        wallet = create_signer("solana-devnet", _encoded_secret(keypair))

        assert wallet.public_key == keypair.pubkey()

    def test_rejects_unknown_network(self) -> None:
        with pytest.raises(InvalidInputError, match="Unsupported network"):
            create_signer("base-sepolia", _encoded_secret(Keypair()))


@pytest.mark.asyncio
async def test_get_balance_reads_ledger() -> None:
    wallet = Wallet()
    ledger = InMemoryLedger(balances={wallet.public_key: 5_000})

    assert await wallet.get_balance(ledger) == 5_000
