"""Shared pytest fixtures for payment tests."""

from __future__ import annotations

import pytest
from solders.keypair import Keypair

from x402_solana.application.facilitator.use_cases.facilitator import (
    FacilitatorService,
)
from x402_solana.application.shared.payment_payloads import (
    Network,
    PaymentPayload,
    PaymentRequirements,
)
from x402_solana.crypto.transaction import TransactionBuilder, serialize_transaction
from x402_solana.crypto.wallet import Wallet
from tests.fixtures import InMemoryLedger

CLIENT_STARTING_BALANCE = 1_000_000_000


@pytest.fixture
def client_wallet() -> Wallet:
    """Generate a fresh paying wallet."""
    return Wallet()


@pytest.fixture
def pay_to_address() -> str:
    """Address of the resource server's receiving account."""
    return str(Keypair().pubkey())


@pytest.fixture
def ledger(client_wallet: Wallet) -> InMemoryLedger:
    """In-memory ledger where the client wallet is funded."""
    return InMemoryLedger(
        balances={client_wallet.public_key: CLIENT_STARTING_BALANCE}
    )


@pytest.fixture
def builder(ledger: InMemoryLedger) -> TransactionBuilder:
    return TransactionBuilder(ledger)


@pytest.fixture
def facilitator_service(ledger: InMemoryLedger) -> FacilitatorService:
    """Facilitator settling on devnet against the in-memory ledger."""
    return FacilitatorService(Network.SOLANA_DEVNET, ledger)


@pytest.fixture
def requirements(pay_to_address: str) -> PaymentRequirements:
    """Requirements for 1800 lamports on devnet."""
    return PaymentRequirements(
        network=Network.SOLANA_DEVNET,
        max_amount_required="1800",
        pay_to=pay_to_address,
        memo="Weather information",
    )


@pytest.fixture
async def payload(
    builder: TransactionBuilder,
    client_wallet: Wallet,
    requirements: PaymentRequirements,
) -> PaymentPayload:
    """A correctly signed proof answering `requirements`."""
    transaction = await builder.build_transfer(
        client_wallet, requirements.pay_to, requirements.amount
    )
    return PaymentPayload(
        network=requirements.network,
        signed_transaction=serialize_transaction(transaction),
        from_address=client_wallet.address,
    )
