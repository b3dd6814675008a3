"""Validation functions for payment proofs (pure, no I/O).

Each check raises `VerificationError` with a human-readable reason; the
facilitator turns that into a negative verification result.
"""

from __future__ import annotations

from solders.transaction import Transaction

from ....crypto.transaction import decode_native_transfer, parse_address
from ....domain.errors import InvalidInputError, VerificationError
from ...shared.payment_payloads import (
    X402_VERSION,
    Network,
    PaymentPayload,
    PaymentRequirements,
    PaymentScheme,
)


def validate_protocol(
    payload: PaymentPayload,
    requirements: PaymentRequirements,
    network: Network,
) -> None:
    """Validate version, scheme and network of a proof.

    Args:
        payload: Proof sent by the client
        requirements: Requirements the proof claims to satisfy
        network: Network this facilitator settles on

    Raises:
        VerificationError: If any of them does not match
    """
    if payload.x402_version != X402_VERSION:
        raise VerificationError(
            f"Unsupported x402 version: {payload.x402_version}"
        )
    if payload.scheme != PaymentScheme.EXACT:
        raise VerificationError(f"Unsupported payment scheme: {payload.scheme.value}")
    if payload.network != network:
        raise VerificationError(
            f"Network mismatch: expected {network.value}, got {payload.network.value}"
        )
    if requirements.network != payload.network:
        raise VerificationError(
            "Network mismatch: payment does not target the required network "
            f"{requirements.network.value}"
        )


def validate_transaction_shape(transaction: Transaction) -> None:
    """A proof must carry at least one instruction and one signature."""
    if len(transaction.message.instructions) == 0:
        raise VerificationError("Transaction has no instructions")
    if len(transaction.signatures) == 0:
        raise VerificationError("Transaction has no signatures")


def validate_transfer_terms(
    transaction: Transaction, requirements: PaymentRequirements
) -> None:
    """Check that the transaction pays exactly what the requirements ask for.

    Args:
        transaction: Decoded proof transaction
        requirements: Requirements with recipient and price

    Raises:
        VerificationError: If the first instruction is not a native transfer of
            `max_amount_required` lamports to `pay_to`, or a signature is invalid
    """
    if not requirements.is_native:
        raise VerificationError("SPL token payments are not supported")

    transfer = decode_native_transfer(transaction)
    if transfer is None:
        raise VerificationError("First instruction is not a native transfer")

    try:
        pay_to = parse_address(requirements.pay_to, "payTo address")
    except InvalidInputError as e:
        raise VerificationError(str(e)) from e

    if transfer.destination != pay_to:
        raise VerificationError(
            f"Transfer recipient {transfer.destination} does not match {pay_to}"
        )
    if transfer.lamports != requirements.amount:
        raise VerificationError(
            f"Transfer amount {transfer.lamports} does not match "
            f"{requirements.max_amount_required}"
        )
    if not all(transaction.verify_with_results()):
        raise VerificationError("Transaction signature is invalid")
