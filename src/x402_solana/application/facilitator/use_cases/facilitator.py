"""Use cases for the facilitator application layer."""

from __future__ import annotations

import logging

from solders.transaction import Transaction

from ....crypto.transaction import TransactionBuilder, deserialize_transaction
from ....domain.errors import (
    DecodeError,
    LedgerError,
    SettlementError,
    VerificationError,
)
from ....domain.shared.ledger_client_protocol import LedgerClientProtocol
from ...shared.payment_payloads import (
    Network,
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    SupportedPaymentKind,
    SupportedPaymentKindsResponse,
    VerifyResponse,
)
from .facilitator_validators import (
    validate_protocol,
    validate_transaction_shape,
    validate_transfer_terms,
)

logger = logging.getLogger(__name__)

VERIFIED_MESSAGE = "Payment verified successfully"
SETTLED_MESSAGE = "Payment settled successfully"


class FacilitatorService:
    """Verifies payment proofs and settles them on the ledger.

    Verification only inspects the proof; it never touches the ledger. When
    `check_transfer_terms` is enabled the transfer recipient, amount and
    signatures are checked as well.
    """

    def __init__(
        self,
        network: Network,
        ledger: LedgerClientProtocol,
        *,
        check_transfer_terms: bool = False,
    ) -> None:
        self.network = Network(network)
        self.ledger = ledger
        self.check_transfer_terms = check_transfer_terms
        self._builder = TransactionBuilder(ledger)

    def _checked_transaction(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> Transaction:
        # 1) Version, scheme, network
        validate_protocol(payload, requirements, self.network)

        # 2) Decode the signed transaction
        transaction = deserialize_transaction(payload.signed_transaction)

        # 3) Structural checks
        validate_transaction_shape(transaction)

        # 4) Optional payment terms
        if self.check_transfer_terms:
            validate_transfer_terms(transaction, requirements)

        return transaction

    async def verify(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> VerifyResponse:
        """Check a proof. Invalid proofs yield `verified=False`, never an exception."""
        try:
            self._checked_transaction(payload, requirements)
        except (DecodeError, VerificationError) as e:
            logger.info("Payment from %s rejected: %s", payload.from_address, e)
            return VerifyResponse(verified=False, message=str(e))
        return VerifyResponse(verified=True, message=VERIFIED_MESSAGE)

    async def settle(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> SettleResponse:
        """Re-verify a proof and submit its exact bytes to the ledger.

        Raises:
            VerificationError: If the proof does not verify.
            SettlementError: If the ledger rejects or does not confirm it.
        """
        try:
            transaction = self._checked_transaction(payload, requirements)
        except DecodeError as e:
            raise VerificationError(str(e)) from e

        try:
            signature = await self._builder.submit(transaction)
        except LedgerError as e:
            logger.error("Settlement failed for %s: %s", payload.from_address, e)
            raise SettlementError(f"Settlement failed: {e}") from e

        logger.info("Payment from %s settled: %s", payload.from_address, signature)
        return SettleResponse(signature=signature, settled=True, message=SETTLED_MESSAGE)

    async def supported(self) -> SupportedPaymentKindsResponse:
        return SupportedPaymentKindsResponse(
            kinds=[SupportedPaymentKind(network=self.network)]
        )
