"""Protocol interface for facilitator implementations.

Both the in-process `FacilitatorService` and the remote HTTP
`FacilitatorClient` satisfy this protocol, so the server gate can be wired to
either one.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ...application.shared.payment_payloads import (
        PaymentPayload,
        PaymentRequirements,
        SettleResponse,
        SupportedPaymentKindsResponse,
        VerifyResponse,
    )


class FacilitatorProtocol(Protocol):
    """Verification and settlement of payment proofs."""

    async def verify(
        self,
        payload: "PaymentPayload",
        requirements: "PaymentRequirements",
    ) -> "VerifyResponse":
        """Check a payment proof against the requirements it answers.

        An invalid proof yields `verified=False`; only infrastructure failures raise.
        """
        ...

    async def settle(
        self,
        payload: "PaymentPayload",
        requirements: "PaymentRequirements",
    ) -> "SettleResponse":
        """Submit a verified proof to the ledger.

        Raises:
            VerificationError: If the proof does not verify.
            SettlementError: If submission or confirmation fails.
        """
        ...

    async def supported(self) -> "SupportedPaymentKindsResponse":
        """List the (version, scheme, network) combinations this facilitator accepts."""
        ...
