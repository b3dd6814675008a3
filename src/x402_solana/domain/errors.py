"""Domain-specific exceptions.

Every failure raised by the payment flow derives from `X402Error` and carries
the `stage` at which it happened, so callers can branch on the failure kind
without string matching.
"""

from __future__ import annotations


class X402Error(Exception):
    """Base class for all payment protocol failures."""

    stage = "internal"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(X402Error):
    """Raised when an address, amount or key supplied by the caller is invalid."""

    stage = "input"


class PaymentRequiredError(X402Error):
    """Raised when a 402 response does not carry the requirements header."""

    stage = "precondition"


class AmountExceededError(X402Error):
    """Raised when the required amount is above the client's ceiling."""

    stage = "policy"

    def __init__(self, expected: int, got: int) -> None:
        super().__init__(
            f"Payment amount exceeded: expected at most {expected}, got {got}"
        )
        self.expected = expected
        self.got = got


class DecodeError(X402Error):
    """Raised when a wire value (JSON, base64, transaction bytes) cannot be parsed."""

    stage = "decode"


class VerificationError(X402Error):
    """Raised when a payment proof is rejected."""

    stage = "verification"


class LedgerError(X402Error):
    """Raised when the ledger RPC fails or rejects a transaction."""

    stage = "ledger"


class SettlementError(X402Error):
    """Raised when an accepted payment could not be submitted or confirmed."""

    stage = "settlement"


class TransportError(X402Error):
    """Raised when an HTTP exchange with a peer fails."""

    stage = "transport"


class NotImplementedPaymentError(X402Error):
    """Raised for payment paths that are declared but not supported yet."""

    stage = "not_implemented"
