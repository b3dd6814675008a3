"""Protocol-level payment constants shared by every layer."""

from __future__ import annotations

from enum import Enum

U64_MAX = 2**64 - 1

# Longest base-10 rendering of a u64 amount.
U64_MAX_DIGITS = len(str(U64_MAX))


class PaymentScheme(str, Enum):
    EXACT = "exact"


class Network(str, Enum):
    SOLANA_LOCALNET = "solana-localnet"
    SOLANA_DEVNET = "solana-devnet"
    SOLANA = "solana"


def validate_u64_digits(value: str) -> str:
    """Check that a digit-string amount fits in a u64.

    Raises:
        ValueError: If the amount is above `U64_MAX`.
    """
    if len(value) > U64_MAX_DIGITS or int(value) > U64_MAX:
        raise ValueError("Amount is outside the u64 range")
    return value
