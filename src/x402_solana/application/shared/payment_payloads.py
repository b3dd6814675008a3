"""Wire models exchanged between client, resource server and facilitator.

Python attributes are snake_case; the JSON form uses the camelCase names
declared as aliases. Optional fields that are unset are omitted on the wire.
"""

from __future__ import annotations

import json
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...domain.errors import DecodeError
from ...domain.payments import (
    U64_MAX_DIGITS,
    Network,
    PaymentScheme,
    validate_u64_digits,
)

X_PAYMENT_REQUIRED_HEADER = "x-payment-required"
X_PAYMENT_HEADER = "x-payment"
X_PAYMENT_RESPONSE_HEADER = "x-payment-response"

X402_VERSION = 1

_WireModelT = TypeVar("_WireModelT", bound=BaseModel)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        """JSON-compatible dict with camelCase keys and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PaymentRequirements(_WireModel):
    """Challenge issued by the resource server with a 402 response."""

    x402_version: int = Field(X402_VERSION, alias="x402Version")
    scheme: PaymentScheme = PaymentScheme.EXACT
    network: Network
    max_amount_required: str = Field(
        ...,
        alias="maxAmountRequired",
        pattern=r"^[0-9]+$",
        max_length=U64_MAX_DIGITS,
        description="Price in the smallest unit (lamports for SOL), base-10 digits",
    )
    pay_to: str = Field(..., alias="payTo", min_length=1)
    token_address: Optional[str] = Field(None, alias="tokenAddress")
    token_decimals: Optional[int] = Field(None, alias="tokenDecimals", ge=0)
    token_name: Optional[str] = Field(None, alias="tokenName")
    memo: Optional[str] = None
    nonce: Optional[str] = None
    resource: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")
    max_timeout_seconds: Optional[int] = Field(None, alias="maxTimeoutSeconds", gt=0)

    @field_validator("max_amount_required")
    @classmethod
    def validate_max_amount_required(cls, v: str) -> str:
        return validate_u64_digits(v)

    @property
    def amount(self) -> int:
        return int(self.max_amount_required)

    @property
    def is_native(self) -> bool:
        """True when the price is in the ledger's native asset."""
        return self.token_address is None


class PaymentPayload(_WireModel):
    """Proof of payment sent by the client in the `x-payment` header."""

    x402_version: int = Field(X402_VERSION, alias="x402Version")
    scheme: PaymentScheme = PaymentScheme.EXACT
    network: Network
    signed_transaction: str = Field(..., alias="signedTransaction", min_length=1)
    from_address: str = Field(..., alias="from")


class FacilitatorRequest(_WireModel):
    """Body of the facilitator's POST /verify and POST /settle."""

    payment_payload: PaymentPayload = Field(..., alias="paymentPayload")
    payment_requirements: PaymentRequirements = Field(
        ..., alias="paymentRequirements"
    )


class VerifyResponse(_WireModel):
    verified: bool
    message: Optional[str] = None


class SettleResponse(_WireModel):
    signature: str
    settled: bool
    message: Optional[str] = None


class SupportedPaymentKind(_WireModel):
    x402_version: int = Field(X402_VERSION, alias="x402Version")
    scheme: PaymentScheme = PaymentScheme.EXACT
    network: Network


class SupportedPaymentKindsResponse(_WireModel):
    kinds: List[SupportedPaymentKind] = Field(default_factory=list)


def encode_header(model: _WireModel) -> str:
    """Render a wire model as a compact, ASCII-only JSON header value."""
    return json.dumps(model.to_wire(), separators=(",", ":"))


def _decode(model_cls: Type[_WireModelT], value: str, what: str) -> _WireModelT:
    try:
        return model_cls.model_validate_json(value)
    except ValidationError as e:
        raise DecodeError(f"Malformed {what}: {e.errors()[0]['msg']}") from e


def decode_payment_requirements(value: str) -> PaymentRequirements:
    """Parse the `x-payment-required` header value.

    Raises:
        DecodeError: If the value is not valid JSON or violates the schema.
    """
    return _decode(PaymentRequirements, value, "payment requirements")


def decode_payment_payload(value: str) -> PaymentPayload:
    """Parse the `x-payment` header value.

    Raises:
        DecodeError: If the value is not valid JSON or violates the schema.
    """
    return _decode(PaymentPayload, value, "payment payload")


def decode_settle_response(value: str) -> SettleResponse:
    return _decode(SettleResponse, value, "settle response")
