from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...domain.payments import U64_MAX_DIGITS, validate_u64_digits
from ...domain.shared.auth_headers import AuthHeaderProvider, StaticAuthHeaders
from ...envs.defaults import DEFAULT_FACILITATOR_URL
from .payment_payloads import Network


class TokenConfig(BaseModel):
    """SPL token used instead of native SOL for a price."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., min_length=1)
    decimals: int = Field(..., ge=0, le=255)
    name: str


class SvmConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    default_token: Optional[TokenConfig] = None


class X402Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    svm_config: Optional[SvmConfig] = None

    @property
    def default_token(self) -> Optional[TokenConfig]:
        return self.svm_config.default_token if self.svm_config else None


class RouteConfig(BaseModel):
    """Price and metadata for one paid route."""

    model_config = ConfigDict(frozen=True)

    price: str = Field(..., pattern=r"^[0-9]+$", max_length=U64_MAX_DIGITS)
    network: Network
    description: Optional[str] = None
    mime_type: Optional[str] = None
    max_timeout_seconds: Optional[int] = Field(None, gt=0)
    discoverable: Optional[bool] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        return validate_u64_digits(v)


@dataclass(frozen=True)
class FacilitatorConfig:
    """Where to reach the facilitator and which headers to send it."""

    url: str = DEFAULT_FACILITATOR_URL
    auth_headers: AuthHeaderProvider = field(default_factory=StaticAuthHeaders)


def route_key(method: str, path: str) -> str:
    """Key of the route table, e.g. ``"GET /weather"``."""
    return f"{method.upper()} {path}"
