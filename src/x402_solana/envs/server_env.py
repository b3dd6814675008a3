from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..domain.payments import Network
from ..application.shared.x402_config import TokenConfig
from ..crypto.transaction import parse_address
from ..domain.errors import InvalidInputError
from .defaults import parse_bool, resolve_facilitator_url, validate_http_url


class Settings(BaseModel):
    pay_to_address: str
    network: Network = Network.SOLANA_DEVNET
    facilitator_url: str
    facilitator_api_key: Optional[str] = None

    weather_price: str = Field("1800", pattern=r"^[0-9]+$")
    premium_price: str = Field("150000", pattern=r"^[0-9]+$")
    token: Optional[TokenConfig] = None

    api_host: str = "127.0.0.1"
    api_port: int = 4021
    api_debug: bool = False
    api_cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    app_name: str = "x402-solana"
    app_version: str = "0.1.0"

    @field_validator("pay_to_address")
    @classmethod
    def validate_pay_to_address(cls, v: str) -> str:
        try:
            parse_address(v, "pay-to address")
        except InvalidInputError as e:
            raise ValueError(str(e)) from e
        return v

    @field_validator("facilitator_url")
    @classmethod
    def validate_facilitator_url(cls, v: str) -> str:
        return validate_http_url(v, "Facilitator URL").rstrip("/")


def _token_from_env() -> Optional[TokenConfig]:
    address = os.environ.get("TOKEN_MINT_ADDRESS")
    decimals = os.environ.get("TOKEN_DECIMALS")
    name = os.environ.get("TOKEN_NAME")
    if not (address and decimals and name):
        return None
    return TokenConfig(address=address, decimals=int(decimals), name=name)


def get_settings() -> Settings:
    pay_to_address = os.environ.get("SERVER_PAY_TO_ADDRESS")
    api_port_str = os.environ.get("SERVER_API_PORT")
    api_cors_origins_str = os.environ.get("SERVER_API_CORS_ORIGINS")
    if not pay_to_address:
        raise ValueError("SERVER_PAY_TO_ADDRESS is required")

    return Settings(
        pay_to_address=pay_to_address,
        network=Network(os.environ.get("SVM_NETWORK", Network.SOLANA_DEVNET.value)),
        facilitator_url=resolve_facilitator_url(),
        facilitator_api_key=os.environ.get("X402_FACILITATOR_API_KEY") or None,
        weather_price=os.environ.get("WEATHER_PRICE", "1800"),
        premium_price=os.environ.get("PREMIUM_PRICE", "150000"),
        token=_token_from_env(),
        api_host=os.environ.get("SERVER_API_HOST", "127.0.0.1"),
        api_port=int(api_port_str) if api_port_str is not None else 4021,
        api_debug=parse_bool(os.environ.get("SERVER_API_DEBUG")),
        api_cors_origins=api_cors_origins_str.split(",")
        if api_cors_origins_str is not None
        else ["*"],
        app_name=os.environ.get("SERVER_APP_NAME", "x402-solana"),
        app_version=os.environ.get("SERVER_APP_VERSION", "0.1.0"),
    )
