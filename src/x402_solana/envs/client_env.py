from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, computed_field, field_validator

from ..crypto.wallet import load_keypair_from_base58
from ..domain.errors import InvalidInputError
from ..domain.payments import Network
from .defaults import resolve_rpc_url, validate_http_url


class Settings(BaseModel):
    client_private_key: str
    resource_url: str
    network: Network = Network.SOLANA_DEVNET
    rpc_url: str
    max_payment_amount: Optional[int] = None
    handshake_timeout_seconds: Optional[float] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def client_address(self) -> str:
        """Base58 public key of the paying wallet."""
        return str(load_keypair_from_base58(self.client_private_key).pubkey())

    @field_validator("client_private_key")
    @classmethod
    def validate_client_private_key(cls, v: str) -> str:
        """Validate that the key is a base58-encoded 64-byte Solana keypair."""
        try:
            load_keypair_from_base58(v)
        except InvalidInputError as e:
            raise ValueError(f"Invalid client private key: {e}") from e
        return v

    @field_validator("resource_url")
    @classmethod
    def validate_resource_url(cls, v: str) -> str:
        return validate_http_url(v, "Resource URL")

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        return validate_http_url(v, "RPC URL")

    @field_validator("max_payment_amount")
    @classmethod
    def validate_max_payment_amount(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Max payment amount cannot be negative")
        return v

    @field_validator("handshake_timeout_seconds")
    @classmethod
    def validate_handshake_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Handshake timeout must be positive")
        return v


def get_settings() -> Settings:
    client_private_key = os.environ.get("CLIENT_PRIVATE_KEY")
    network = Network(os.environ.get("SVM_NETWORK", Network.SOLANA_DEVNET.value))
    resource_url = os.environ.get("RESOURCE_URL", "http://127.0.0.1:4021/weather")
    max_payment_amount_str = os.environ.get("MAX_PAYMENT_AMOUNT")
    handshake_timeout_str = os.environ.get("HANDSHAKE_TIMEOUT_SECONDS")
    if not client_private_key:
        raise ValueError("CLIENT_PRIVATE_KEY is required")
    return Settings(
        client_private_key=client_private_key,
        resource_url=resource_url,
        network=network,
        rpc_url=resolve_rpc_url(network),
        max_payment_amount=int(max_payment_amount_str)
        if max_payment_amount_str is not None
        else None,
        handshake_timeout_seconds=float(handshake_timeout_str)
        if handshake_timeout_str is not None
        else None,
    )
