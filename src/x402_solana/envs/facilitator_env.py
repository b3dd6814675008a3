from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..domain.payments import Network
from ..crypto.wallet import load_keypair_from_base58
from ..domain.errors import InvalidInputError
from .defaults import parse_bool, resolve_rpc_url, validate_http_url


class Settings(BaseModel):
    network: Network = Network.SOLANA_DEVNET
    rpc_url: str
    # Operator identity; only its public key is reported.
    private_key: Optional[str] = None

    confirm_timeout_seconds: float = Field(30.0, gt=0)
    check_transfer_terms: bool = False

    api_host: str = "127.0.0.1"
    api_port: int = 3002
    api_debug: bool = False
    api_cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    app_name: str = "x402-solana"
    app_version: str = "0.1.0"

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        return validate_http_url(v, "RPC URL")

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            load_keypair_from_base58(v)
        except InvalidInputError as e:
            raise ValueError(f"Invalid facilitator private key: {e}") from e
        return v

    @property
    def operator_address(self) -> Optional[str]:
        if self.private_key is None:
            return None
        return str(load_keypair_from_base58(self.private_key).pubkey())


def get_settings() -> Settings:
    network = Network(os.environ.get("SVM_NETWORK", Network.SOLANA_DEVNET.value))
    api_port_str = os.environ.get("FACILITATOR_API_PORT")
    confirm_timeout_str = os.environ.get("FACILITATOR_CONFIRM_TIMEOUT_SECONDS")
    api_cors_origins_str = os.environ.get("FACILITATOR_API_CORS_ORIGINS")

    return Settings(
        network=network,
        rpc_url=resolve_rpc_url(network),
        private_key=os.environ.get("SVM_PRIVATE_KEY") or None,
        confirm_timeout_seconds=float(confirm_timeout_str)
        if confirm_timeout_str is not None
        else 30.0,
        check_transfer_terms=parse_bool(
            os.environ.get("FACILITATOR_CHECK_TRANSFER_TERMS")
        ),
        api_host=os.environ.get("FACILITATOR_API_HOST", "127.0.0.1"),
        api_port=int(api_port_str) if api_port_str is not None else 3002,
        api_debug=parse_bool(os.environ.get("FACILITATOR_API_DEBUG")),
        api_cors_origins=api_cors_origins_str.split(",")
        if api_cors_origins_str is not None
        else ["*"],
        app_name=os.environ.get("FACILITATOR_APP_NAME", "x402-solana"),
        app_version=os.environ.get("FACILITATOR_APP_VERSION", "0.1.0"),
    )
