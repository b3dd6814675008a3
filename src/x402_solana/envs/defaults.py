"""Built-in endpoint defaults and their resolution order.

Every lookup follows the same precedence: an explicit value wins, then the
environment variable, then the static table below.
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Mapping, Optional, Union
from urllib.parse import urlparse

from ..domain.payments import Network

DEFAULT_FACILITATOR_URL = "https://x402.org/facilitator"

# Used by the client when neither configuration nor environment names an RPC.
DEFAULT_CLIENT_RPC_URL = "https://api.devnet.solana.com"

DEFAULT_RPC_URLS: Mapping[Network, str] = MappingProxyType(
    {
        Network.SOLANA_LOCALNET: "http://127.0.0.1:8899",
        Network.SOLANA_DEVNET: "https://api.devnet.solana.com",
        Network.SOLANA: "https://api.mainnet-beta.solana.com",
    }
)

FACILITATOR_URL_ENV = "X402_FACILITATOR_URL"
RPC_URL_ENV = "SVM_RPC_URL"


def resolve_facilitator_url(explicit: Optional[str] = None) -> str:
    if explicit:
        return explicit
    return os.environ.get(FACILITATOR_URL_ENV) or DEFAULT_FACILITATOR_URL


def resolve_rpc_url(
    network: Union[Network, str, None] = None,
    explicit: Optional[str] = None,
) -> str:
    """Pick the RPC endpoint for a network.

    Args:
        network: Target cluster. Without one the client default (devnet) is used.
        explicit: Caller-supplied URL, which always wins.
    """
    if explicit:
        return explicit
    from_env = os.environ.get(RPC_URL_ENV)
    if from_env:
        return from_env
    if network is None:
        return DEFAULT_CLIENT_RPC_URL
    return DEFAULT_RPC_URLS[Network(network)]


def validate_http_url(value: str, what: str) -> str:
    """Require an absolute http(s) URL with a host."""
    if not value:
        raise ValueError(f"{what} cannot be empty")
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"{what} must start with http:// or https://")
    if not parsed.netloc:
        raise ValueError(f"{what} must include a host")
    return value


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}
