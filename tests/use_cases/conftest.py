"""Pytest fixtures for use case tests.

The client, resource server and facilitator all run in-process: HTTP calls go
through `httpx.ASGITransport`, and settlement lands on an in-memory ledger.
"""

from __future__ import annotations

from typing import AsyncGenerator, Callable, Optional

import httpx
import pytest
from fastapi import FastAPI

from x402_solana.api.facilitator_api.app import create_app as create_facilitator_app
from x402_solana.api.server_api.app import create_app as create_server_app
from x402_solana.application.client.use_cases.payment_fetcher import PaymentFetcher
from x402_solana.application.facilitator.use_cases.facilitator import (
    FacilitatorService,
)
from x402_solana.application.shared.payment_payloads import Network
from x402_solana.crypto.wallet import Wallet
from x402_solana.envs.facilitator_env import Settings as FacilitatorSettings
from x402_solana.envs.server_env import Settings as ServerSettings
from x402_solana.infrastructure.facilitator.facilitator_client import (
    FacilitatorClient,
)
from x402_solana.infrastructure.http.http_client import AsyncHttpClient
from tests.fixtures import InMemoryLedger
from tests.use_cases.helpers import RecordingTransport

FACILITATOR_URL = "http://facilitator"
SERVER_URL = "http://server"


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def facilitator_app(facilitator_service: FacilitatorService) -> FastAPI:
    settings = FacilitatorSettings(
        network=Network.SOLANA_DEVNET, rpc_url="http://127.0.0.1:8899"
    )
    return create_facilitator_app(settings=settings, service=facilitator_service)


@pytest.fixture
async def facilitator_client(
    facilitator_app: FastAPI,
) -> AsyncGenerator[FacilitatorClient, None]:
    """Facilitator client talking to the in-process facilitator app."""
    client = FacilitatorClient(
        FACILITATOR_URL, transport=httpx.ASGITransport(app=facilitator_app)
    )
    yield client
    await client.aclose()


@pytest.fixture
def server_app(pay_to_address: str, facilitator_client: FacilitatorClient) -> FastAPI:
    settings = ServerSettings(
        pay_to_address=pay_to_address, facilitator_url=FACILITATOR_URL
    )
    return create_server_app(settings=settings, facilitator=facilitator_client)


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def server_requests() -> list[httpx.Request]:
    """Every request that reached the resource server from a paying client."""
    return []


@pytest.fixture
async def make_fetcher(
    server_app: FastAPI,
    client_wallet: Wallet,
    ledger: InMemoryLedger,
    server_requests: list[httpx.Request],
) -> AsyncGenerator[Callable[[Optional[int]], PaymentFetcher], None]:
    """Build paying clients against the in-process resource server."""
    http_clients: list[AsyncHttpClient] = []

    def _make(max_value: Optional[int] = None) -> PaymentFetcher:
        http = AsyncHttpClient(
            SERVER_URL,
            transport=RecordingTransport(
                httpx.ASGITransport(app=server_app), server_requests
            ),
        )
        http_clients.append(http)
        return PaymentFetcher(client_wallet, ledger, http=http, max_value=max_value)

    yield _make
    for http in http_clients:
        await http.aclose()
