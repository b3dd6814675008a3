"""FastAPI application configuration (payment-protected Server API)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ...application.server.use_cases.payment_gate import PaymentGate
from ...application.shared.payment_payloads import (
    X_PAYMENT_REQUIRED_HEADER,
    X_PAYMENT_RESPONSE_HEADER,
)
from ...application.shared.x402_config import (
    FacilitatorConfig,
    RouteConfig,
    SvmConfig,
    X402Config,
    route_key,
)
from ...domain.shared.auth_headers import StaticAuthHeaders
from ...domain.shared.facilitator_client_protocol import FacilitatorProtocol
from ...envs.server_env import Settings, get_settings
from ...infrastructure.facilitator.facilitator_client import FacilitatorClient
from ...middleware.x402 import X402PaymentMiddleware
from .. import metrics
from .routers import resources


def build_routes(settings: Settings) -> dict[str, RouteConfig]:
    """Price table for the paid resources."""
    return {
        route_key("GET", "/weather"): RouteConfig(
            price=settings.weather_price,
            network=settings.network,
            description="Weather information",
            mime_type="application/json",
            max_timeout_seconds=30,
            discoverable=True,
        ),
        route_key("GET", "/premium/content"): RouteConfig(
            price=settings.premium_price,
            network=settings.network,
            description="Premium content access",
            mime_type="application/json",
            max_timeout_seconds=60,
            discoverable=True,
        ),
    }


def _facilitator_client(settings: Settings) -> FacilitatorClient:
    auth_headers = (
        StaticAuthHeaders.bearer(settings.facilitator_api_key)
        if settings.facilitator_api_key
        else StaticAuthHeaders()
    )
    return FacilitatorClient(
        FacilitatorConfig(url=settings.facilitator_url, auth_headers=auth_headers)
    )


def create_app(
    settings: Optional[Settings] = None,
    facilitator: Optional[FacilitatorProtocol] = None,
) -> FastAPI:
    """Create and configure the payment-protected application.

    Without an explicit `facilitator`, the remote facilitator named in the
    settings is used and its HTTP client is closed at shutdown.
    """
    settings = settings or get_settings()
    owned_client: Optional[FacilitatorClient] = None
    if facilitator is None:
        owned_client = _facilitator_client(settings)
        facilitator = owned_client

    x402_config = (
        X402Config(svm_config=SvmConfig(default_token=settings.token))
        if settings.token
        else None
    )
    gate = PaymentGate(
        settings.pay_to_address,
        build_routes(settings),
        facilitator,
        x402_config=x402_config,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            if owned_client is not None:
                await owned_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="X402 payment-protected API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.payment_gate = gate

    # Payment gate first so CORS (outermost) also decorates 402 responses.
    app.add_middleware(X402PaymentMiddleware, gate=gate)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[X_PAYMENT_REQUIRED_HEADER, X_PAYMENT_RESPONSE_HEADER],
    )

    app.include_router(resources.router)
    app.include_router(metrics.router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name} API",
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    return app
