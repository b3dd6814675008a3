"""FastAPI application configuration (Facilitator API)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ...application.facilitator.use_cases.facilitator import FacilitatorService
from ...envs.facilitator_env import Settings, get_settings
from ...infrastructure.ledger.solana_rpc_client import SolanaRpcClient
from .. import metrics
from .routers import facilitator


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[FacilitatorService] = None,
) -> FastAPI:
    """Create and configure the facilitator application.

    When no `service` is given, one backed by a Solana RPC client is created at
    startup and the client is closed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        ledger: Optional[SolanaRpcClient] = None
        if getattr(app.state, "facilitator_service", None) is None:
            ledger = SolanaRpcClient(
                settings.rpc_url,
                confirm_timeout=settings.confirm_timeout_seconds,
            )
            app.state.facilitator_service = FacilitatorService(
                settings.network,
                ledger,
                check_transfer_terms=settings.check_transfer_terms,
            )
        try:
            yield
        finally:
            if ledger is not None:
                await ledger.aclose()

    app = FastAPI(
        title=f"{settings.app_name} Facilitator",
        version=settings.app_version,
        description="X402 Solana payment facilitator",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.facilitator_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": f"Invalid request body: {exc.errors()[0]['msg']}"},
        )

    app.include_router(facilitator.router)
    app.include_router(metrics.router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name} Facilitator API",
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": f"{settings.app_name} Facilitator",
            "network": settings.network.value,
        }

    return app
