"""Verify / settle / supported routes (Facilitator)."""

from __future__ import annotations

import logging
import time
from typing import Any, Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram

from ....application.facilitator.use_cases.facilitator import FacilitatorService
from ....application.shared.payment_payloads import (
    FacilitatorRequest,
    SettleResponse,
    SupportedPaymentKindsResponse,
    VerifyResponse,
)
from ....domain.errors import X402Error
from ..dependencies import get_facilitator_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["facilitator"])


facilitator_requests_total = Counter(
    "facilitator_requests_total",
    "Total facilitator requests processed",
    ["operation", "status"],
)

facilitator_request_duration_seconds = Histogram(
    "facilitator_request_duration_seconds",
    "Wall time to process a facilitator request",
    ["operation", "status"],
)


def _observe(operation: str, outcome: str, start_time: float) -> None:
    facilitator_requests_total.labels(operation=operation, status=outcome).inc()
    elapsed = time.perf_counter() - start_time
    facilitator_request_duration_seconds.labels(
        operation=operation, status=outcome
    ).observe(elapsed)


def _error(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error})


@router.get("/verify")
async def verify_info() -> dict[str, Any]:
    """Describe the verify endpoint."""
    return {
        "endpoint": "/verify",
        "description": "POST to verify x402 payments",
        "body": {
            "paymentPayload": "PaymentPayload",
            "paymentRequirements": "PaymentRequirements",
        },
    }


@router.post(
    "/verify",
    response_model=VerifyResponse,
    response_model_exclude_none=True,
)
async def verify_payment(
    request: FacilitatorRequest,
    service: FacilitatorService = Depends(get_facilitator_service),
) -> Union[VerifyResponse, JSONResponse]:
    """Verify a payment proof without touching the ledger."""
    start_time = time.perf_counter()
    try:
        result = await service.verify(
            request.payment_payload, request.payment_requirements
        )
        _observe("verify", "success", start_time)
        return result
    except X402Error as e:
        _observe("verify", "client_error", start_time)
        return _error(status.HTTP_400_BAD_REQUEST, f"Verification failed: {e}")
    except Exception as e:
        _observe("verify", "server_error", start_time)
        logger.exception("Failed to verify payment")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Failed to verify payment: {str(e)}",
        )


@router.get("/settle")
async def settle_info() -> dict[str, Any]:
    """Describe the settle endpoint."""
    return {
        "endpoint": "/settle",
        "description": "POST to settle x402 payments",
        "body": {
            "paymentPayload": "PaymentPayload",
            "paymentRequirements": "PaymentRequirements",
        },
    }


@router.post(
    "/settle",
    response_model=SettleResponse,
    response_model_exclude_none=True,
)
async def settle_payment(
    request: FacilitatorRequest,
    service: FacilitatorService = Depends(get_facilitator_service),
) -> Union[SettleResponse, JSONResponse]:
    """Re-verify a proof and submit its signed transaction to the ledger."""
    start_time = time.perf_counter()
    try:
        result = await service.settle(
            request.payment_payload, request.payment_requirements
        )
        _observe("settle", "success", start_time)
        logger.info("Transaction signature: %s", result.signature)
        return result
    except X402Error as e:
        _observe("settle", "client_error", start_time)
        logger.warning("Payment settlement failed: %s", e)
        return _error(status.HTTP_400_BAD_REQUEST, f"Settlement failed: {e}")
    except Exception as e:
        _observe("settle", "server_error", start_time)
        logger.exception("Failed to settle payment")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Failed to settle payment: {str(e)}",
        )


@router.get(
    "/supported",
    response_model=SupportedPaymentKindsResponse,
)
async def supported_payment_kinds(
    service: FacilitatorService = Depends(get_facilitator_service),
) -> SupportedPaymentKindsResponse:
    """List supported (version, scheme, network) kinds."""
    return await service.supported()
