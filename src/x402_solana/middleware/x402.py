from __future__ import annotations

from typing import Callable, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from prometheus_client import Counter
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..application.server.use_cases.payment_gate import (
    GateDecision,
    GateOutcome,
    PaymentGate,
)
from ..application.shared.payment_payloads import (
    X_PAYMENT_REQUIRED_HEADER,
    X_PAYMENT_RESPONSE_HEADER,
    PaymentRequirements,
    encode_header,
)


gate_decisions_total = Counter(
    "x402_gate_decisions_total",
    "Payment gate decisions on priced and unpriced requests",
    ["outcome"],
)


class X402PaymentMiddleware(BaseHTTPMiddleware):
    """Charge for priced routes using the X402 handshake.

    - Unpriced routes pass straight through.
    - A priced route without `x-payment` gets 402 with `x-payment-required`.
    - A malformed `x-payment` gets 400.
    - A proof the facilitator does not accept gets 402.
    - An accepted proof reaches the handler; after a 2xx response the payment is
      settled and the result is returned in `x-payment-response`. A failed
      settlement is logged and does not change the response.
    """

    def __init__(self, app, gate: PaymentGate) -> None:
        super().__init__(app)
        self._gate = gate

    async def dispatch(self, request: Request, call_next: Callable):
        decision = await self._gate.evaluate(
            request.method,
            request.url.path,
            request.headers,
            resource=str(request.url),
        )
        gate_decisions_total.labels(outcome=decision.outcome.value).inc()

        if decision.outcome is GateOutcome.PASS:
            return await call_next(request)
        if decision.outcome is GateOutcome.CHALLENGE:
            return self._payment_required(decision.requirements, decision.message)
        if decision.outcome is GateOutcome.REJECT:
            return self._bad_request(f"Invalid x-payment header: {decision.message}")
        if decision.outcome is GateOutcome.DENY:
            return self._payment_required(decision.requirements, decision.message)

        response = await call_next(request)
        if 200 <= response.status_code < 300:
            await self._settle(decision, response)
        return response

    async def _settle(self, decision: GateDecision, response) -> None:
        settle_response = await self._gate.settle(decision)
        if settle_response is not None and settle_response.settled:
            response.headers[X_PAYMENT_RESPONSE_HEADER] = encode_header(
                settle_response
            )

    def _json_error(
        self,
        status_code: int,
        error: str,
        headers: Optional[dict[str, str]] = None,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code, content={"error": error}, headers=headers
        )

    def _bad_request(self, error: str) -> JSONResponse:
        return self._json_error(status.HTTP_400_BAD_REQUEST, error)

    def _payment_required(
        self, requirements: Optional[PaymentRequirements], error: Optional[str]
    ) -> JSONResponse:
        headers = None
        if requirements is not None:
            headers = {X_PAYMENT_REQUIRED_HEADER: encode_header(requirements)}
        return self._json_error(
            status.HTTP_402_PAYMENT_REQUIRED,
            error or "Payment required",
            headers=headers,
        )
