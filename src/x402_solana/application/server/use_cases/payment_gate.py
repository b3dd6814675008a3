"""Use cases for the resource server: deciding whether a request may pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from ....crypto.transaction import parse_address
from ....domain.errors import DecodeError, X402Error
from ....domain.shared.facilitator_client_protocol import FacilitatorProtocol
from ...shared.payment_payloads import (
    X_PAYMENT_HEADER,
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    decode_payment_payload,
)
from ...shared.x402_config import RouteConfig, X402Config, route_key

logger = logging.getLogger(__name__)


class GateOutcome(str, Enum):
    PASS = "pass"
    CHALLENGE = "challenge"
    REJECT = "reject"
    DENY = "deny"
    ADMIT = "admit"


@dataclass(frozen=True)
class GateDecision:
    """What to do with one request, plus the data needed to do it."""

    outcome: GateOutcome
    requirements: Optional[PaymentRequirements] = None
    payload: Optional[PaymentPayload] = None
    message: Optional[str] = None


class PaymentGate:
    """Prices routes and checks the payment proof attached to a request.

    The route table is immutable; `replace_routes` swaps it as a whole, so a
    request always sees either the old or the new table.
    """

    def __init__(
        self,
        pay_to: str,
        routes: Mapping[str, RouteConfig],
        facilitator: FacilitatorProtocol,
        *,
        x402_config: Optional[X402Config] = None,
    ) -> None:
        parse_address(pay_to, "payTo address")
        self.pay_to = pay_to
        self._facilitator = facilitator
        self._x402_config = x402_config
        self._routes: Mapping[str, RouteConfig] = MappingProxyType(dict(routes))

    @property
    def routes(self) -> Mapping[str, RouteConfig]:
        return self._routes

    def replace_routes(self, routes: Mapping[str, RouteConfig]) -> None:
        self._routes = MappingProxyType(dict(routes))

    def requirements_for(
        self, route: RouteConfig, resource: Optional[str] = None
    ) -> PaymentRequirements:
        token = self._x402_config.default_token if self._x402_config else None
        return PaymentRequirements(
            network=route.network,
            max_amount_required=route.price,
            pay_to=self.pay_to,
            token_address=token.address if token else None,
            token_decimals=token.decimals if token else None,
            token_name=token.name if token else None,
            memo=route.description,
            resource=resource,
            mime_type=route.mime_type,
            max_timeout_seconds=route.max_timeout_seconds,
        )

    async def evaluate(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        resource: Optional[str] = None,
    ) -> GateDecision:
        """Classify a request as pass, challenge, reject, deny or admit."""
        route = self._routes.get(route_key(method, path))
        if route is None:
            return GateDecision(GateOutcome.PASS)

        requirements = self.requirements_for(route, resource)
        lowered = {k.lower(): v for k, v in headers.items()}
        payment_header = lowered.get(X_PAYMENT_HEADER)
        if not payment_header:
            return GateDecision(
                GateOutcome.CHALLENGE,
                requirements=requirements,
                message="Payment required",
            )

        try:
            payload = decode_payment_payload(payment_header)
        except DecodeError as e:
            return GateDecision(
                GateOutcome.REJECT, requirements=requirements, message=str(e)
            )

        try:
            result = await self._facilitator.verify(payload, requirements)
        except X402Error as e:
            logger.warning("Payment verification errored for %s %s: %s", method, path, e)
            return GateDecision(
                GateOutcome.DENY,
                requirements=requirements,
                payload=payload,
                message="Payment verification failed",
            )

        if not result.verified:
            logger.info(
                "Payment verification failed for %s %s: %s", method, path, result.message
            )
            return GateDecision(
                GateOutcome.DENY,
                requirements=requirements,
                payload=payload,
                message=result.message or "Payment verification failed",
            )

        return GateDecision(
            GateOutcome.ADMIT, requirements=requirements, payload=payload
        )

    async def settle(self, decision: GateDecision) -> Optional[SettleResponse]:
        """Settle an admitted payment. Best effort: failures are logged, not raised."""
        if decision.outcome is not GateOutcome.ADMIT:
            return None
        if decision.payload is None or decision.requirements is None:
            return None
        try:
            response = await self._facilitator.settle(
                decision.payload, decision.requirements
            )
        except X402Error as e:
            logger.error(
                "Payment settlement failed (stage=%s) for %s: %s",
                e.stage,
                decision.payload.from_address,
                e,
            )
            return None
        if not response.settled:
            logger.error("Payment not settled: %s", response.message)
        return response
