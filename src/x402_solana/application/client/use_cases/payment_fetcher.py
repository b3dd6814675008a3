"""Use cases for the client: the X402 payment handshake."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

import httpx

from ....crypto.transaction import TransactionBuilder, serialize_transaction
from ....crypto.wallet import Wallet
from ....domain.errors import (
    AmountExceededError,
    PaymentRequiredError,
    TransportError,
)
from ....domain.shared.ledger_client_protocol import LedgerClientProtocol
from ....infrastructure.http.http_client import AsyncHttpClient
from ...shared.payment_payloads import (
    X_PAYMENT_HEADER,
    X_PAYMENT_REQUIRED_HEADER,
    PaymentPayload,
    PaymentRequirements,
    decode_payment_requirements,
    encode_header,
)

logger = logging.getLogger(__name__)


class PaymentFetcher:
    """HTTP client that pays for 402-protected resources.

    A request is sent once as is. If the server answers 402, the requirements
    are checked against `max_value`, a signed transfer is built and the request
    is sent a second and last time with the proof attached. Whatever the second
    response is, it is returned to the caller unchanged.
    """

    def __init__(
        self,
        wallet: Wallet,
        ledger: LedgerClientProtocol,
        *,
        http: Optional[AsyncHttpClient] = None,
        max_value: Optional[int] = None,
        handshake_timeout: Optional[float] = None,
    ) -> None:
        if max_value is not None and max_value < 0:
            raise ValueError("max_value cannot be negative")
        self._wallet = wallet
        self._builder = TransactionBuilder(ledger)
        self._owns_http = http is None
        self._http = http if http is not None else AsyncHttpClient()
        self.max_value = max_value
        self.handshake_timeout = handshake_timeout

    @property
    def wallet(self) -> Wallet:
        return self._wallet

    async def fetch(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """Send a request, paying for it if the server asks.

        Raises:
            PaymentRequiredError: 402 without an `x-payment-required` header.
            DecodeError: The requirements header is malformed.
            AmountExceededError: The price is above `max_value`. Nothing is signed.
            TransportError: HTTP failure or handshake timeout.
        """
        if self.handshake_timeout is None:
            return await self._fetch(method, url, headers, content)
        try:
            return await asyncio.wait_for(
                self._fetch(method, url, headers, content),
                timeout=self.handshake_timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Payment handshake timed out after {self.handshake_timeout}s"
            ) from e

    async def _fetch(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]],
        content: Optional[bytes],
    ) -> httpx.Response:
        # 1) First attempt, no payment
        response = await self._send(method, url, headers, content)
        if response.status_code != 402:
            return response

        # 2) Read the challenge
        raw_requirements = response.headers.get(X_PAYMENT_REQUIRED_HEADER)
        if not raw_requirements:
            raise PaymentRequiredError(
                "402 response missing x-payment-required header"
            )
        requirements = decode_payment_requirements(raw_requirements)

        # 3) Spending ceiling, before anything is signed
        self.check_amount(requirements)

        # 4) Build the proof
        payment_header = await self.create_payment_header(requirements)

        # 5) Single retry with the proof attached
        paid_headers = dict(headers or {})
        paid_headers[X_PAYMENT_HEADER] = payment_header
        logger.info(
            "Paying %s lamports to %s for %s %s",
            requirements.max_amount_required,
            requirements.pay_to,
            method,
            url,
        )
        return await self._send(method, url, paid_headers, content)

    def check_amount(self, requirements: PaymentRequirements) -> None:
        if self.max_value is None:
            return
        amount = requirements.amount
        if amount > self.max_value:
            raise AmountExceededError(expected=self.max_value, got=amount)

    async def create_payment(
        self, requirements: PaymentRequirements
    ) -> PaymentPayload:
        if requirements.is_native:
            transaction = await self._builder.build_transfer(
                self._wallet, requirements.pay_to, requirements.amount
            )
        else:
            transaction = await self._builder.build_token_transfer(
                self._wallet,
                requirements.pay_to,
                requirements.token_address,
                requirements.amount,
                requirements.token_decimals or 0,
            )
        return PaymentPayload(
            x402_version=requirements.x402_version,
            scheme=requirements.scheme,
            network=requirements.network,
            signed_transaction=serialize_transaction(transaction),
            from_address=self._wallet.address,
        )

    async def create_payment_header(self, requirements: PaymentRequirements) -> str:
        """Build and sign a proof for `requirements`, encoded for `x-payment`."""
        payload = await self.create_payment(requirements)
        return encode_header(payload)

    async def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]],
        content: Optional[bytes],
    ) -> httpx.Response:
        try:
            return await self._http.request(
                method, url, headers=dict(headers or {}), content=content
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "PaymentFetcher":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()
