from __future__ import annotations

import logging
from typing import Optional, Type, Union
from types import TracebackType

import httpx
from pydantic import ValidationError

from ...application.shared.payment_payloads import (
    FacilitatorRequest,
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    SupportedPaymentKindsResponse,
    VerifyResponse,
)
from ...application.shared.x402_config import FacilitatorConfig
from ...domain.errors import SettlementError, TransportError
from ...domain.shared.auth_headers import HeaderPairs
from ..http.http_client import AsyncHttpClient

logger = logging.getLogger(__name__)


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)


class FacilitatorClient:
    """Asynchronous client for a remote facilitator's HTTP API.

    Methods are bound to the facilitator wire models and satisfy
    `FacilitatorProtocol`, so a resource server can use it interchangeably with
    an in-process `FacilitatorService`.
    """

    def __init__(
        self,
        config: Union[FacilitatorConfig, str, None] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if config is None:
            config = FacilitatorConfig()
        elif isinstance(config, str):
            config = FacilitatorConfig(url=config)
        self._config = config
        self._http = AsyncHttpClient(config.url, timeout=timeout, transport=transport)

    @property
    def url(self) -> str:
        return self._config.url

    async def _send(
        self,
        method: str,
        path: str,
        headers: HeaderPairs,
        body: Optional[FacilitatorRequest] = None,
    ) -> httpx.Response:
        try:
            return await self._http.request(
                method,
                path,
                headers=list(headers),
                json=body.to_wire() if body is not None else None,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Facilitator {method} {path} failed: {e}") from e

    async def verify(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> VerifyResponse:
        body = FacilitatorRequest(
            payment_payload=payload, payment_requirements=requirements
        )
        resp = await self._send(
            "POST", "/verify", self._config.auth_headers.for_verify(), body
        )
        if not resp.is_success:
            raise TransportError(
                f"Verify request failed with status {resp.status_code}: "
                f"{_error_detail(resp)}"
            )
        return self._parse(VerifyResponse, resp)

    async def settle(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> SettleResponse:
        body = FacilitatorRequest(
            payment_payload=payload, payment_requirements=requirements
        )
        resp = await self._send(
            "POST", "/settle", self._config.auth_headers.for_settle(), body
        )
        if not resp.is_success:
            raise SettlementError(
                f"Settle request failed with status {resp.status_code}: "
                f"{_error_detail(resp)}"
            )
        return self._parse(SettleResponse, resp)

    async def supported(self) -> SupportedPaymentKindsResponse:
        resp = await self._send(
            "GET", "/supported", self._config.auth_headers.for_supported()
        )
        if not resp.is_success:
            raise TransportError(
                f"Supported request failed with status {resp.status_code}"
            )
        return self._parse(SupportedPaymentKindsResponse, resp)

    @staticmethod
    def _parse(model_cls, resp: httpx.Response):
        try:
            return model_cls.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise TransportError(
                f"Facilitator returned an unexpected {model_cls.__name__} body"
            ) from e

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "FacilitatorClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
