"""Solana JSON-RPC client used as the payment ledger."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional, Type
from types import TracebackType

import httpx
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from ...crypto.transaction import serialize_transaction
from ...domain.errors import LedgerError
from ..http.http_client import AsyncHttpClient

logger = logging.getLogger(__name__)

_CONFIRMED_STATUSES = ("confirmed", "finalized")


class SolanaRpcClient:
    """Async Solana JSON-RPC 2.0 client over httpx.

    Implements `LedgerClientProtocol`. Every RPC or transport failure surfaces
    as `LedgerError`; nothing is retried here.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        timeout: float = 30.0,
        confirm_timeout: float = 30.0,
        poll_interval: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._commitment = commitment
        self._confirm_timeout = confirm_timeout
        self._poll_interval = poll_interval
        self._http = AsyncHttpClient(rpc_url, timeout=timeout, transport=transport)
        self._request_id = 0

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def _rpc(self, method: str, params: Optional[list[Any]] = None) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }
        try:
            resp = await self._http.post(self._rpc_url, json=payload)
            data = resp.json()
        except httpx.HTTPError as e:
            raise LedgerError(f"RPC {method} failed: {e}") from e
        except ValueError as e:
            raise LedgerError(f"RPC {method} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise LedgerError(f"RPC {method} returned an unexpected body: {data!r}")
        error = data.get("error")
        if error:
            message = (
                error.get("message", "Unknown RPC error")
                if isinstance(error, dict)
                else error
            )
            raise LedgerError(f"RPC {method} error: {message}")
        return data.get("result")

    async def get_latest_blockhash(self) -> Hash:
        result = await self._rpc(
            "getLatestBlockhash", [{"commitment": self._commitment}]
        )
        try:
            return Hash.from_string(result["value"]["blockhash"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerError(f"Unexpected getLatestBlockhash result: {result!r}") from e

    async def send_and_confirm_transaction(self, transaction: Transaction) -> str:
        signature = await self._rpc(
            "sendTransaction",
            [
                serialize_transaction(transaction),
                {
                    "encoding": "base64",
                    "skipPreflight": False,
                    "preflightCommitment": self._commitment,
                },
            ],
        )
        if not isinstance(signature, str):
            raise LedgerError(f"Unexpected sendTransaction result: {signature!r}")
        logger.info("Solana tx sent: %s", signature)
        await self._wait_for_confirmation(signature)
        return signature

    async def _wait_for_confirmation(self, signature: str) -> None:
        deadline = time.monotonic() + self._confirm_timeout
        while True:
            result = await self._rpc(
                "getSignatureStatuses",
                [[signature], {"searchTransactionHistory": True}],
            )
            try:
                statuses = (result or {}).get("value") or []
                status = statuses[0] if statuses else None
            except (AttributeError, KeyError, TypeError) as e:
                raise LedgerError(
                    f"Unexpected getSignatureStatuses result: {result!r}"
                ) from e
            if status is not None and not isinstance(status, dict):
                raise LedgerError(f"Unexpected signature status: {status!r}")
            if status:
                if status.get("err"):
                    raise LedgerError(
                        f"Transaction {signature} failed: {status['err']}"
                    )
                if status.get("confirmationStatus") in _CONFIRMED_STATUSES:
                    logger.info("Solana tx confirmed: %s", signature)
                    return
            if time.monotonic() >= deadline:
                raise LedgerError(
                    f"Transaction {signature} not confirmed within "
                    f"{self._confirm_timeout}s"
                )
            await asyncio.sleep(self._poll_interval)

    async def get_balance(self, pubkey: Pubkey) -> int:
        result = await self._rpc(
            "getBalance", [str(pubkey), {"commitment": self._commitment}]
        )
        try:
            return int(result["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerError(f"Unexpected getBalance result: {result!r}") from e

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
