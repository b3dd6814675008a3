"""Unit tests for the Solana JSON-RPC ledger client."""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, List

import httpx
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from x402_solana.domain.errors import LedgerError
from x402_solana.infrastructure.ledger.solana_rpc_client import SolanaRpcClient

RPC_URL = "http://rpc.test"


class FakeRpc:
    """Scripted JSON-RPC endpoint keyed by method name."""

    def __init__(self, results: Dict[str, List[Any]]) -> None:
        self.results = results
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        answer = self.results[body["method"]].pop(0)
        if isinstance(answer, dict) and "error" in answer:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], **answer}
            )
        return httpx.Response(
            200, json={"jsonrpc": "2.0", "id": body["id"], "result": answer}
        )


def _signed_transaction() -> Transaction:
    payer = Keypair()
    instruction = transfer(
        TransferParams(
            from_pubkey=payer.pubkey(), to_pubkey=Keypair().pubkey(), lamports=10
        )
    )
    return Transaction([payer], Message([instruction], payer.pubkey()), Hash.default())


def _client(rpc: FakeRpc, **kwargs) -> SolanaRpcClient:
    return SolanaRpcClient(
        RPC_URL, transport=httpx.MockTransport(rpc), poll_interval=0, **kwargs
    )


@pytest.mark.asyncio
async def test_get_latest_blockhash() -> None:
    blockhash = Hash.new_unique()
    rpc = FakeRpc(
        {
            "getLatestBlockhash": [
                {"context": {"slot": 1}, "value": {"blockhash": str(blockhash)}}
            ]
        }
    )

    async with _client(rpc) as client:
        assert await client.get_latest_blockhash() == blockhash

    assert rpc.calls[0]["params"] == [{"commitment": "confirmed"}]


@pytest.mark.asyncio
async def test_send_and_confirm_polls_until_confirmed() -> None:
    transaction = _signed_transaction()
    signature = str(transaction.signatures[0])
    rpc = FakeRpc(
        {
            "sendTransaction": [signature],
            "getSignatureStatuses": [
                {"value": [None]},
                {"value": [{"err": None, "confirmationStatus": "processed"}]},
                {"value": [{"err": None, "confirmationStatus": "confirmed"}]},
            ],
        }
    )

    async with _client(rpc) as client:
        assert await client.send_and_confirm_transaction(transaction) == signature

    sent = rpc.calls[0]["params"]
    assert base64.b64decode(sent[0]) == bytes(transaction)
    assert sent[1]["encoding"] == "base64"
    assert len(rpc.calls) == 4


@pytest.mark.asyncio
async def test_rpc_error_is_ledger_error() -> None:
    rpc = FakeRpc(
        {
            "sendTransaction": [
                {"error": {"code": -32002, "message": "Blockhash not found"}}
            ]
        }
    )

    async with _client(rpc) as client:
        with pytest.raises(LedgerError, match="Blockhash not found"):
            await client.send_and_confirm_transaction(_signed_transaction())


@pytest.mark.asyncio
async def test_failed_transaction_status_is_ledger_error() -> None:
    transaction = _signed_transaction()
    rpc = FakeRpc(
        {
            "sendTransaction": [str(transaction.signatures[0])],
            "getSignatureStatuses": [
                {"value": [{"err": {"InstructionError": [0, "Custom"]}}]}
            ],
        }
    )

    async with _client(rpc) as client:
        with pytest.raises(LedgerError, match="failed"):
            await client.send_and_confirm_transaction(transaction)


@pytest.mark.asyncio
async def test_confirmation_timeout_is_ledger_error() -> None:
    transaction = _signed_transaction()
    rpc = FakeRpc(
        {
            "sendTransaction": [str(transaction.signatures[0])],
            "getSignatureStatuses": [{"value": [None]}] * 50,
        }
    )

    async with _client(rpc, confirm_timeout=0) as client:
        with pytest.raises(LedgerError, match="not confirmed"):
            await client.send_and_confirm_transaction(transaction)


@pytest.mark.asyncio
async def test_get_balance() -> None:
    rpc = FakeRpc({"getBalance": [{"context": {"slot": 1}, "value": 42}]})
    pubkey = Keypair().pubkey()

    async with _client(rpc) as client:
        assert await client.get_balance(pubkey) == 42

    assert rpc.calls[0]["params"][0] == str(pubkey)


@pytest.mark.asyncio
async def test_http_failure_is_ledger_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream down")

    client = SolanaRpcClient(RPC_URL, transport=httpx.MockTransport(handler))
    try:
        with pytest.raises(LedgerError):
            await client.get_latest_blockhash()
    finally:
        await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        [{"jsonrpc": "2.0", "id": 1, "result": None}],
        {"jsonrpc": "2.0", "id": 1, "error": "node is behind"},
        "ok",
    ],
)
async def test_malformed_rpc_body_is_ledger_error(body: Any) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    client = SolanaRpcClient(RPC_URL, transport=httpx.MockTransport(handler))
    try:
        with pytest.raises(LedgerError):
            await client.get_latest_blockhash()
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_malformed_signature_status_is_ledger_error() -> None:
    transaction = _signed_transaction()
    rpc = FakeRpc(
        {
            "sendTransaction": [str(transaction.signatures[0])],
            "getSignatureStatuses": [{"value": ["confirmed"]}],
        }
    )

    async with _client(rpc) as client:
        with pytest.raises(LedgerError, match="signature status"):
            await client.send_and_confirm_transaction(transaction)
