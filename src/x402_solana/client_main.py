from __future__ import annotations

import asyncio
import json
import logging
import sys

from .application.client.use_cases.payment_fetcher import PaymentFetcher
from .application.shared.payment_payloads import (
    X_PAYMENT_RESPONSE_HEADER,
    decode_settle_response,
)
from .crypto.wallet import Wallet
from .domain.errors import AmountExceededError, DecodeError, X402Error
from .envs.client_env import Settings, get_settings
from .infrastructure.ledger.solana_rpc_client import SolanaRpcClient


async def run(settings: Settings) -> int:
    wallet = Wallet.from_private_key(settings.client_private_key)
    print(f"Client wallet: {wallet.address}")
    print(f"Network: {settings.network.value}")
    print(f"RPC URL: {settings.rpc_url}")
    print(f"Requesting: GET {settings.resource_url}")
    if settings.max_payment_amount is not None:
        print(f"Max payment amount: {settings.max_payment_amount}")

    async with SolanaRpcClient(settings.rpc_url) as ledger:
        balance = await wallet.get_balance(ledger)
        print(f"Balance: {balance} lamports")

        async with PaymentFetcher(
            wallet,
            ledger,
            max_value=settings.max_payment_amount,
            handshake_timeout=settings.handshake_timeout_seconds,
        ) as fetcher:
            try:
                response = await fetcher.fetch("GET", settings.resource_url)
            except AmountExceededError as e:
                print(f"Refusing to pay: price {e.got} is above limit {e.expected}")
                return 2
            except X402Error as e:
                print(f"Payment flow failed at stage '{e.stage}': {e}")
                return 1

    print(f"Status: {response.status_code}")
    payment_response = response.headers.get(X_PAYMENT_RESPONSE_HEADER)
    if payment_response:
        try:
            settled = decode_settle_response(payment_response)
            print(f"Settled: {settled.settled} (signature {settled.signature})")
        except DecodeError as e:
            print(f"Unreadable payment response: {e}")
    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)
    return 0 if response.is_success else 1


def main() -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    settings = get_settings()
    sys.exit(asyncio.run(run(settings)))


if __name__ == "__main__":
    main()
