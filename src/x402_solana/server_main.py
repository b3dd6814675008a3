from __future__ import annotations

import uvicorn

from .envs.server_env import get_settings
from .runtime import install_uvloop, setup_prometheus_multiproc_dir

install_uvloop()


def main() -> None:
    """Main entry point for the payment-protected server."""
    settings = get_settings()

    print(f"Starting {settings.app_name} v{settings.app_version}")
    print(f"Facilitator URL: {settings.facilitator_url}")
    print(f"Pay to address: {settings.pay_to_address}")
    print(f"Network: {settings.network.value}")
    if settings.token:
        print(f"Token: {settings.token.name} ({settings.token.address})")
    else:
        print("Token: native SOL")
    print(f"API will be available at: http://{settings.api_host}:{settings.api_port}")
    print(f"  GET /weather         - Weather information ({settings.weather_price})")
    print(f"  GET /premium/content - Premium content ({settings.premium_price})")

    setup_prometheus_multiproc_dir()

    uvicorn.run(
        "x402_solana.api.server_api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
