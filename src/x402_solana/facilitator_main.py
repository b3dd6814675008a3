from __future__ import annotations

import uvicorn

from .envs.facilitator_env import get_settings
from .runtime import install_uvloop, setup_prometheus_multiproc_dir

install_uvloop()


def main() -> None:
    """Main entry point for the facilitator service."""
    settings = get_settings()

    print(f"Starting {settings.app_name} Facilitator v{settings.app_version}")
    print(f"Network: {settings.network.value}")
    print(f"RPC URL: {settings.rpc_url}")
    if settings.operator_address:
        print(f"Facilitator wallet public key: {settings.operator_address}")
    print(f"Transfer terms check: {'on' if settings.check_transfer_terms else 'off'}")
    print(
        f"Facilitator API will be available at: "
        f"http://{settings.api_host}:{settings.api_port}"
    )
    print("  GET  /supported - Get supported payment kinds")
    print("  POST /verify    - Verify payment transaction")
    print("  POST /settle    - Settle payment transaction")

    setup_prometheus_multiproc_dir()

    uvicorn.run(
        "x402_solana.api.facilitator_api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
