"""Process-level setup shared by the service entry points."""

from __future__ import annotations

import asyncio
import os
import sys


def install_uvloop() -> None:
    """Install uvloop for better async performance (Linux/macOS only)."""
    if sys.platform == "win32":
        return
    try:
        import uvloop
    except ImportError:
        return  # uvloop not available, continue with default event loop
    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())


def setup_prometheus_multiproc_dir() -> None:
    """Prepare the Prometheus multiprocess directory before Uvicorn forks workers.

    This ensures each process writes to a clean directory so metrics can be
    correctly aggregated by the multiprocess collector.
    """
    prom_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if not prom_dir:
        return

    os.makedirs(prom_dir, exist_ok=True)
    for filename in os.listdir(prom_dir):
        file_path = os.path.join(prom_dir, filename)
        if os.path.isfile(file_path):
            os.remove(file_path)
