"""Application entry point for the address index explorer server."""

from __future__ import annotations

import os

import uvicorn

from addrindex.config.settings import AppConfig


def main() -> None:
    """Start the explorer server."""
    config = AppConfig()
    reload = os.getenv("ADDRINDEX_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "addrindex.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
