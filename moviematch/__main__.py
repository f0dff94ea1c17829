"""Serve the movie catalog HTTP API with uvicorn (``python -m moviematch``)."""

from __future__ import annotations

import uvicorn

from .config import settings


def main() -> None:
    """Run ``moviematch.main:app`` on the configured host and port."""

    uvicorn.run(
        "moviematch.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
