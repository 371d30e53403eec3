"""Uvicorn launcher: `rgb-proxy-server` / `python -m rgbproxy.main`."""

from __future__ import annotations

import sys

import uvicorn

from rgbproxy.api.factory import create_app
from rgbproxy.config import Settings
from rgbproxy.observability.logging import configure_logging


def main() -> None:
    """Read settings, build the app and serve it until interrupted."""
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"[rgbproxy] invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    logger = configure_logging(settings.log_level)
    logger.info(
        "listening",
        extra={"extra_fields": {"host": settings.host, "port": settings.port}},
    )

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        access_log=False,
    )


if __name__ == "__main__":
    main()
