"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from rgbproxy import __version__
from rgbproxy.config import Settings
from rgbproxy.observability.correlation import (
    REQUEST_ID_HEADER,
    next_request_id,
    reset_request_id,
    set_request_id,
)
from rgbproxy.observability.logging import configure_logging
from rgbproxy.rpc.dispatcher import Dispatcher
from rgbproxy.service import RelayService

from .routers import public, rpc


def create_app(
    settings: Settings | None = None,
    service: RelayService | None = None,
) -> FastAPI:
    """Create the proxy app.

    Args:
        settings: Explicit settings. If None, read from the environment.
        service: Prebuilt service. If None, one is built from settings and
                 closed when the app shuts down.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings.from_env()

    configure_logging(settings.log_level)

    owns_service = service is None
    if service is None:
        service = RelayService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if owns_service:
            service.close()

    app = FastAPI(
        title="RGB Proxy Server",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.dispatcher = Dispatcher(service)

    # Allow requests from any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    # Request id middleware
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        # Reuse the caller's request id or assign the next one
        rid = next_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)

    app.include_router(public.router)
    app.include_router(rpc.router)

    return app
