"""Broker HTTP server.

``create_app()`` builds the FastAPI application: CORS for the plugin host's
origins, security headers, the relay routers, a JSON error envelope for
relay errors, and the background session sweeper. ``run_server()`` starts
it under uvicorn.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from authrelay.api.routes import mount_routers
from authrelay.config import Settings, get_settings
from authrelay.relay.broker import AuthBroker
from authrelay.relay.errors import RelayError, UpstreamError
from authrelay.relay.store import SessionStore
from authrelay.relay.sweeper import SessionSweeper

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: SessionStore | None = None) -> FastAPI:
    """Build the broker application around one immutable Settings instance."""
    settings = settings or get_settings()
    broker = AuthBroker(settings, store=store)
    sweeper = SessionSweeper(broker.store, interval=settings.sweep_interval_seconds)

    app = FastAPI(
        title="authrelay",
        description="OAuth2 PKCE broker for sandboxed plugin hosts.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.broker = broker
    app.state.sweeper = sweeper

    # --- CORS -----------------------------------------------------------
    # Non-listed origins get no CORS headers at all.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_origin_regex=settings.origin_regex(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
        max_age=3600,
    )

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        """Add security headers to all responses.

        No frame restrictions: the relay page lives in the host's iframe.
        """
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Callback URLs carry the code and state.
        response.headers["Referrer-Policy"] = "no-referrer"
        if request.url.scheme == "https" or request.headers.get("x-forwarded-proto") == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        if isinstance(exc, UpstreamError):
            logger.error("Upstream error on %s: %s body=%r", request.url.path, exc, exc.body)
            return JSONResponse(status_code=exc.status_code, content={"error": "Upstream error"})
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    mount_routers(app)

    @app.on_event("startup")
    async def startup_event():
        sweeper.start()
        logger.info("authrelay ready at %s (provider=%s)", settings.site_url, settings.provider)

    @app.on_event("shutdown")
    async def shutdown_event():
        await sweeper.stop()

    return app


def run_server(
    settings: Settings | None = None,
    host: str | None = None,
    port: int | None = None,
    dev: bool = False,
) -> None:
    """Start the broker under uvicorn."""
    import uvicorn

    settings = settings or get_settings()
    host = host or settings.host
    port = port or settings.port

    logger.info("Listening on http://%s:%d", host, port)
    if dev:
        uvicorn.run(
            "authrelay.api.serve:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level="debug",
        )
    else:
        uvicorn.run(create_app(settings), host=host, port=port)
