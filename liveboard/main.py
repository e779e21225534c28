from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from liveboard.core.config import PLACEHOLDER_API_KEY, Settings, get_settings
from liveboard.core.errors import LiveboardError
from liveboard.core.logging import setup_logging

from liveboard.services.rate_limit import SlidingWindowLimiter
from liveboard.state.key_store import KeyStore
from liveboard.state.playback_state import PlaybackState

from liveboard.ws.broadcaster import CommandBroadcaster
from liveboard.ws.manager import SessionRegistry

from liveboard.api.routes_commands import router as commands_router
from liveboard.api.routes_keys import router as keys_router
from liveboard.api.routes_keys import setup_router
from liveboard.api.routes_status import health_payload
from liveboard.api.routes_status import router as status_router
from liveboard.api.routes_ws import router as ws_router

log = logging.getLogger("app")

SECURITY_HEADERS = {
    "Content-Security-Policy": "; ".join(
        [
            "default-src 'self'",
            "script-src 'self' https://www.youtube.com https://cdn.jsdelivr.net",
            "frame-src 'self' https://www.youtube.com",
            "connect-src 'self' ws: wss: https://www.youtube.com",
            "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
            "img-src 'self' https: data:",
            "object-src 'none'",
            "base-uri 'self'",
        ]
    ),
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


async def warn_insecure_keys(store: KeyStore) -> None:
    keys = await store.list_all()
    if not keys or PLACEHOLDER_API_KEY in keys:
        log.warning(
            "api_keys_insecure",
            extra={"hint": "set API_KEYS in .env or create a key via /api/setup/generate-key"},
        )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    settings = app_settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        log.info("app_starting", extra={"env": settings.app_env, "port": settings.port})

        # CREDENTIALS
        app.state.key_store = KeyStore(Path(settings.api_keys_file), settings.env_api_keys())
        await warn_insecure_keys(app.state.key_store)

        # STATE + SESSIONS
        app.state.playback = PlaybackState(default_title=settings.default_title)
        app.state.registry = SessionRegistry(controller_prefix=settings.controller_prefix)

        # RATE LIMIT
        app.state.api_limiter = SlidingWindowLimiter(
            name="api",
            max_hits=settings.rate_limit_max,
            window_s=settings.rate_limit_window_s,
            message="Too many requests, please try again later",
        )
        app.state.command_limiter = SlidingWindowLimiter(
            name="commands",
            max_hits=settings.play_rate_limit_max,
            window_s=settings.play_rate_limit_window_s,
            message="Too many video requests, please slow down",
        )

        # BROADCASTER
        app.state.broadcaster = CommandBroadcaster(
            app.state.registry,
            app.state.playback,
            activity_timeout_s=settings.activity_timeout_s,
            sweep_interval_s=settings.activity_sweep_interval_s,
            require_recipients=settings.require_recipients,
        )
        await app.state.broadcaster.start()
        log.info("broadcaster_started")

        try:
            yield
        finally:
            try:
                await app.state.broadcaster.stop()
            except Exception:
                log.exception("error_stopping_broadcaster")
            log.info("app_stopped")

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(LiveboardError)
    async def liveboard_error_handler(_: Request, exc: LiveboardError):
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.reason})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request body"})

    app.include_router(ws_router)
    app.include_router(commands_router)
    app.include_router(status_router)
    app.include_router(keys_router)
    app.include_router(setup_router)

    @app.get("/health")
    def health(request: Request):
        return health_payload(request.app.state.registry, settings)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("liveboard.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
