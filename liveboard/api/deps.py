from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, Request, WebSocket

from liveboard.core.config import Settings
from liveboard.core.errors import InvalidCredential, Unauthenticated
from liveboard.models.session import UNKNOWN_DEVICE
from liveboard.services.rate_limit import SlidingWindowLimiter
from liveboard.state.key_store import KeyStore
from liveboard.state.playback_state import PlaybackState
from liveboard.ws.broadcaster import CommandBroadcaster
from liveboard.ws.manager import SessionRegistry

log = logging.getLogger("auth")


# =========================
# CORE STATE
# =========================

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_key_store(request: Request) -> KeyStore:
    return request.app.state.key_store


def get_playback(request: Request) -> PlaybackState:
    return request.app.state.playback


# =========================
# SESSIONS / BROADCAST (HTTP)
# =========================

def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_broadcaster(request: Request) -> CommandBroadcaster:
    return request.app.state.broadcaster


# =========================
# SESSIONS / BROADCAST (WEBSOCKET)
# =========================

def get_registry_ws(websocket: WebSocket) -> SessionRegistry:
    return websocket.app.state.registry


def get_broadcaster_ws(websocket: WebSocket) -> CommandBroadcaster:
    return websocket.app.state.broadcaster


def get_playback_ws(websocket: WebSocket) -> PlaybackState:
    return websocket.app.state.playback


# =========================
# RATE LIMIT
# =========================

def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def limit_api(request: Request) -> None:
    limiter: SlidingWindowLimiter = request.app.state.api_limiter
    limiter.hit(client_ip(request))


def limit_commands(request: Request) -> None:
    limiter: SlidingWindowLimiter = request.app.state.command_limiter
    limiter.hit(client_ip(request))


# =========================
# AUTH
# =========================

async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
) -> str:
    """
    Valida o header X-API-Key contra as chaves atuais (env + arquivo, relido agora).
    Toda tentativa vira evento auth-attempt para os dashboards.
    Retorna o nome do dispositivo dono da chave.
    """
    store = get_key_store(request)
    broadcaster = get_broadcaster(request)
    ip = client_ip(request)

    if not x_api_key:
        log.warning("auth_missing_key", extra={"ip": ip})
        await broadcaster.notify_auth_attempt(success=False, reason="Missing API key", who=ip, ip=ip)
        raise Unauthenticated("API key required. Include X-API-Key header in your request.")

    if not await store.is_valid(x_api_key):
        log.warning("auth_invalid_key", extra={"ip": ip})
        await broadcaster.notify_auth_attempt(success=False, reason="Invalid API key", who=ip, ip=ip)
        raise InvalidCredential("Invalid API key")

    device = await store.resolve_name(x_api_key) or UNKNOWN_DEVICE
    request.state.device = device

    log.info("auth_ok", extra={"ip": ip, "device": device})
    await broadcaster.notify_auth_attempt(success=True, who=device, ip=ip)
    return device
