from __future__ import annotations

from fastapi import APIRouter, Depends

from liveboard.api.deps import (
    get_playback,
    get_registry,
    get_settings_dep,
    limit_api,
    require_api_key,
)
from liveboard.core.config import Settings
from liveboard.models.playback import PlaybackSnapshot
from liveboard.models.session import SessionListResponse
from liveboard.state.playback_state import PlaybackState
from liveboard.ws.manager import SessionRegistry

router = APIRouter(prefix="/api", tags=["status"], dependencies=[Depends(limit_api)])


def health_payload(registry: SessionRegistry, settings: Settings) -> dict:
    return {
        "status": "ok",
        "connectedClients": registry.external_count(),
        "totalSessions": registry.count(),
        "app": settings.app_name,
        "env": settings.app_env,
    }


@router.get("/health")
async def health(
    registry: SessionRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    return health_payload(registry, settings)


@router.get("/state", response_model=PlaybackSnapshot, dependencies=[Depends(require_api_key)])
async def get_state(playback: PlaybackState = Depends(get_playback)):
    return playback.snapshot()


@router.get("/clients", response_model=SessionListResponse, dependencies=[Depends(require_api_key)])
async def list_clients(registry: SessionRegistry = Depends(get_registry)):
    clients = registry.list_external()
    return SessionListResponse(clients=clients, count=len(clients))
