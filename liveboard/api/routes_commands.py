# liveboard/api/routes_commands.py
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from liveboard.api.deps import (
    get_broadcaster,
    get_registry,
    limit_api,
    limit_commands,
    require_api_key,
)
from liveboard.models.commands import CommandResponse, PlayPayload, VolumePayload
from liveboard.ws.broadcaster import CommandBroadcaster
from liveboard.ws.manager import SessionRegistry

router = APIRouter(
    prefix="/api",
    tags=["commands"],
    dependencies=[Depends(limit_api), Depends(require_api_key), Depends(limit_commands)],
)


async def _send(
    broadcaster: CommandBroadcaster,
    registry: SessionRegistry,
    command: str,
    message: str,
    value: Any = None,
) -> CommandResponse:
    await broadcaster.execute(command, value)
    return CommandResponse(message=message, clients=registry.count())


# =====================================================
# PLAY
# =====================================================

@router.post("/play", response_model=CommandResponse)
async def play(
    payload: Optional[PlayPayload] = None,
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    url = payload.url if payload else None
    return await _send(broadcaster, registry, "play", "Video URL sent to dashboard", url)


# =====================================================
# PLAY NOW
# 👉 interrompe o vídeo atual em vez de enfileirar
# =====================================================

@router.post("/play-now", response_model=CommandResponse)
async def play_now(
    payload: Optional[PlayPayload] = None,
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    url = payload.url if payload else None
    return await _send(broadcaster, registry, "play-now", "Video sent to dashboard for immediate playback", url)


# =====================================================
# VOLUME
# =====================================================

@router.post("/volume", response_model=CommandResponse)
async def volume(
    payload: Optional[VolumePayload] = None,
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    level = payload.level if payload else None
    return await _send(broadcaster, registry, "volume", "Volume command sent to all dashboards", level)


# =====================================================
# TOGGLES
# =====================================================

@router.post("/play-pause", response_model=CommandResponse)
async def play_pause(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "play-pause", "Play/pause command sent to all dashboards")


@router.post("/stop", response_model=CommandResponse)
async def stop(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "stop", "Stop command sent to all dashboards")


@router.post("/mute", response_model=CommandResponse)
async def mute(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "mute", "Mute command sent to all dashboards")


@router.post("/fullscreen", response_model=CommandResponse)
async def fullscreen(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "fullscreen", "Fullscreen command sent to all dashboards")


@router.post("/theater", response_model=CommandResponse)
async def theater(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "theater", "Theater mode command sent to all dashboards")


@router.post("/next", response_model=CommandResponse)
async def next_video(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "next", "Next command sent to all dashboards")


@router.post("/previous", response_model=CommandResponse)
async def previous_video(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "previous", "Previous command sent to all dashboards")


@router.post("/seek-backward", response_model=CommandResponse)
async def seek_backward(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "seek-back", "Seek backward command sent to all dashboards")


@router.post("/seek-forward", response_model=CommandResponse)
async def seek_forward(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "seek-forward", "Seek forward command sent to all dashboards")


# =====================================================
# LEGACY
# 👉 player só tem toggle; nomes antigos continuam existindo
#    (mapeamento em services/commands.LEGACY_ALIASES)
# =====================================================

@router.post("/pause", response_model=CommandResponse)
async def pause(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "pause", "Pause command sent to all dashboards")


@router.post("/resume", response_model=CommandResponse)
async def resume(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "resume", "Resume command sent to all dashboards")


@router.post("/exitfullscreen", response_model=CommandResponse)
async def exit_fullscreen(
    broadcaster: CommandBroadcaster = Depends(get_broadcaster),
    registry: SessionRegistry = Depends(get_registry),
):
    return await _send(broadcaster, registry, "exitfullscreen", "Exit fullscreen command sent to all dashboards")
