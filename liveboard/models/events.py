"""
Contrato único de nomes de evento enviados pelo /ws.

⚠️ NUNCA usar strings hardcoded fora deste arquivo.
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

# =========================
# PLAYER COMMANDS
# =========================

PLAY_VIDEO = "play-video"
PLAY_VIDEO_NOW = "play-video-now"
VOLUME_CHANGED = "volume-changed"

# toggles: "control-<comando>"
CONTROL_PREFIX = "control-"

# =========================
# STATE
# =========================

# snapshot completo, enviado só para quem acabou de conectar
PLAYBACK_STATE = "playback-state"

# reporte de um dashboard re-transmitido para todos
STATE_CHANGED = "state-changed"

CONTROLLER_ACTIVITY = "controller-activity"

# =========================
# SESSIONS / AUTH
# =========================

CONNECTED_CLIENTS = "connected-clients"
CLIENT_CONNECTED = "client-connected"
CLIENT_DISCONNECTED = "client-disconnected"
AUTH_ATTEMPT = "auth-attempt"

# =========================
# REPLIES (só para o remetente)
# =========================

CONTROLS = "controls"
ERROR = "error"


EventType = Literal[
    "play-video",
    "play-video-now",
    "volume-changed",
    "control-stop",
    "control-mute",
    "control-fullscreen",
    "control-theater",
    "control-seek-back",
    "control-seek-forward",
    "control-next",
    "control-previous",
    "control-play-pause",
    "playback-state",
    "state-changed",
    "controller-activity",
    "connected-clients",
    "client-connected",
    "client-disconnected",
    "auth-attempt",
    "controls",
    "error",
]


class WsEvent(BaseModel):
    type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)


def envelope(event: str, payload: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return WsEvent(type=event, data=dict(payload or {})).model_dump()
