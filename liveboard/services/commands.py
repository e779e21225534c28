# liveboard/services/commands.py

"""
Tabela de comandos do player.

- `play` / `play-now` / `volume` têm payload validado
- o resto são toggles sem payload: viram "control-<comando>"
- nomes antigos (pause/resume/exitfullscreen) continuam aceitos via LEGACY_ALIASES
"""

from __future__ import annotations

from typing import Dict, List, Optional

from liveboard.models import events

PAYLOAD_COMMANDS = ("play", "play-now", "volume")

TOGGLE_COMMANDS = (
    "stop",
    "mute",
    "fullscreen",
    "theater",
    "seek-back",
    "seek-forward",
    "next",
    "previous",
    "play-pause",
)

# nome antigo -> comando atual
# clientes antigos ainda chamam /api/pause etc. O player só tem toggle.
LEGACY_ALIASES: Dict[str, str] = {
    "pause": "play-pause",
    "resume": "play-pause",
    "exitfullscreen": "fullscreen",
    "seek-backward": "seek-back",
}


def normalize_command(command: Optional[str]) -> Optional[str]:
    if not isinstance(command, str):
        return None
    name = command.strip().lower()
    name = LEGACY_ALIASES.get(name, name)
    if name in PAYLOAD_COMMANDS or name in TOGGLE_COMMANDS:
        return name
    return None


def event_for(command: str) -> str:
    if command == "play":
        return events.PLAY_VIDEO
    if command == "play-now":
        return events.PLAY_VIDEO_NOW
    if command == "volume":
        return events.VOLUME_CHANGED
    return f"{events.CONTROL_PREFIX}{command}"


# =========================
# CONTROL DISCOVERY (get_controls)
# =========================

CONTROL_DEFINITIONS: List[dict] = [
    {
        "id": "play",
        "name": "Play YouTube Video",
        "type": "text",
        "command": "play",
        "placeholder": "Enter YouTube URL",
        "description": "Play a YouTube video by URL",
    },
    {
        "id": "play-now",
        "name": "Play Now",
        "type": "text",
        "command": "play-now",
        "placeholder": "Enter YouTube URL",
        "description": "Interrupt the current video and play this one",
    },
    {
        "id": "play-pause",
        "name": "Play / Pause",
        "type": "button",
        "command": "play-pause",
        "description": "Toggle playback",
    },
    {
        "id": "stop",
        "name": "Stop",
        "type": "button",
        "command": "stop",
        "description": "Stop video and clear player",
    },
    {
        "id": "volume",
        "name": "Volume",
        "type": "range",
        "command": "volume",
        "min": 0,
        "max": 100,
        "description": "Set player volume",
    },
    {
        "id": "mute",
        "name": "Mute",
        "type": "button",
        "command": "mute",
        "description": "Toggle mute",
    },
    {
        "id": "fullscreen",
        "name": "Fullscreen",
        "type": "button",
        "command": "fullscreen",
        "description": "Toggle fullscreen mode",
    },
    {
        "id": "theater",
        "name": "Theater",
        "type": "button",
        "command": "theater",
        "description": "Toggle theater mode",
    },
    {
        "id": "seek-back",
        "name": "Back 10s",
        "type": "button",
        "command": "seek-back",
        "description": "Seek backward",
    },
    {
        "id": "seek-forward",
        "name": "Forward 10s",
        "type": "button",
        "command": "seek-forward",
        "description": "Seek forward",
    },
    {
        "id": "previous",
        "name": "Previous",
        "type": "button",
        "command": "previous",
        "description": "Previous video in the playlist",
    },
    {
        "id": "next",
        "name": "Next",
        "type": "button",
        "command": "next",
        "description": "Next video in the playlist",
    },
]
