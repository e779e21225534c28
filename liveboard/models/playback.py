from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel

PlaybackStatus = Literal["playing", "paused", "stopped"]

PLAYBACK_STATUSES = ("playing", "paused", "stopped")


class PlaybackSnapshot(BaseModel):
    volume: Union[int, float] = 100
    playbackStatus: PlaybackStatus = "stopped"
    currentTitle: str = ""
    controllerActive: bool = False
    lastControllerActivity: Optional[datetime] = None
