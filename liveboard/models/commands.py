from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class PlayPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None


class VolumePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Any: a faixa/tipo é validada no broadcaster, não aqui
    level: Any = None


class CommandResponse(BaseModel):
    success: bool = True
    message: str
    clients: int
