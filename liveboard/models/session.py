from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

SessionRole = Literal["controller", "external"]

UNKNOWN_DEVICE = "Unknown Device"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    id: str
    displayName: str = UNKNOWN_DEVICE
    role: SessionRole = "external"
    remoteAddress: str = ""
    connectedAt: datetime = Field(default_factory=utcnow)

    def public(self) -> dict:
        return self.model_dump(mode="json")


class SessionListResponse(BaseModel):
    clients: list[Session]
    count: int
