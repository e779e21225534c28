from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

KeySource = Literal["file", "env"]


class CredentialRecord(BaseModel):
    # formato do arquivo api-keys.json: [{id, name, key, createdAt}, ...]
    id: str
    name: str
    key: str
    createdAt: Optional[str] = None


class MaskedCredential(BaseModel):
    id: str
    name: str
    key: str
    createdAt: Optional[str] = None
    source: KeySource


# =========================
# PAYLOADS
# =========================

class CreateKeyPayload(BaseModel):
    name: str = Field(default="", max_length=120)


class RenameKeyPayload(BaseModel):
    name: str = Field(default="", max_length=120)


class SetupKeyPayload(BaseModel):
    name: str = Field(default="", max_length=120)
    key: str = Field(default="", max_length=128)
