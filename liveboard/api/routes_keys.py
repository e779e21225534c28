# liveboard/api/routes_keys.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from liveboard.api.deps import (
    get_key_store,
    get_settings_dep,
    limit_api,
    require_api_key,
)
from liveboard.core.config import Settings
from liveboard.core.errors import Forbidden, NotFound
from liveboard.models.credentials import CreateKeyPayload, RenameKeyPayload, SetupKeyPayload
from liveboard.state.key_store import KeyStore

ENV_DELETE_MESSAGE = "API key not found or cannot be deleted (environment keys cannot be deleted via API)"

router = APIRouter(
    prefix="/api/admin/keys",
    tags=["keys"],
    dependencies=[Depends(limit_api), Depends(require_api_key)],
)

setup_router = APIRouter(prefix="/api/setup", tags=["setup"], dependencies=[Depends(limit_api)])


# =====================================================
# LIST (mascarado)
# =====================================================

@router.get("")
async def list_keys(store: KeyStore = Depends(get_key_store)):
    keys = [k.model_dump() for k in await store.list_masked()]
    return {"success": True, "keys": keys}


# =====================================================
# CREATE
# 👉 a chave só aparece inteira nesta resposta
# =====================================================

@router.post("")
async def create_key(payload: CreateKeyPayload, store: KeyStore = Depends(get_key_store)):
    record = await store.create(payload.name)
    return {
        "success": True,
        "message": "API key generated and saved successfully",
        "key": record.key,
        "keyId": record.id,
    }


# =====================================================
# DELETE
# =====================================================

@router.delete("/{key_id}")
async def delete_key(key_id: str, store: KeyStore = Depends(get_key_store)):
    try:
        await store.delete(key_id)
    except (Forbidden, NotFound):
        # env e inexistente respondem igual
        raise NotFound(ENV_DELETE_MESSAGE)
    return {"success": True, "message": "API key deleted successfully"}


# =====================================================
# RENAME
# =====================================================

@router.patch("/{key_id}")
async def rename_key(key_id: str, payload: RenameKeyPayload, store: KeyStore = Depends(get_key_store)):
    try:
        record = await store.rename(key_id, payload.name)
    except Forbidden:
        raise NotFound("API key not found")
    return {"success": True, "message": "API key renamed successfully", "name": record.name}


# =====================================================
# SETUP (sem auth)
# 👉 o navegador gera a chave e só manda salvar.
#    Desligar com SETUP_ENABLED=false depois da primeira chave.
# =====================================================

@setup_router.post("/generate-key")
async def setup_generate_key(
    payload: SetupKeyPayload,
    store: KeyStore = Depends(get_key_store),
    settings: Settings = Depends(get_settings_dep),
):
    if not settings.setup_enabled:
        raise Forbidden("Setup is disabled")
    record = await store.add(payload.name, payload.key)
    return {"success": True, "message": "API key saved successfully", "keyId": record.id}
