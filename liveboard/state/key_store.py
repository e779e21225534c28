# liveboard/state/key_store.py

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from liveboard.core.errors import Forbidden, Internal, InvalidInput, NotFound
from liveboard.models.credentials import CredentialRecord, MaskedCredential
from liveboard.services.validation import parse_name

log = logging.getLogger("keys")

KEY_BYTES = 32
KEY_PATTERN = re.compile(r"^[0-9a-f]{64}$", re.IGNORECASE)
ENV_ID_PREFIX = "env-"
ENV_KEY_NAME = "Environment Variable"


def generate_key() -> str:
    return secrets.token_hex(KEY_BYTES)


def mask_key(key: str) -> str:
    return key[:8] + "..." + key[-4:]


def derive_id(key: str) -> str:
    # entrada sem id (arquivo editado à mão): id fixo a partir da chave
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]


class KeyStore:
    """
    API keys = chaves fixas do env (API_KEYS) + chaves persistidas no arquivo.

    - O arquivo é relido (em thread) a cada `list_all()`: chave nova vale sem restart
    - Escrita é sempre o arquivo inteiro (tmp + replace)
    - Erro de leitura vira "sem chaves persistidas", não derruba o processo
    """

    def __init__(self, path: Path, env_keys: List[str]) -> None:
        self.path = Path(path)
        self._env_keys = list(env_keys)
        self._lock = asyncio.Lock()

    # =========================
    # READ
    # =========================

    async def list_records(self) -> List[CredentialRecord]:
        return await self._load()

    async def list_all(self) -> List[str]:
        seen: dict[str, None] = {}
        for key in self._env_keys:
            seen.setdefault(key, None)
        for record in await self._load():
            seen.setdefault(record.key, None)
        return list(seen)

    async def is_valid(self, key: str) -> bool:
        candidate = key.encode("utf-8")
        valid = False
        # percorre tudo, sem sair cedo
        for known in await self.list_all():
            if secrets.compare_digest(candidate, known.encode("utf-8")):
                valid = True
        return valid

    async def resolve_name(self, key: str) -> Optional[str]:
        for record in await self._load():
            if record.key == key:
                return record.name
        if key in self._env_keys:
            return ENV_KEY_NAME
        return None

    async def list_masked(self) -> List[MaskedCredential]:
        records = await self._load()
        masked = [
            MaskedCredential(
                id=r.id,
                name=r.name,
                key=mask_key(r.key),
                createdAt=r.createdAt,
                source="file",
            )
            for r in records
        ]
        masked.extend(
            MaskedCredential(
                id=f"{ENV_ID_PREFIX}{i}",
                name=ENV_KEY_NAME,
                key=mask_key(key),
                createdAt=None,
                source="env",
            )
            for i, key in enumerate(self._env_keys)
        )
        return masked

    # =========================
    # WRITE
    # =========================

    async def create(self, name: str) -> CredentialRecord:
        return await self._append(parse_name(name), generate_key())

    async def add(self, name: str, key: str) -> CredentialRecord:
        """
        Chave gerada pelo cliente (página de setup). Tem que ser 64 hex.
        """
        clean_name = parse_name(name)
        if not isinstance(key, str) or not key:
            raise InvalidInput("Name and key are required")
        if not KEY_PATTERN.match(key):
            raise InvalidInput("Invalid key format")
        return await self._append(clean_name, key.lower())

    async def delete(self, key_id: str) -> CredentialRecord:
        self._reject_env_id(key_id)
        async with self._lock:
            records = await self._load()
            for i, record in enumerate(records):
                if record.id == key_id:
                    removed = records.pop(i)
                    await self._persist(records)
                    log.info("api_key_deleted", extra={"key_id": key_id, "key_name": removed.name})
                    return removed
        raise NotFound("API key not found")

    async def rename(self, key_id: str, name: str) -> CredentialRecord:
        clean_name = parse_name(name)
        self._reject_env_id(key_id)
        async with self._lock:
            records = await self._load()
            for record in records:
                if record.id == key_id:
                    record.name = clean_name
                    await self._persist(records)
                    log.info("api_key_renamed", extra={"key_id": key_id, "key_name": clean_name})
                    return record
        raise NotFound("API key not found")

    # =========================
    # HELPERS
    # =========================

    def _reject_env_id(self, key_id: str) -> None:
        if key_id.startswith(ENV_ID_PREFIX):
            raise Forbidden("Environment keys cannot be modified via API")

    async def _append(self, name: str, key: str) -> CredentialRecord:
        record = CredentialRecord(
            id=secrets.token_hex(16),
            name=name,
            key=key,
            createdAt=datetime.now(timezone.utc).isoformat(),
        )
        async with self._lock:
            records = await self._load()
            records.append(record)
            await self._persist(records)
        log.info("api_key_created", extra={"key_id": record.id, "key_name": name})
        return record

    async def _load(self) -> List[CredentialRecord]:
        return await asyncio.to_thread(self._read_records)

    def _read_records(self) -> List[CredentialRecord]:
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            log.exception("api_keys_read_failed", extra={"path": str(self.path)})
            return []

        if not isinstance(raw, list):
            log.error("api_keys_file_not_a_list", extra={"path": str(self.path)})
            return []

        records: List[CredentialRecord] = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            key = entry.get("key")
            if not isinstance(key, str) or not key:
                continue
            records.append(
                CredentialRecord(
                    id=str(entry.get("id") or derive_id(key)),
                    name=str(entry.get("name") or ""),
                    key=key,
                    createdAt=entry.get("createdAt"),
                )
            )
        return records

    async def _persist(self, records: List[CredentialRecord]) -> None:
        payload = json.dumps([r.model_dump() for r in records], indent=2)
        try:
            await asyncio.to_thread(self._write_file, payload)
        except OSError:
            log.exception("api_keys_write_failed", extra={"path": str(self.path)})
            raise Internal("Failed to save API keys")

    def _write_file(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(self.path)
        except OSError:
            if tmp.exists():
                tmp.unlink()
            raise
