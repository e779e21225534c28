from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Dict, List, Optional

from fastapi import WebSocket

from liveboard.core.errors import NotFound
from liveboard.models.session import UNKNOWN_DEVICE, Session, SessionRole

log = logging.getLogger("ws")


def classify_role(name: str, controller_prefix: str) -> SessionRole:
    # dashboards se identificam como "Dashboard-..."; o resto é controle externo
    if controller_prefix and name.startswith(controller_prefix):
        return "controller"
    return "external"


class SessionRegistry:
    """
    Registro das conexões vivas do /ws.

    - Mutação (register / identify / unregister) só com o lock
    - Leitura sem lock: o dict só muda dentro do lock, no mesmo event loop
    - Remoção sempre por id, idempotente
    """

    def __init__(self, controller_prefix: str = "Dashboard") -> None:
        self.controller_prefix = controller_prefix
        self._sessions: Dict[str, Session] = {}
        self._sockets: Dict[str, WebSocket] = {}
        self._lock = asyncio.Lock()

    # =========================
    # MUTATIONS
    # =========================

    async def register(self, ws: Optional[WebSocket], remote_address: str = "") -> Session:
        async with self._lock:
            session_id = uuid.uuid4().hex
            while session_id in self._sessions:
                session_id = uuid.uuid4().hex

            session = Session(id=session_id, remoteAddress=remote_address)
            self._sessions[session_id] = session
            if ws is not None:
                self._sockets[session_id] = ws

        log.info(
            "ws_connected",
            extra={"session_id": session_id, "remote": remote_address, "clients": len(self._sessions)},
        )
        return session.model_copy()

    async def identify(self, session_id: str, name: str) -> Session:
        display_name = (name or "").strip() or UNKNOWN_DEVICE

        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise NotFound("Session not found")
            session.displayName = display_name
            session.role = classify_role(display_name, self.controller_prefix)
            result = session.model_copy()

        log.info(
            "ws_identified",
            extra={"session_id": session_id, "device": display_name, "role": result.role},
        )
        return result

    async def unregister(self, session_id: str) -> Optional[Session]:
        async with self._lock:
            session = self._sessions.pop(session_id, None)
            self._sockets.pop(session_id, None)

        if session is None:
            return None

        log.info(
            "ws_disconnected",
            extra={"session_id": session_id, "device": session.displayName, "clients": len(self._sessions)},
        )
        return session

    # =========================
    # READS
    # =========================

    def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    def list_sessions(self) -> List[Session]:
        return [s.model_copy() for s in self._sessions.values()]

    def list_external(self) -> List[Session]:
        return [s.model_copy() for s in self._sessions.values() if s.role == "external"]

    def count(self) -> int:
        return len(self._sessions)

    def external_count(self) -> int:
        return sum(1 for s in self._sessions.values() if s.role == "external")

    # =========================
    # SEND
    # =========================

    async def send_to(self, session_id: str, message: dict) -> bool:
        ws = self._sockets.get(session_id)
        if ws is None:
            return False
        try:
            await ws.send_json(message)
            return True
        except Exception as e:
            # desconectou no meio do envio: o receive loop faz o unregister
            log.debug("ws_send_failed", extra={"session_id": session_id, "error": str(e)})
            return False

    async def send_all(self, message: dict) -> int:
        targets = list(self._sockets)
        delivered = 0
        for session_id in targets:
            if await self.send_to(session_id, message):
                delivered += 1
        return delivered
