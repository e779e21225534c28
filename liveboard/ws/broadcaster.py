from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from liveboard.core.errors import Unavailable
from liveboard.models import events
from liveboard.services.commands import event_for, normalize_command
from liveboard.services.validation import (
    extract_video_id,
    parse_status,
    parse_title,
    parse_video_reference,
    parse_volume,
)
from liveboard.state.playback_state import PlaybackState
from liveboard.ws.manager import SessionRegistry

log = logging.getLogger("ws.broadcaster")

# tipo da mensagem do dashboard -> campo do estado
REPORT_FIELDS = {
    "volume_update": "volume",
    "status_update": "playbackStatus",
    "title_update": "currentTitle",
}


@dataclass
class CommandResult:
    command: Optional[str]
    accepted: bool
    event: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    recipients: int = 0


class CommandBroadcaster:
    def __init__(
        self,
        registry: SessionRegistry,
        playback: PlaybackState,
        *,
        activity_timeout_s: float = 60.0,
        sweep_interval_s: float = 10.0,
        require_recipients: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = registry
        self.playback = playback
        self.activity_timeout_s = activity_timeout_s
        self.sweep_interval_s = sweep_interval_s
        self.require_recipients = require_recipients
        self._clock = clock
        self._last_activity: Optional[float] = None
        self._task: asyncio.Task | None = None
        self._running = False

    # =====================================================
    # FAN-OUT
    # =====================================================

    async def broadcast(self, event: str, payload: Optional[Dict[str, Any]] = None) -> int:
        message = events.envelope(event, payload)
        delivered = await self.registry.send_all(message)
        log.debug("ws_broadcast", extra={"event": event, "delivered": delivered})
        return delivered

    # =====================================================
    # COMMANDS
    # =====================================================

    async def execute(self, command: Optional[str], value: Any = None) -> CommandResult:
        """
        Valida e distribui um comando do player.

        Comando desconhecido só loga (cliente mais novo que o servidor).
        Payload inválido levanta InvalidInput antes de qualquer efeito.
        """
        name = normalize_command(command)
        if name is None:
            log.warning("command_unknown", extra={"command": command})
            return CommandResult(command=command, accepted=False)

        payload: Dict[str, Any] = {}
        volume: Optional[float] = None

        if name in ("play", "play-now"):
            url = parse_video_reference(value)
            payload = {"url": url, "videoId": extract_video_id(url)}
        elif name == "volume":
            volume = parse_volume(value)
            payload = {"level": volume}

        if self.require_recipients and self.registry.count() == 0:
            raise Unavailable("No dashboards connected")

        if volume is not None:
            self.playback.set_volume(volume)

        await self.record_activity()

        event = event_for(name)
        recipients = await self.broadcast(event, payload)
        log.info("command_broadcast", extra={"command": name, "event": event, "recipients": recipients})
        return CommandResult(
            command=name,
            accepted=True,
            event=event,
            payload=payload,
            recipients=recipients,
        )

    # =====================================================
    # DASHBOARD REPORTS (fan-in / fan-out)
    # =====================================================

    async def ingest_report(self, session_id: str, kind: str, value: Any) -> bool:
        """
        Dashboard reporta o próprio estado; grava e re-transmite como state-changed.
        Não passa por execute(): reporte não pode virar comando de novo.
        """
        field_name = REPORT_FIELDS.get(kind)
        if field_name is None:
            return False

        session = self.registry.get(session_id)
        if session is None or session.role != "controller":
            log.debug("report_ignored_not_controller", extra={"session_id": session_id, "kind": kind})
            return False

        if kind == "volume_update":
            clean: Any = parse_volume(value)
            snapshot = self.playback.set_volume(clean)
        elif kind == "status_update":
            clean = parse_status(value)
            snapshot = self.playback.set_status(clean)
        else:
            clean = parse_title(value)
            snapshot = self.playback.set_title(clean)

        await self.broadcast(
            events.STATE_CHANGED,
            {"field": field_name, "value": clean, "state": snapshot.model_dump(mode="json")},
        )
        return True

    # =====================================================
    # CONTROLLER ACTIVITY
    # =====================================================

    async def record_activity(self) -> None:
        self._last_activity = self._clock()
        if self.playback.mark_activity():
            log.info("controller_active")
            await self.broadcast(events.CONTROLLER_ACTIVITY, {"active": True})

    async def sweep_once(self) -> bool:
        snapshot = self.playback.snapshot()
        if not snapshot.controllerActive or self._last_activity is None:
            return False

        idle_for = self._clock() - self._last_activity
        if idle_for <= self.activity_timeout_s:
            return False

        if not self.playback.mark_inactive():
            return False

        log.info("controller_inactive", extra={"idle_s": round(idle_for, 1)})
        await self.broadcast(events.CONTROLLER_ACTIVITY, {"active": False})
        return True

    # =====================================================
    # NOTIFICATIONS
    # =====================================================

    async def notify_auth_attempt(
        self,
        *,
        success: bool,
        who: str,
        ip: str,
        reason: Optional[str] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "success": success,
            "who": who,
            "ip": ip,
            "when": datetime.now(timezone.utc).isoformat(),
        }
        if reason:
            payload["reason"] = reason
        await self.broadcast(events.AUTH_ATTEMPT, payload)

    async def publish_sessions(self) -> None:
        clients = [s.public() for s in self.registry.list_external()]
        await self.broadcast(events.CONNECTED_CLIENTS, {"clients": clients, "count": len(clients)})

    # =====================================================
    # LIFECYCLE
    # =====================================================

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        log.info("activity_monitor_started", extra={"timeout_s": self.activity_timeout_s})

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        log.info("activity_monitor_stopped")

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.sweep_interval_s)
            try:
                await self.sweep_once()
            except Exception:
                log.exception("activity_sweep_failed")
