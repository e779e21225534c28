from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from liveboard.api.deps import get_broadcaster_ws, get_playback_ws, get_registry_ws
from liveboard.core.errors import LiveboardError, NotFound
from liveboard.models import events
from liveboard.services.commands import CONTROL_DEFINITIONS
from liveboard.state.playback_state import PlaybackState
from liveboard.ws.broadcaster import REPORT_FIELDS, CommandBroadcaster
from liveboard.ws.manager import SessionRegistry

log = logging.getLogger("ws")

router = APIRouter()

# campo onde cada reporte traz o valor
REPORT_VALUE_KEYS = {
    "volume_update": "value",
    "status_update": "status",
    "title_update": "title",
}


def origin_allowed(websocket: WebSocket) -> bool:
    origin = websocket.headers.get("origin")
    if not origin:
        # app nativo, curl etc.
        return True
    pattern = websocket.app.state.settings.cors_origin_regex
    return re.match(pattern, origin) is not None


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    registry: SessionRegistry = Depends(get_registry_ws),
    broadcaster: CommandBroadcaster = Depends(get_broadcaster_ws),
    playback: PlaybackState = Depends(get_playback_ws),
):
    if not origin_allowed(websocket):
        log.warning("ws_origin_blocked", extra={"origin": websocket.headers.get("origin")})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    remote = websocket.client.host if websocket.client else ""
    session = await registry.register(websocket, remote)

    # quem chega recebe o estado atual
    snapshot = playback.snapshot()
    await registry.send_to(session.id, events.envelope(events.PLAYBACK_STATE, snapshot.model_dump(mode="json")))
    await registry.send_to(
        session.id,
        events.envelope(events.CONTROLLER_ACTIVITY, {"active": snapshot.controllerActive}),
    )
    await broadcaster.publish_sessions()

    max_bytes = websocket.app.state.settings.max_ws_message_bytes

    try:
        while True:
            raw = await websocket.receive_text()

            if len(raw.encode("utf-8")) > max_bytes:
                await _reply_error(registry, session.id, "Message too large")
                continue

            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await _reply_error(registry, session.id, "Invalid JSON")
                continue

            if not isinstance(msg, dict):
                continue

            await handle_message(session.id, msg, registry, broadcaster)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        log.warning("ws_connection_closed", extra={"session_id": session.id, "error": str(e)})
    finally:
        removed = await registry.unregister(session.id)
        if removed is not None:
            await broadcaster.broadcast(
                events.CLIENT_DISCONNECTED,
                {"id": removed.id, "displayName": removed.displayName, "role": removed.role},
            )
            await broadcaster.publish_sessions()


async def handle_message(
    session_id: str,
    msg: Dict[str, Any],
    registry: SessionRegistry,
    broadcaster: CommandBroadcaster,
) -> None:
    msg_type = msg.get("type")
    data = msg.get("data") if isinstance(msg.get("data"), dict) else msg

    # =========================
    # IDENTIFY
    # =========================
    if msg_type == "identify":
        try:
            session = await registry.identify(session_id, str(data.get("name") or ""))
        except NotFound:
            return
        await broadcaster.broadcast(events.CLIENT_CONNECTED, session.public())
        await broadcaster.publish_sessions()
        return

    # =========================
    # COMMAND (controle externo via ws)
    # =========================
    if msg_type == "command":
        command = data.get("command")
        # comando desconhecido: o broadcaster loga e ninguém recebe nada
        try:
            await broadcaster.execute(command, data.get("value"))
        except LiveboardError as e:
            log.warning("ws_command_rejected", extra={"command": command, "reason": e.reason})
            await _reply_error(registry, session_id, e.reason, command=command)
        return

    # =========================
    # DASHBOARD STATE REPORTS
    # =========================
    if msg_type in REPORT_FIELDS:
        value = data.get(REPORT_VALUE_KEYS[msg_type])
        try:
            await broadcaster.ingest_report(session_id, msg_type, value)
        except LiveboardError as e:
            await _reply_error(registry, session_id, e.reason, command=msg_type)
        return

    # =========================
    # CONTROL DISCOVERY
    # =========================
    if msg_type == "get_controls":
        await registry.send_to(session_id, events.envelope(events.CONTROLS, {"controls": CONTROL_DEFINITIONS}))
        return

    log.debug("ws_unknown_msg", extra={"session_id": session_id, "msg_type": msg_type})


async def _reply_error(registry: SessionRegistry, session_id: str, reason: str, command: Any = None) -> None:
    payload: Dict[str, Any] = {"error": reason}
    if command is not None:
        payload["command"] = command
    await registry.send_to(session_id, events.envelope(events.ERROR, payload))
