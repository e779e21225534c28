import pytest
from starlette.websockets import WebSocketDisconnect

from conftest import receive_until

VID = "dQw4w9WgXcQ"


def test_new_session_gets_current_state(client):
    with client.websocket_connect("/ws") as ws:
        state = ws.receive_json()
        assert state["type"] == "playback-state"
        assert state["data"]["volume"] == 100
        assert state["data"]["playbackStatus"] == "stopped"

        activity = ws.receive_json()
        assert activity == {"type": "controller-activity", "data": {"active": False}}

        listing = ws.receive_json()
        assert listing["type"] == "connected-clients"
        assert listing["data"]["count"] == 1


def test_get_controls(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "get_controls"})
        msg, _ = receive_until(ws, "controls")
        commands = {c["command"] for c in msg["data"]["controls"]}
        assert {"play", "volume", "play-pause", "stop"} <= commands


def test_identify_announces_client(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "identify", "data": {"name": "Stream Deck"}})
        msg, _ = receive_until(ws, "client-connected")
        assert msg["data"]["displayName"] == "Stream Deck"
        assert msg["data"]["role"] == "external"


def test_command_over_socket(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "command", "command": "play", "value": VID})
        msg, _ = receive_until(ws, "play-video")
        assert msg["data"]["videoId"] == VID


def test_rejected_command_replies_only_to_sender(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "command", "command": "volume", "value": 999})
        msg, skipped = receive_until(ws, "error")
        assert msg["data"]["command"] == "volume"
        assert "volume-changed" not in [m["type"] for m in skipped]


def test_unknown_command_is_silent(client):
    with client.websocket_connect("/ws") as ws:
        receive_until(ws, "connected-clients")
        ws.send_json({"type": "command", "command": "warp-drive"})
        ws.send_json({"type": "get_controls"})

        # a próxima coisa que chega é a resposta do get_controls
        msg = ws.receive_json()
        assert msg["type"] == "controls"


def test_dashboard_reports_fan_out(client, auth):
    with client.websocket_connect("/ws") as dash, client.websocket_connect("/ws") as viewer:
        dash.send_json({"type": "identify", "name": "Dashboard-TV"})
        receive_until(dash, "client-connected")

        dash.send_json({"type": "title_update", "title": "Lofi beats"})
        dash.send_json({"type": "status_update", "status": "playing"})
        dash.send_json({"type": "volume_update", "value": 25})

        seen = []
        while len(seen) < 3:
            msg, _ = receive_until(viewer, "state-changed")
            seen.append(msg["data"]["field"])
        assert seen == ["currentTitle", "playbackStatus", "volume"]

        state = client.get("/api/state", headers=auth).json()
        assert state["currentTitle"] == "Lofi beats"
        assert state["playbackStatus"] == "playing"
        assert state["volume"] == 25


def test_bad_frames_do_not_drop_connection(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("{not json")
        msg, _ = receive_until(ws, "error")
        assert msg["data"]["error"] == "Invalid JSON"

        ws.send_text("x" * 20000)
        msg, _ = receive_until(ws, "error")
        assert msg["data"]["error"] == "Message too large"

        ws.send_json(["not", "a", "dict"])
        ws.send_json({"type": "get_controls"})
        receive_until(ws, "controls")


def test_disconnect_updates_count(client):
    with client.websocket_connect("/ws") as a:
        with client.websocket_connect("/ws"):
            pass
        msg, _ = receive_until(a, "client-disconnected")
        assert msg["data"]["displayName"] == "Unknown Device"
        assert client.get("/health").json()["totalSessions"] == 1


def test_foreign_origin_is_refused(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws", headers={"Origin": "https://evil.example.com"}) as ws:
            ws.receive_json()


def test_local_network_origin_is_accepted(client):
    with client.websocket_connect("/ws", headers={"Origin": "http://192.168.1.20:1212"}) as ws:
        assert ws.receive_json()["type"] == "playback-state"
