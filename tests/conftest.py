from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pytest
from fastapi.testclient import TestClient

from liveboard.core.config import Settings
from liveboard.main import create_app
from liveboard.state.playback_state import PlaybackState
from liveboard.ws.broadcaster import CommandBroadcaster
from liveboard.ws.manager import SessionRegistry

ENV_KEY = "e" * 64


class FakeSocket:
    """Só o pedaço de WebSocket que o registry usa."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, message: Dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)

    def types(self) -> List[str]:
        return [m["type"] for m in self.sent]

    def of_type(self, event: str) -> List[Dict[str, Any]]:
        return [m["data"] for m in self.sent if m["type"] == event]


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def receive_until(ws, event: str, limit: int = 20) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Lê do websocket de teste até achar `event`; devolve (mensagem, puladas)."""
    skipped: List[Dict[str, Any]] = []
    for _ in range(limit):
        msg = ws.receive_json()
        if msg["type"] == event:
            return msg, skipped
        skipped.append(msg)
    raise AssertionError(f"event {event!r} not received; got {[m['type'] for m in skipped]}")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        api_keys=f"{ENV_KEY}, ,",
        api_keys_file=str(tmp_path / "api-keys.json"),
        log_level="WARNING",
        activity_sweep_interval_s=3600,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth() -> Dict[str, str]:
    return {"X-API-Key": ENV_KEY}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry(controller_prefix="Dashboard")


@pytest.fixture
def playback() -> PlaybackState:
    return PlaybackState(default_title="No video loaded")


@pytest.fixture
def broadcaster(registry, playback, clock) -> CommandBroadcaster:
    return CommandBroadcaster(
        registry,
        playback,
        activity_timeout_s=60,
        sweep_interval_s=10,
        clock=clock,
    )
