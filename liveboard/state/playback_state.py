from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from liveboard.models.playback import PlaybackSnapshot
from liveboard.services.validation import parse_status, parse_title, parse_volume


class PlaybackState:
    """
    Estado único do dashboard (volume / status / título + atividade do controle).

    Todas as escritas passam por aqui e são validadas. Leitura sempre devolve cópia.
    Nada aqui faz await: roda inteiro dentro do event loop, sem intercalar.
    """

    def __init__(self, default_title: str = "No video loaded") -> None:
        self._status = PlaybackSnapshot(currentTitle=default_title)

    def snapshot(self) -> PlaybackSnapshot:
        return self._status.model_copy()

    # =========================
    # WRITES
    # =========================

    def set_volume(self, value: Any) -> PlaybackSnapshot:
        self._status.volume = parse_volume(value)
        return self.snapshot()

    def set_status(self, value: Any) -> PlaybackSnapshot:
        self._status.playbackStatus = parse_status(value)
        return self.snapshot()

    def set_title(self, value: Any) -> PlaybackSnapshot:
        self._status.currentTitle = parse_title(value)
        return self.snapshot()

    # =========================
    # CONTROLLER ACTIVITY
    # =========================

    def mark_activity(self, now: Optional[datetime] = None) -> bool:
        """
        Atualiza o timestamp. Retorna True só na transição inativo -> ativo.
        """
        self._status.lastControllerActivity = now or datetime.now(timezone.utc)
        if self._status.controllerActive:
            return False
        self._status.controllerActive = True
        return True

    def mark_inactive(self) -> bool:
        if not self._status.controllerActive:
            return False
        self._status.controllerActive = False
        return True
