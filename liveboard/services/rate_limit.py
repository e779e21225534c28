from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from liveboard.core.errors import RateLimited

log = logging.getLogger("rate_limit")


class SlidingWindowLimiter:
    """
    Limite simples por IP: no máximo `max_hits` dentro de `window_s` segundos.
    Só memória do processo, some no restart.
    """

    def __init__(
        self,
        *,
        name: str,
        max_hits: int,
        window_s: float,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.max_hits = max_hits
        self.window_s = window_s
        self.message = message
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = clock()

    def hit(self, ip: str) -> None:
        now = self._clock()
        if now - self._last_sweep >= self.window_s:
            self._drop_idle(now)

        hits = self._hits[ip]
        self._expire(hits, now)

        if len(hits) >= self.max_hits:
            log.warning("rate_limit_exceeded", extra={"limiter": self.name, "ip": ip})
            raise RateLimited(self.message)

        hits.append(now)

    def _expire(self, hits: Deque[float], now: float) -> None:
        # limpa entradas velhas
        while hits and now - hits[0] >= self.window_s:
            hits.popleft()

    def _drop_idle(self, now: float) -> None:
        """Remove IPs sem nenhum hit dentro da janela (o mapa não cresce sem limite)."""
        for ip in list(self._hits):
            self._expire(self._hits[ip], now)
            if not self._hits[ip]:
                del self._hits[ip]
        self._last_sweep = now
