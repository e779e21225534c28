from __future__ import annotations


class LiveboardError(Exception):
    """
    Erro de domínio com status HTTP associado.
    O handler em main.py transforma em {"success": false, "error": reason}.
    """

    status_code = 500

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class Unauthenticated(LiveboardError):
    status_code = 401


class InvalidCredential(LiveboardError):
    status_code = 401


class InvalidInput(LiveboardError):
    status_code = 400


class Forbidden(LiveboardError):
    status_code = 403


class NotFound(LiveboardError):
    status_code = 404


class RateLimited(LiveboardError):
    status_code = 429


class Unavailable(LiveboardError):
    status_code = 503


class Internal(LiveboardError):
    status_code = 500
