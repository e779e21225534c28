from __future__ import annotations

import re
from typing import Any, Optional

from liveboard.core.errors import InvalidInput
from liveboard.models.playback import PLAYBACK_STATUSES

MAX_REFERENCE_LENGTH = 500
MAX_TITLE_LENGTH = 300

_ID = r"[a-zA-Z0-9_-]{11}"

VIDEO_REFERENCE_PATTERNS = (
    re.compile(rf"^https?://(www\.)?youtube\.com/watch\?v=(?P<id>{_ID})(&.*)?$"),
    re.compile(rf"^https?://youtu\.be/(?P<id>{_ID})$"),
    re.compile(rf"^https?://(www\.)?youtube\.com/embed/(?P<id>{_ID})$"),
    re.compile(rf"^(?P<id>{_ID})$"),
)


def _match_reference(value: Any) -> Optional[re.Match]:
    if not isinstance(value, str) or len(value) > MAX_REFERENCE_LENGTH:
        return None
    for pattern in VIDEO_REFERENCE_PATTERNS:
        m = pattern.fullmatch(value)
        if m:
            return m
    return None


def is_valid_video_reference(value: Any) -> bool:
    return _match_reference(value) is not None


def extract_video_id(value: Any) -> Optional[str]:
    m = _match_reference(value)
    return m.group("id") if m else None


def parse_video_reference(value: Any) -> str:
    if not value:
        raise InvalidInput("URL is required")
    if not is_valid_video_reference(value):
        raise InvalidInput("Invalid YouTube URL format")
    return value


def parse_volume(value: Any) -> float:
    """
    Só número (int/float) em [0, 100], devolvido como veio.
    bool é rejeitado mesmo sendo subclasse de int; string também.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != value:
        raise InvalidInput("Volume level must be a number between 0 and 100")

    if value < 0 or value > 100:
        raise InvalidInput("Volume level must be a number between 0 and 100")

    return value


def parse_status(value: Any) -> str:
    if value not in PLAYBACK_STATUSES:
        raise InvalidInput("Status must be one of: " + ", ".join(PLAYBACK_STATUSES))
    return value


def parse_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("Title is required")
    return value.strip()[:MAX_TITLE_LENGTH]


def parse_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("Name is required")
    return value.strip()
