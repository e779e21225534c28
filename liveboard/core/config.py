from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


# localhost on any port, plus 192.168.x.x / 10.x.x.x / 172.16-31.x.x
LOCAL_NETWORK_ORIGIN_REGEX = (
    r"^https?://("
    r"localhost|127\.0\.0\.1|"
    r"192\.168\.\d{1,3}\.\d{1,3}|"
    r"10\.\d{1,3}\.\d{1,3}\.\d{1,3}|"
    r"172\.(1[6-9]|2[0-9]|3[01])\.\d{1,3}\.\d{1,3}"
    r")(:\d+)?$"
)

PLACEHOLDER_API_KEY = "your-secret-api-key-change-this-in-production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # app
    app_name: str = "Liveboard"
    app_env: str = "dev"
    log_level: str = "INFO"

    # server
    host: str = "0.0.0.0"
    port: int = 1212
    cors_origin_regex: str = LOCAL_NETWORK_ORIGIN_REGEX

    # credentials
    api_keys: str = ""
    api_keys_file: str = "./api-keys.json"
    setup_enabled: bool = True

    # sessions
    controller_prefix: str = "Dashboard"
    default_title: str = "No video loaded"
    max_ws_message_bytes: int = 10 * 1024

    # controller activity
    activity_timeout_s: float = 60.0
    activity_sweep_interval_s: float = 10.0

    # broadcast
    require_recipients: bool = False

    # rate limits (per client ip)
    rate_limit_window_s: float = 15 * 60
    rate_limit_max: int = 100
    play_rate_limit_window_s: float = 60
    play_rate_limit_max: int = 30

    def env_api_keys(self) -> List[str]:
        return [k.strip() for k in (self.api_keys or "").split(",") if k.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
