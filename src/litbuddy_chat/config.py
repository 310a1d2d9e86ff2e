from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    BACKEND_URL: str = "http://localhost:5001/api"
    WS_PATH: str = "/ws"

    RECONNECT_DELAY_SECONDS: float = 5.0
    HISTORY_TIMEOUT_SECONDS: float = 10.0
    REQUEST_TIMEOUT_SECONDS: float = 30.0
    SCROLL_DEBOUNCE_SECONDS: float = 0.04

    OFFLINE_PUBLISH_POLICY: Literal["drop", "queue"] = "drop"
    OFFLINE_QUEUE_MAX: int = 100
    RESUBSCRIBE_POLICY: Literal["replace", "reject"] = "replace"

    LOG_LEVEL: str = "INFO"

    @property
    def api_url(self) -> str:
        return self.BACKEND_URL.rstrip("/")

    @property
    def ws_origin(self) -> str:
        """Backend origin with the REST prefix stripped and a ws scheme."""
        origin = self.api_url
        if origin.endswith("/api"):
            origin = origin[: -len("/api")]
        return origin.replace("http", "ws", 1)

    def ws_url(self, token: str) -> str:
        return f"{self.ws_origin}{self.WS_PATH}?token={token}"

    model_config = ConfigDict(
        env_file=".env",
        env_prefix="LITBUDDY_",
        extra="ignore",
    )


settings = Settings()
