"""Pydantic Settings for the notification console."""

from pydantic_settings import BaseSettings
from pydantic import Field
from config.constants import (
    CONFIG_TIMEOUT,
    RECONNECTION_ATTEMPTS,
    RECONNECTION_DELAY,
    RECONNECTION_DELAY_MAX,
    TOAST_DEDUP_GRACE,
    TOAST_DURATION,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Back-office API
    api_base_url: str = "http://localhost:3001"
    config_timeout: float = CONFIG_TIMEOUT

    # Notification stream
    stream_path: str = "/ws/notifications"
    reconnection_delay: float = RECONNECTION_DELAY
    reconnection_delay_max: float = RECONNECTION_DELAY_MAX
    reconnection_attempts: int = Field(default=RECONNECTION_ATTEMPTS, ge=0)

    # Toasts
    toast_duration: float = TOAST_DURATION
    toast_dedup_grace: float = TOAST_DEDUP_GRACE

    # Session used by the console entry point
    session_token: str = ""
    session_username: str = ""
    session_permissions: list[str] = Field(default_factory=list)

    # Web surface
    web_secret_key: str = "change-me"
    web_port: int = 5000

    # Operational
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
