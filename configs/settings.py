from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


DEFAULT_AVATAR_API_URL = "https://api.heygen.com"
DEFAULT_RETENTION_SECONDS = 3600.0


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


class Settings:
    """
    Central configuration for the interview avatar runtime.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties.
    """

    def __init__(self) -> None:
        # Avatar vendor (token issuance)
        self._avatar_api_key = (
            os.getenv("INTERVIEW_AVATAR_API_KEY") or os.getenv("HEYGEN_API_KEY") or None
        )
        self._avatar_api_url = (
            os.getenv("INTERVIEW_AVATAR_API_URL")
            or os.getenv("NEXT_PUBLIC_BASE_API_URL")
            or DEFAULT_AVATAR_API_URL
        ).rstrip("/")

        # Outbound automation webhooks
        self._started_webhook_url = os.getenv("N8N_WEBHOOK_URL") or None
        self._ended_webhook_url = os.getenv("N8N_CONVERSATION_WEBHOOK_URL") or None

        # Session lifecycle
        self._retention_seconds = _env_float(
            "INTERVIEW_RETENTION_SECONDS", DEFAULT_RETENTION_SECONDS
        )
        self._http_timeout = _env_float("INTERVIEW_HTTP_TIMEOUT", 10.0)

        # Server / logging
        self._log_level = os.getenv("INTERVIEW_LOG_LEVEL", "INFO").upper()
        self._host = os.getenv("INTERVIEW_HOST", "127.0.0.1")
        self._port = int(os.getenv("INTERVIEW_PORT", "8000"))

    # ------------------------------------------------------------------
    # Avatar vendor settings
    # ------------------------------------------------------------------

    @property
    def avatar_api_key(self) -> Optional[str]:
        return self._avatar_api_key

    @property
    def avatar_api_url(self) -> str:
        return self._avatar_api_url

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    @property
    def started_webhook_url(self) -> Optional[str]:
        return self._started_webhook_url

    @property
    def ended_webhook_url(self) -> Optional[str]:
        return self._ended_webhook_url

    # ------------------------------------------------------------------
    # Lifecycle / transport
    # ------------------------------------------------------------------

    @property
    def retention_seconds(self) -> float:
        return self._retention_seconds

    @property
    def http_timeout(self) -> float:
        return self._http_timeout

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    @property
    def log_level(self) -> str:
        return self._log_level

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port


settings = Settings()
