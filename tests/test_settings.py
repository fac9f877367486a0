"""Tests for environment-driven settings."""

import pytest

from configs.settings import DEFAULT_AVATAR_API_URL, Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in [
        "INTERVIEW_AVATAR_API_KEY",
        "HEYGEN_API_KEY",
        "INTERVIEW_AVATAR_API_URL",
        "NEXT_PUBLIC_BASE_API_URL",
        "N8N_WEBHOOK_URL",
        "N8N_CONVERSATION_WEBHOOK_URL",
        "INTERVIEW_RETENTION_SECONDS",
        "INTERVIEW_HTTP_TIMEOUT",
        "INTERVIEW_LOG_LEVEL",
        "INTERVIEW_HOST",
        "INTERVIEW_PORT",
    ]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = Settings()
    assert s.avatar_api_key is None
    assert s.avatar_api_url == DEFAULT_AVATAR_API_URL
    assert s.started_webhook_url is None
    assert s.ended_webhook_url is None
    assert s.retention_seconds == 3600.0
    assert s.http_timeout == 10.0
    assert s.log_level == "INFO"
    assert s.port == 8000


def test_overrides(clean_env):
    clean_env.setenv("INTERVIEW_AVATAR_API_KEY", "key-1")
    clean_env.setenv("INTERVIEW_AVATAR_API_URL", "https://avatar.example.com/")
    clean_env.setenv("N8N_WEBHOOK_URL", "https://hooks.example.com/a")
    clean_env.setenv("N8N_CONVERSATION_WEBHOOK_URL", "https://hooks.example.com/b")
    clean_env.setenv("INTERVIEW_RETENTION_SECONDS", "90")
    clean_env.setenv("INTERVIEW_LOG_LEVEL", "debug")

    s = Settings()
    assert s.avatar_api_key == "key-1"
    assert s.avatar_api_url == "https://avatar.example.com"
    assert s.started_webhook_url == "https://hooks.example.com/a"
    assert s.ended_webhook_url == "https://hooks.example.com/b"
    assert s.retention_seconds == 90.0
    assert s.log_level == "DEBUG"


def test_vendor_env_fallbacks(clean_env):
    clean_env.setenv("HEYGEN_API_KEY", "legacy-key")
    clean_env.setenv("NEXT_PUBLIC_BASE_API_URL", "https://legacy.example.com")
    s = Settings()
    assert s.avatar_api_key == "legacy-key"
    assert s.avatar_api_url == "https://legacy.example.com"


def test_bad_number_is_rejected(clean_env):
    clean_env.setenv("INTERVIEW_RETENTION_SECONDS", "an hour")
    with pytest.raises(RuntimeError, match="INTERVIEW_RETENTION_SECONDS"):
        Settings()
