"""Shared pytest fixtures and configuration."""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from core.api.notification_client import NotificationClient
from runtime.agents.interview_coordinator import InterviewCoordinator
from runtime.lifecycle.recorder import TranscriptRecorder
from runtime.store.session_store import SessionStore


START = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)

STARTED_URL = "https://hooks.example.com/webhook/started-secret"
ENDED_URL = "https://hooks.example.com/webhook/ended-secret"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = START):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current


class StubTokenClient:
    def __init__(self, token: str = "test-access-token", error: Exception = None):
        self.token = token
        self.error = error
        self.calls = 0

    async def issue_access_token(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.token


class WebhookRecorder:
    """httpx.MockTransport handler that records every posted request."""

    def __init__(self, status_code: int = 200, body: str = "ok"):
        self.status_code = status_code
        self.body = body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]

    def events(self):
        return [p["event"] for p in self.payloads]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def recorder(store, clock):
    return TranscriptRecorder(store, clock=clock)


@pytest.fixture
def token_client():
    return StubTokenClient()


@pytest.fixture
def webhook():
    return WebhookRecorder()


@pytest.fixture
def notification_client(webhook):
    return NotificationClient(
        started_url=STARTED_URL,
        ended_url=ENDED_URL,
        transport=httpx.MockTransport(webhook),
    )


@pytest.fixture
def coordinator(store, token_client, notification_client, clock):
    return InterviewCoordinator(
        session_store=store,
        token_client=token_client,
        notification_client=notification_client,
        clock=clock,
    )
