"""Tests for the avatar token client and the webhook notification client."""

import json

import httpx
import pytest

from core.api.avatar_client import AvatarTokenClient
from core.api.notification_client import (
    USER_AGENT,
    NotificationClient,
    NotificationStatus,
    build_ended_payload,
    mask_webhook_url,
)
from exceptions.exceptions import UpstreamFailureError
from runtime.lifecycle.statistics import build_result
from runtime.models.session_models import PromptEntry, ResponseEntry, Session

from conftest import START, WebhookRecorder


def token_client(handler, api_key="secret-key"):
    return AvatarTokenClient(
        api_key=api_key,
        base_url="https://avatar.example.com/",
        transport=httpx.MockTransport(handler),
    )


class TestAvatarTokenClient:
    @pytest.mark.asyncio
    async def test_issues_token(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"token": "tok-123"}})

        token = await token_client(handler).issue_access_token()

        assert token == "tok-123"
        [request] = seen
        assert request.method == "POST"
        assert str(request.url) == "https://avatar.example.com/v1/streaming.create_token"
        assert request.headers["x-api-key"] == "secret-key"

    @pytest.mark.asyncio
    async def test_missing_key_fails_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(UpstreamFailureError, match="not configured"):
            await token_client(handler, api_key=None).issue_access_token()

    @pytest.mark.asyncio
    async def test_error_status(self):
        client = token_client(lambda request: httpx.Response(401, json={"error": "bad key"}))
        with pytest.raises(UpstreamFailureError) as excinfo:
            await client.issue_access_token()
        assert excinfo.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{"data": {}}, {"nope": 1}, {"data": {"token": ""}}, {"data": None}],
    )
    async def test_malformed_body(self, body):
        client = token_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(UpstreamFailureError):
            await client.issue_access_token()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamFailureError, match="Failed to create access token"):
            await token_client(handler).issue_access_token()


def completed_result():
    prompt = PromptEntry(text="Why us?", timestamp=START)
    answer = ResponseEntry(text="Because.", timestamp=START, correlated_prompt_timestamp=START)
    session = Session(
        id="interview_1_abc",
        created_at=START,
        last_activity=START,
        transcript=[prompt, answer],
        responses=[answer],
    )
    return build_result(session, "user_ended", START)


class TestNotificationClient:
    @pytest.mark.asyncio
    async def test_delivers_ended_event(self):
        webhook = WebhookRecorder(body="accepted")
        client = NotificationClient(
            ended_url="https://hooks.example.com/webhook/token",
            transport=httpx.MockTransport(webhook),
        )

        receipt = await client.notify_ended(completed_result(), candidate_info={"ip": "1.2.3.4"})

        assert receipt.delivered
        assert receipt.detail == "accepted"
        assert receipt.webhook_url == "https://hooks.example.com/webhook/***"
        [request] = webhook.requests
        assert request.headers["user-agent"] == USER_AGENT
        payload = json.loads(request.content)
        assert payload["event"] == "interview_ended"
        assert payload["endReason"] == "user_ended"
        assert payload["candidateInfo"] == {"ip": "1.2.3.4"}
        assert payload["conversation"][0]["kind"] == "prompt"
        assert payload["conversation"][1]["correlatedPromptTimestamp"] is not None

    @pytest.mark.asyncio
    async def test_skips_without_url(self):
        client = NotificationClient(transport=httpx.MockTransport(WebhookRecorder()))
        receipt = await client.notify_ended(completed_result())
        assert receipt.status == NotificationStatus.SKIPPED
        assert not receipt.delivered

    @pytest.mark.asyncio
    async def test_explicit_url_overrides_default(self):
        webhook = WebhookRecorder()
        client = NotificationClient(
            ended_url="https://default.example.com/hook",
            transport=httpx.MockTransport(webhook),
        )
        await client.notify_ended(completed_result(), webhook_url="https://other.example.com/hook")
        assert webhook.requests[0].url.host == "other.example.com"

    @pytest.mark.asyncio
    async def test_http_error_is_failed_receipt(self):
        client = NotificationClient(
            started_url="https://hooks.example.com/hook",
            transport=httpx.MockTransport(WebhookRecorder(status_code=404)),
        )
        session = Session(id="s", created_at=START, last_activity=START)
        receipt = await client.notify_started(session)
        assert receipt.status == NotificationStatus.FAILED
        assert receipt.detail == "HTTP 404: Not Found"

    @pytest.mark.asyncio
    async def test_transport_error_is_failed_receipt(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = NotificationClient(
            started_url="https://hooks.example.com/hook",
            transport=httpx.MockTransport(handler),
        )
        session = Session(id="s", created_at=START, last_activity=START)
        receipt = await client.notify_started(session)
        assert receipt.status == NotificationStatus.FAILED
        assert "ReadTimeout" in receipt.detail

    @pytest.mark.asyncio
    async def test_started_payload_shape(self):
        webhook = WebhookRecorder()
        client = NotificationClient(
            started_url="https://hooks.example.com/hook",
            transport=httpx.MockTransport(webhook),
        )
        session = Session(id="s-1", created_at=START, last_activity=START)
        await client.notify_started(
            session,
            avatar_config={"quality": "high"},
            api_base_url="http://testserver",
        )
        [payload] = webhook.payloads
        assert payload["event"] == "interview_started"
        assert payload["avatarConfig"]["quality"] == "high"
        assert payload["avatarConfig"]["avatarId"] == "Ann_Therapist"
        assert payload["apiBaseUrl"] == "http://testserver"
        assert payload["endpoints"]["status"] == "/api/session/status?sessionId=s-1"


def test_ended_payload_statistics():
    payload = build_ended_payload(completed_result(), timestamp=START)
    stats = payload["statistics"]
    assert stats["totalPrompts"] == 1
    assert stats["totalResponses"] == 1
    assert stats["totalMessages"] == 2
    assert stats["avatarMessages"] == 1
    assert stats["userMessages"] == 1
    assert stats["durationMinutes"] == 0.0
    assert payload["duration"] == "0m 0s"


def test_mask_webhook_url():
    assert mask_webhook_url("https://n8n.example.com/webhook/abc123") == "https://n8n.example.com/webhook/***"
