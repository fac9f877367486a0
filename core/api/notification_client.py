"""
core.api.notification_client

Delivers interview lifecycle events to the external automation webhooks:

  - interview_started -> N8N_WEBHOOK_URL
  - interview_ended   -> N8N_CONVERSATION_WEBHOOK_URL

Delivery never raises into the session lifecycle. Each call returns a
NotificationReceipt so the caller can tell "ended locally" apart from
"ended and the remote automation was notified".
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from runtime.models.session_models import CamelModel, Session, SessionResult


logger = logging.getLogger(__name__)

USER_AGENT = "Interview-Avatar-Bot/1.0"

EVENT_STARTED = "interview_started"
EVENT_ENDED = "interview_ended"


def mask_webhook_url(url: str) -> str:
    """Hide the trailing path segment, which usually carries the webhook token."""
    return re.sub(r"/[^/]*$", "/***", url)


class NotificationStatus(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


class NotificationReceipt(CamelModel):
    event: str
    status: NotificationStatus
    detail: Optional[str] = None
    webhook_url: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status == NotificationStatus.DELIVERED


def build_started_payload(
    session: Session,
    *,
    timestamp: datetime,
    candidate_info: Optional[Dict[str, Any]] = None,
    avatar_config: Optional[Dict[str, Any]] = None,
    api_base_url: str = "",
) -> Dict[str, Any]:
    config = session.config.model_dump(by_alias=True, mode="json")
    config.update(avatar_config or {})
    return {
        "event": EVENT_STARTED,
        "sessionId": session.id,
        "timestamp": timestamp.isoformat(),
        "createdAt": session.created_at.isoformat(),
        "candidateInfo": dict(candidate_info or {}),
        "avatarConfig": config,
        "apiBaseUrl": api_base_url,
        "endpoints": {
            "speak": "/api/session/speak",
            "response": "/api/session/response",
            "end": "/api/session/end",
            "status": f"/api/session/status?sessionId={session.id}",
        },
    }


def build_ended_payload(
    result: SessionResult,
    *,
    timestamp: datetime,
    candidate_info: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    dumped = result.model_dump(by_alias=True, mode="json")
    prompts = result.statistics.total_prompts
    responses = result.statistics.total_responses
    statistics = dict(dumped["statistics"])
    statistics.update(
        {
            "totalMessages": len(result.transcript),
            "avatarMessages": prompts,
            "userMessages": responses,
            "durationMinutes": result.duration.duration_minutes,
        }
    )
    return {
        "event": EVENT_ENDED,
        "sessionId": result.session_id,
        "timestamp": timestamp.isoformat(),
        "endReason": result.reason,
        "startedAt": dumped["startedAt"],
        "endedAt": dumped["endedAt"],
        "duration": result.duration.formatted,
        "conversation": dumped["transcript"],
        "statistics": statistics,
        "config": dumped["config"],
        "candidateInfo": dict(candidate_info or {}),
    }


class NotificationClient:
    """Posts lifecycle events as JSON to the configured webhooks.

    Parameters
    ----------
    started_url / ended_url:
        Default webhook URLs. Either may be None, in which case the event
        is skipped unless the caller passes an explicit `webhook_url`.
    timeout:
        Request timeout in seconds.
    transport:
        Optional httpx transport (tests pass an httpx.MockTransport).
    """

    def __init__(
        self,
        started_url: Optional[str] = None,
        ended_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.started_url = started_url
        self.ended_url = ended_url
        self.timeout = timeout
        self._transport = transport

    async def notify_started(
        self,
        session: Session,
        *,
        candidate_info: Optional[Dict[str, Any]] = None,
        avatar_config: Optional[Dict[str, Any]] = None,
        api_base_url: str = "",
        webhook_url: Optional[str] = None,
    ) -> NotificationReceipt:
        payload = build_started_payload(
            session,
            timestamp=datetime.now(timezone.utc),
            candidate_info=candidate_info,
            avatar_config=avatar_config,
            api_base_url=api_base_url,
        )
        return await self._deliver(EVENT_STARTED, webhook_url or self.started_url, payload)

    async def notify_ended(
        self,
        result: SessionResult,
        *,
        candidate_info: Optional[Dict[str, Any]] = None,
        webhook_url: Optional[str] = None,
    ) -> NotificationReceipt:
        payload = build_ended_payload(
            result,
            timestamp=datetime.now(timezone.utc),
            candidate_info=candidate_info,
        )
        return await self._deliver(EVENT_ENDED, webhook_url or self.ended_url, payload)

    async def _deliver(
        self, event: str, url: Optional[str], payload: Dict[str, Any]
    ) -> NotificationReceipt:
        if not url:
            logger.info("[WEBHOOK] %s skipped: webhook URL not configured", event)
            return NotificationReceipt(
                event=event,
                status=NotificationStatus.SKIPPED,
                detail="webhook URL not configured",
            )

        masked = mask_webhook_url(url)
        logger.info("[WEBHOOK] sending %s for session_id=%s to %s", event, payload["sessionId"], masked)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"User-Agent": USER_AGENT},
                )
        except httpx.HTTPError as e:
            logger.warning("[WEBHOOK] %s delivery to %s failed: %s", event, masked, e)
            return NotificationReceipt(
                event=event,
                status=NotificationStatus.FAILED,
                detail=f"{type(e).__name__}: {e}",
                webhook_url=masked,
            )

        if response.is_error:
            detail = f"HTTP {response.status_code}: {response.reason_phrase}"
            logger.warning("[WEBHOOK] %s delivery to %s failed: %s", event, masked, detail)
            return NotificationReceipt(
                event=event,
                status=NotificationStatus.FAILED,
                detail=detail,
                webhook_url=masked,
            )

        logger.info("[WEBHOOK] %s delivered to %s", event, masked)
        return NotificationReceipt(
            event=event,
            status=NotificationStatus.DELIVERED,
            detail=response.text[:500] or None,
            webhook_url=masked,
        )
