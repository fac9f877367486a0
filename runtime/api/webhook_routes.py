"""HTTP routes for (re)sending interview events to the automation webhooks.

- POST /api/webhook/interview-started -> send interview_started for a session
- POST /api/webhook/interview-ended   -> send interview_ended for a completed session
- GET  on either path                 -> readiness info

Session creation and termination already send these events; these routes
let the browser or an operator trigger them again, optionally against a
different webhook URL (`n8nWebhookUrl`).
"""

import logging

from fastapi import APIRouter, Depends, Request

from core.api.notification_client import NotificationReceipt, NotificationStatus, mask_webhook_url
from exceptions.exceptions import InvalidInputError, UpstreamFailureError

from ..agents.interview_coordinator import InterviewCoordinator
from ..models.api_models import (
    InterviewEndedWebhookRequest,
    InterviewStartedWebhookRequest,
    WebhookResponse,
)
from .session_routes import api_base_url, candidate_info_from_request, get_coordinator


logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_for_receipt(receipt: NotificationReceipt, env_var: str) -> None:
    if receipt.status == NotificationStatus.SKIPPED:
        raise InvalidInputError(f"Webhook URL not configured ({env_var} or n8nWebhookUrl)")
    if receipt.status == NotificationStatus.FAILED:
        logger.warning("[API] %s webhook failed: %s", receipt.event, receipt.detail)
        raise UpstreamFailureError(f"Failed to trigger webhook: {receipt.detail}")


@router.post("/interview-started", response_model=WebhookResponse)
async def interview_started(
    request: Request,
    body: InterviewStartedWebhookRequest,
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> WebhookResponse:
    receipt = await coordinator.send_started_notification(
        body.session_id,
        candidate_info=candidate_info_from_request(request, body.candidate_info),
        avatar_config=body.avatar_config,
        api_base_url=api_base_url(request),
        webhook_url=body.n8n_webhook_url,
    )
    _raise_for_receipt(receipt, "N8N_WEBHOOK_URL")
    return WebhookResponse(
        message="Interview started webhook triggered successfully",
        session_id=body.session_id,
        notification=receipt,
    )


@router.post("/interview-ended", response_model=WebhookResponse)
async def interview_ended(
    request: Request,
    body: InterviewEndedWebhookRequest,
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> WebhookResponse:
    receipt = await coordinator.send_ended_notification(
        body.session_id,
        candidate_info=candidate_info_from_request(request, body.candidate_info),
        webhook_url=body.n8n_webhook_url,
    )
    _raise_for_receipt(receipt, "N8N_CONVERSATION_WEBHOOK_URL")
    return WebhookResponse(
        message="Interview conversation sent successfully",
        session_id=body.session_id,
        notification=receipt,
    )


def _readiness(path: str, action: str, env_var: str, configured) -> dict:
    return {
        "success": True,
        "message": f"Webhook endpoint {path} is ready",
        "configured": bool(configured),
        "webhookUrl": mask_webhook_url(configured) if configured else None,
        "endpoints": {
            action: f"POST /api/webhook/{path}",
            "health": f"GET /api/webhook/{path}",
        },
        "requiredEnv": [f"{env_var} (optional - can be provided in request body)"],
    }


@router.get("/interview-started")
async def interview_started_health(
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> dict:
    return _readiness(
        "interview-started",
        "trigger",
        "N8N_WEBHOOK_URL",
        coordinator.notification_client.started_url,
    )


@router.get("/interview-ended")
async def interview_ended_health(
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> dict:
    return _readiness(
        "interview-ended",
        "endInterview",
        "N8N_CONVERSATION_WEBHOOK_URL",
        coordinator.notification_client.ended_url,
    )
