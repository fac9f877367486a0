"""HTTP routes for driving an interview session.

Exposes endpoints like:

- POST /api/session/start     -> issue an avatar token + create a session
- GET  /api/session/start     -> list sessions (id, status, createdAt only)
- GET  /api/session/status    -> status + transcript of one session
- POST /api/session/speak     -> record an avatar prompt
- POST /api/session/response  -> record a candidate response
- POST /api/session/end       -> terminate and return frozen results
- GET  /api/session/end       -> read frozen results again

Errors are raised as InterviewError subclasses and rendered into the
failure envelope by the handlers registered in server.py.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from exceptions.exceptions import InternalError, InvalidInputError

from ..agents.interview_coordinator import InterviewCoordinator
from ..models.api_models import (
    CurrentQuestionResponse,
    EndSessionRequest,
    EndSessionResponse,
    RecordResponseResponse,
    ResponseRequest,
    ResponsesResponse,
    ResultsResponse,
    SessionListResponse,
    SessionStatusResponse,
    SpeakData,
    SpeakRequest,
    SpeakResponse,
    StartSessionRequest,
    StartSessionResponse,
)


logger = logging.getLogger(__name__)

# Router for all session endpoints, mounted under /api/session
router = APIRouter()


def get_coordinator(request: Request) -> InterviewCoordinator:
    """Return the coordinator the server attached to app.state."""
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise InternalError("InterviewCoordinator is not configured on the server.")
    return coordinator


def require_session_id(session_id: Optional[str]) -> str:
    if not session_id:
        raise InvalidInputError("sessionId parameter is required")
    return session_id


def candidate_info_from_request(
    request: Request, extra: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Client details forwarded to the automation webhooks."""
    headers = request.headers
    info: Dict[str, Any] = {
        "userAgent": headers.get("user-agent"),
        "ip": headers.get("x-forwarded-for") or headers.get("x-real-ip"),
        "referrer": headers.get("referer"),
    }
    info.update(extra or {})
    return info


def api_base_url(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


@router.post("/start", response_model=StartSessionResponse)
async def start_session(
    request: Request,
    body: Optional[StartSessionRequest] = None,
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> StartSessionResponse:
    """Create a new interview session.

    The avatar access token is issued first; if that fails no session is
    created and the caller gets an UpstreamFailure envelope.
    """
    body = body or StartSessionRequest()
    outcome = await coordinator.create_session(
        body.to_config(),
        candidate_info=candidate_info_from_request(request, body.candidate_info),
        api_base_url=api_base_url(request),
    )
    session = outcome.session
    return StartSessionResponse(
        session_id=session.id,
        access_token=outcome.access_token,
        status=session.status,
        created_at=session.created_at,
        config=session.config,
        notification=outcome.notification,
    )


@router.get("/start", response_model=SessionListResponse)
async def list_sessions(
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> SessionListResponse:
    sessions = coordinator.list_sessions()
    return SessionListResponse(active_sessions=len(sessions), sessions=sessions)


@router.get("/status", response_model=SessionStatusResponse)
async def session_status(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> SessionStatusResponse:
    session = coordinator.get_session(require_session_id(session_id))
    return SessionStatusResponse(
        session_id=session.id,
        status=session.status,
        created_at=session.created_at,
        last_activity=session.last_activity,
        ended_at=session.ended_at,
        current_question=session.current_question,
        total_prompts=session.total_prompts,
        total_responses=session.total_responses,
        transcript=session.transcript,
    )


@router.post("/speak", response_model=SpeakResponse)
async def speak(
    body: SpeakRequest,
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> SpeakResponse:
    """Record the question the avatar is about to speak.

    Returns the arguments the browser passes to the avatar SDK.
    """
    entry = coordinator.record_prompt(
        body.session_id,
        body.text,
        task_type=body.task_type,
        question_type=body.question_type,
    )
    session = coordinator.get_session(body.session_id)
    return SpeakResponse(
        session_id=session.id,
        question_sent=entry.text,
        task_type=entry.task_type,
        timestamp=entry.timestamp,
        status=session.status,
        entry=entry,
        transcript=session.transcript,
        speak_data=SpeakData(text=entry.text, task_type=entry.task_type),
    )


@router.get("/speak", response_model=CurrentQuestionResponse)
async def current_question(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> CurrentQuestionResponse:
    session = coordinator.get_session(require_session_id(session_id))
    return CurrentQuestionResponse(
        session_id=session.id,
        status=session.status,
        current_question=session.current_question,
        transcript=session.transcript,
    )


@router.post("/response", response_model=RecordResponseResponse)
async def record_response(
    body: ResponseRequest,
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> RecordResponseResponse:
    entry = coordinator.record_response(
        body.session_id,
        body.response_text,
        response_type=body.response_type,
        confidence=body.confidence,
        duration=body.duration,
    )
    session = coordinator.get_session(body.session_id)
    return RecordResponseResponse(
        session_id=session.id,
        status=session.status,
        response=entry,
        total_responses=session.total_responses,
        transcript=session.transcript,
    )


@router.get("/response", response_model=ResponsesResponse)
async def list_responses(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> ResponsesResponse:
    session = coordinator.get_session(require_session_id(session_id))
    return ResponsesResponse(
        session_id=session.id,
        responses=session.responses,
        last_response=session.last_response,
        total_responses=session.total_responses,
        transcript=session.transcript,
    )


@router.post("/end", response_model=EndSessionResponse)
async def end_session(
    request: Request,
    body: EndSessionRequest,
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> EndSessionResponse:
    """Terminate the session.

    `success` reflects the local state change. Whether the automation
    webhook was reached is reported separately in `notification`.
    """
    outcome = await coordinator.terminate(
        body.session_id,
        body.reason,
        candidate_info=candidate_info_from_request(request),
    )
    if not outcome.notification.delivered:
        logger.warning(
            "[API] session_id=%s ended locally, notification %s: %s",
            body.session_id,
            outcome.notification.status.value,
            outcome.notification.detail,
        )
    return EndSessionResponse(results=outcome.results, notification=outcome.notification)


@router.get("/end", response_model=ResultsResponse)
async def session_results(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    coordinator: InterviewCoordinator = Depends(get_coordinator),
) -> ResultsResponse:
    return ResultsResponse(results=coordinator.get_results(require_session_id(session_id)))
