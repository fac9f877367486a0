"""
HTTP request/response models for the interview runtime API.

Every response is an envelope: `success` plus either the payload fields
or `error` (a stable ErrorKind) and a human-readable `detail`.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.api.notification_client import NotificationReceipt
from exceptions.exceptions import ErrorKind

from .session_models import (
    CamelModel,
    PromptEntry,
    ResponseEntry,
    SessionConfig,
    SessionResult,
    SessionStatus,
    SessionSummary,
    TranscriptEntry,
)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class StartSessionRequest(SessionConfig):
    candidate_info: Dict[str, Any] = Field(default_factory=dict)

    def to_config(self) -> SessionConfig:
        return SessionConfig(**self.model_dump(exclude={"candidate_info"}))


class SpeakRequest(CamelModel):
    session_id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    task_type: str = "repeat"
    question_type: str = "interview"


class ResponseRequest(CamelModel):
    session_id: str = Field(min_length=1)
    response_text: Optional[str] = None
    response_type: str = "voice"
    confidence: Optional[float] = None
    duration: Optional[float] = None


class EndSessionRequest(CamelModel):
    session_id: str = Field(min_length=1)
    reason: str = "interview_completed"


class InterviewStartedWebhookRequest(CamelModel):
    session_id: str = Field(min_length=1)
    candidate_info: Dict[str, Any] = Field(default_factory=dict)
    avatar_config: Dict[str, Any] = Field(default_factory=dict)
    n8n_webhook_url: Optional[str] = None


class InterviewEndedWebhookRequest(CamelModel):
    session_id: str = Field(min_length=1)
    candidate_info: Dict[str, Any] = Field(default_factory=dict)
    n8n_webhook_url: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ErrorResponse(CamelModel):
    success: bool = False
    error: ErrorKind
    detail: str


class StartSessionResponse(CamelModel):
    success: bool = True
    session_id: str
    access_token: str
    status: SessionStatus
    created_at: datetime
    config: SessionConfig
    message: str = "Interview session created successfully"
    notification: NotificationReceipt


class SessionListResponse(CamelModel):
    success: bool = True
    active_sessions: int
    sessions: List[SessionSummary]


class SessionStatusResponse(CamelModel):
    success: bool = True
    session_id: str
    status: SessionStatus
    created_at: datetime
    last_activity: datetime
    ended_at: Optional[datetime] = None
    current_question: Optional[PromptEntry] = None
    total_prompts: int
    total_responses: int
    transcript: List[TranscriptEntry]


class SpeakData(BaseModel):
    """Arguments for the avatar SDK's speak call (snake_case on the wire)."""

    text: str
    task_type: str
    task_mode: str = "sync"


class SpeakResponse(CamelModel):
    success: bool = True
    session_id: str
    message: str = "Avatar will speak the question"
    question_sent: str
    task_type: str
    timestamp: datetime
    status: SessionStatus
    entry: PromptEntry
    transcript: List[TranscriptEntry]
    speak_data: SpeakData


class CurrentQuestionResponse(CamelModel):
    success: bool = True
    session_id: str
    status: SessionStatus
    current_question: Optional[PromptEntry] = None
    transcript: List[TranscriptEntry]


class RecordResponseResponse(CamelModel):
    success: bool = True
    session_id: str
    message: str = "User response recorded"
    status: SessionStatus
    response: ResponseEntry
    total_responses: int
    transcript: List[TranscriptEntry]


class ResponsesResponse(CamelModel):
    success: bool = True
    session_id: str
    responses: List[ResponseEntry]
    last_response: Optional[ResponseEntry] = None
    total_responses: int
    transcript: List[TranscriptEntry]


class EndSessionResponse(CamelModel):
    success: bool = True
    message: str = "Interview session ended successfully"
    results: SessionResult
    notification: NotificationReceipt


class ResultsResponse(CamelModel):
    success: bool = True
    results: SessionResult


class WebhookResponse(CamelModel):
    success: bool = True
    message: str
    session_id: str
    notification: NotificationReceipt
