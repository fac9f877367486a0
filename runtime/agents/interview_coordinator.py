"""InterviewCoordinator implementation.

Responsible for:
- minting an avatar access token and creating the session record
- recording avatar prompts and candidate responses
- terminating a session: freezing results, scheduling eviction and
  notifying the external automation
- read-only views (status, results, session list)

Store mutations happen under the session lock inside the lifecycle
components. Token issuance and webhook delivery always run outside of
it, after the local state change is committed. A failed notification is
reported back in the outcome and never rolls the session back.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from configs.settings import DEFAULT_RETENTION_SECONDS
from core.api.avatar_client import AvatarTokenClient
from core.api.notification_client import (
    NotificationClient,
    NotificationReceipt,
    NotificationStatus,
)
from exceptions.exceptions import InvalidInputError

from ..lifecycle.factory import SessionFactory, utc_now
from ..lifecycle.recorder import TranscriptRecorder
from ..lifecycle.retention import RetentionManager
from ..lifecycle.statistics import build_result
from ..lifecycle.status_machine import SessionEvent, advance, ensure_open
from ..models.session_models import (
    CamelModel,
    PromptEntry,
    ResponseEntry,
    Session,
    SessionConfig,
    SessionResult,
    SessionSummary,
)
from ..store.session_store import SessionStore


logger = logging.getLogger(__name__)

DEFAULT_END_REASON = "interview_completed"


class CreationOutcome(CamelModel):
    session: Session
    access_token: str
    notification: NotificationReceipt


class TerminationOutcome(CamelModel):
    results: SessionResult
    notification: NotificationReceipt


class InterviewCoordinator:
    """Session lifecycle + collaborator wiring for the interview runtime.

    Parameters
    ----------
    session_store:
        Store holding every live and recently completed session.
    token_client:
        Issues avatar access tokens on session creation.
    notification_client:
        Delivers interview_started / interview_ended events.
    retention_seconds:
        How long a completed session stays readable before eviction.
    clock:
        Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        session_store: SessionStore,
        token_client: AvatarTokenClient,
        notification_client: NotificationClient,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.session_store = session_store
        self.token_client = token_client
        self.notification_client = notification_client
        self.clock = clock
        self.factory = SessionFactory(session_store, clock=clock)
        self.recorder = TranscriptRecorder(session_store, clock=clock)
        self.retention = RetentionManager(session_store, retention_seconds)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_session(
        self,
        config: Optional[SessionConfig] = None,
        *,
        candidate_info: Optional[Dict[str, Any]] = None,
        api_base_url: str = "",
    ) -> CreationOutcome:
        """Issue an access token, then create and announce a new session.

        If token issuance fails no session is created and the
        UpstreamFailureError propagates.
        """
        access_token = await self.token_client.issue_access_token()
        session = self.factory.create(config)
        receipt = await self._notify(
            session.id,
            self.notification_client.notify_started(
                session,
                candidate_info=candidate_info,
                api_base_url=api_base_url,
            ),
            "interview_started",
        )
        return CreationOutcome(
            session=session, access_token=access_token, notification=receipt
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_prompt(
        self,
        session_id: str,
        text: str,
        task_type: str = "repeat",
        question_type: str = "interview",
    ) -> PromptEntry:
        return self.recorder.record_prompt(
            session_id, text, task_type=task_type, question_type=question_type
        )

    def record_response(
        self,
        session_id: str,
        text: Optional[str],
        response_type: str = "voice",
        confidence: Optional[float] = None,
        duration: Optional[float] = None,
    ) -> ResponseEntry:
        return self.recorder.record_response(
            session_id,
            text,
            response_type=response_type,
            confidence=confidence,
            duration=duration,
        )

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    async def terminate(
        self,
        session_id: str,
        reason: str = DEFAULT_END_REASON,
        *,
        candidate_info: Optional[Dict[str, Any]] = None,
    ) -> TerminationOutcome:
        """Complete the session, freeze its results and notify downstream.

        Raises SessionNotFoundError if the session is absent and
        SessionClosedError if it is already completed; in both cases
        nothing changes.
        """
        reason = reason or DEFAULT_END_REASON
        with self.session_store.locked(session_id) as session:
            ensure_open(session)
            ended_at = self.clock()
            result = build_result(session, reason, ended_at)
            session.ended_at = ended_at
            session.end_reason = reason
            session.results = result
            session.last_activity = ended_at
            advance(session, SessionEvent.TERMINATE)

        logger.info(
            "[SESSION] completed session_id=%s reason=%s duration=%s prompts=%d responses=%d",
            session_id,
            reason,
            result.duration.formatted,
            result.statistics.total_prompts,
            result.statistics.total_responses,
        )

        self.retention.schedule(session_id)
        receipt = await self._notify(
            session_id,
            self.notification_client.notify_ended(result, candidate_info=candidate_info),
            "interview_ended",
        )
        return TerminationOutcome(results=result, notification=receipt)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_session(self, session_id: str) -> Session:
        """Snapshot of the session; raises SessionNotFoundError if absent."""
        return self.session_store.require_session(session_id)

    def get_results(self, session_id: str) -> SessionResult:
        """Frozen results of a completed session."""
        session = self.session_store.require_session(session_id)
        if session.results is None:
            raise InvalidInputError("Session is not completed yet")
        return session.results

    def list_sessions(self) -> List[SessionSummary]:
        return [
            SessionSummary(id=s.id, status=s.status, created_at=s.created_at)
            for s in self.session_store.list_sessions()
        ]

    # ------------------------------------------------------------------
    # Manual webhook triggers
    # ------------------------------------------------------------------

    async def send_started_notification(
        self,
        session_id: str,
        *,
        candidate_info: Optional[Dict[str, Any]] = None,
        avatar_config: Optional[Dict[str, Any]] = None,
        api_base_url: str = "",
        webhook_url: Optional[str] = None,
    ) -> NotificationReceipt:
        session = self.session_store.require_session(session_id)
        return await self._notify(
            session_id,
            self.notification_client.notify_started(
                session,
                candidate_info=candidate_info,
                avatar_config=avatar_config,
                api_base_url=api_base_url,
                webhook_url=webhook_url,
            ),
            "interview_started",
        )

    async def send_ended_notification(
        self,
        session_id: str,
        *,
        candidate_info: Optional[Dict[str, Any]] = None,
        webhook_url: Optional[str] = None,
    ) -> NotificationReceipt:
        result = self.get_results(session_id)
        return await self._notify(
            session_id,
            self.notification_client.notify_ended(
                result, candidate_info=candidate_info, webhook_url=webhook_url
            ),
            "interview_ended",
        )

    async def _notify(self, session_id: str, delivery, event: str) -> NotificationReceipt:
        # Local state is already committed; a crash in delivery becomes a
        # failed receipt rather than an error for the whole operation.
        try:
            return await delivery
        except Exception as e:
            logger.exception(
                "[WEBHOOK] unexpected error delivering %s for session_id=%s",
                event,
                session_id,
            )
            return NotificationReceipt(
                event=event,
                status=NotificationStatus.FAILED,
                detail=f"{type(e).__name__}: {e}",
            )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def shutdown(self) -> None:
        await self.retention.shutdown()
