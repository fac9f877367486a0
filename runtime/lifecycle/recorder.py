"""TranscriptRecorder: appends avatar prompts and candidate responses.

Entries are ordered by arrival at the recorder (under the session lock),
not by the wall-clock timestamp they carry. All validation happens before
the first mutation, so a rejected call leaves the session untouched.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from exceptions.exceptions import InvalidInputError

from ..models.session_models import NO_RESPONSE_PLACEHOLDER, PromptEntry, ResponseEntry
from ..store.session_store import SessionStore
from .factory import utc_now
from .status_machine import SessionEvent, advance, ensure_open


logger = logging.getLogger(__name__)


class TranscriptRecorder:
    def __init__(self, store: SessionStore, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self.clock = clock

    def record_prompt(
        self,
        session_id: str,
        text: str,
        task_type: str = "repeat",
        question_type: str = "interview",
    ) -> PromptEntry:
        """Append an avatar prompt and make it the current question.

        Raises
        ------
        InvalidInputError
            If `text` is empty.
        SessionNotFoundError
            If the session does not exist.
        SessionClosedError
            If the session is already completed.
        """
        if not text or not text.strip():
            raise InvalidInputError("text is required")

        with self.store.locked(session_id) as session:
            ensure_open(session)
            entry = PromptEntry(
                text=text,
                timestamp=self.clock(),
                task_type=task_type,
                question_type=question_type,
            )
            session.transcript.append(entry)
            session.current_question = entry
            session.last_activity = entry.timestamp
            status = advance(session, SessionEvent.PROMPT)
            position = len(session.transcript)

        logger.info(
            "[SESSION] prompt #%d recorded session_id=%s status=%s task_type=%s",
            position,
            session_id,
            status.value,
            task_type,
        )
        return entry

    def record_response(
        self,
        session_id: str,
        text: Optional[str],
        response_type: str = "voice",
        confidence: Optional[float] = None,
        duration: Optional[float] = None,
    ) -> ResponseEntry:
        """Append a candidate response, correlated to the current question.

        An empty or missing `text` is stored as NO_RESPONSE_PLACEHOLDER.

        Raises
        ------
        SessionNotFoundError
            If the session does not exist.
        SessionClosedError
            If the session is already completed.
        """
        if not text or not text.strip():
            text = NO_RESPONSE_PLACEHOLDER

        with self.store.locked(session_id) as session:
            ensure_open(session)
            pending = session.current_question
            entry = ResponseEntry(
                text=text,
                timestamp=self.clock(),
                response_type=response_type,
                confidence=confidence,
                duration=duration,
                correlated_prompt_timestamp=pending.timestamp if pending else None,
            )
            session.transcript.append(entry)
            session.responses.append(entry)
            session.last_activity = entry.timestamp
            status = advance(session, SessionEvent.RESPONSE)
            total_responses = len(session.responses)

        if pending is None:
            logger.warning(
                "[SESSION] response with no pending prompt session_id=%s", session_id
            )
        logger.info(
            "[SESSION] response #%d recorded session_id=%s status=%s response_type=%s",
            total_responses,
            session_id,
            status.value,
            response_type,
        )
        return entry
