"""Session status transitions.

    created -> speaking <-> waiting -> completed

`completed` is the only terminal state. Repeated prompts (speaking ->
speaking) and a response with no pending prompt (created -> waiting) are
accepted: they are degraded runs, not errors.
"""

from enum import Enum
from typing import Dict

from exceptions.exceptions import SessionClosedError

from ..models.session_models import Session, SessionStatus


class SessionEvent(str, Enum):
    PROMPT = "prompt"
    RESPONSE = "response"
    TERMINATE = "terminate"


_OPEN_STATES = (SessionStatus.CREATED, SessionStatus.SPEAKING, SessionStatus.WAITING)

TRANSITIONS: Dict[SessionEvent, Dict[SessionStatus, SessionStatus]] = {
    SessionEvent.PROMPT: {state: SessionStatus.SPEAKING for state in _OPEN_STATES},
    SessionEvent.RESPONSE: {state: SessionStatus.WAITING for state in _OPEN_STATES},
    SessionEvent.TERMINATE: {state: SessionStatus.COMPLETED for state in _OPEN_STATES},
}


def next_status(session_id: str, current: SessionStatus, event: SessionEvent) -> SessionStatus:
    """Return the status reached from `current` on `event`.

    Raises SessionClosedError when `current` is terminal.
    """
    target = TRANSITIONS[event].get(current)
    if target is None:
        raise SessionClosedError(session_id)
    return target


def ensure_open(session: Session) -> None:
    """Raise SessionClosedError if the session no longer accepts writes."""
    if session.is_closed:
        raise SessionClosedError(session.id)


def advance(session: Session, event: SessionEvent) -> SessionStatus:
    """Apply `event` to the session in place and return the new status."""
    session.status = next_status(session.id, session.status, event)
    return session.status
