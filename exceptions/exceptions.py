"""
Custom exceptions for the interview avatar runtime.

Every error that crosses the HTTP boundary carries a stable `kind`
(see ErrorKind) and a human-readable `detail`. They are used across:

  - runtime/store/
  - runtime/lifecycle/
  - runtime/agents/
  - runtime/api/
  - core/api/

Placing them at the project root (exceptions/) avoids circular imports
and keeps exception types consistent across modules.
"""

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    NOT_FOUND = "NotFound"
    SESSION_CLOSED = "SessionClosed"
    UPSTREAM_FAILURE = "UpstreamFailure"
    INTERNAL = "Internal"


class InterviewError(Exception):
    """Base class for all runtime errors reported to callers."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class InvalidInputError(InterviewError):
    """
    Raised when a required field is missing or malformed, e.g. no
    sessionId supplied or an empty prompt text.
    """

    kind = ErrorKind.INVALID_INPUT


class SessionNotFoundError(InterviewError):
    """Raised when no session exists for the given id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionClosedError(InterviewError):
    """
    Raised when a mutation is attempted on a completed session.

    The session record is left untouched.
    """

    kind = ErrorKind.SESSION_CLOSED

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session is already completed: {session_id}")


class UpstreamFailureError(InterviewError):
    """
    Raised when the avatar token API or a notification webhook fails.

    `status_code` holds the upstream HTTP status when one was received.
    """

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, detail: str, status_code=None):
        self.status_code = status_code
        super().__init__(detail)


class InternalError(InterviewError):
    """Raised on an unexpected fault inside the session store."""

    kind = ErrorKind.INTERNAL


class SessionIdCollision(InternalError):
    """
    Raised by the store when an insert would overwrite an existing id.

    The factory catches this and regenerates the id.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session id already in use: {session_id}")
