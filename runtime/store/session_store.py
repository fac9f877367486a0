"""In-memory session storage for the interview runtime.

This is a keyed table of session_id -> Session and the only shared mutable
state in the process. Nothing is written to disk; a restart loses every
session.

Concurrency model:
- a table lock guards the dict itself (insert / remove / iteration)
- each session id has its own lock; every mutation of a session runs
  inside `locked(session_id)`, so updates to one session never interleave
  while different sessions proceed independently
- reads return deep-copied snapshots taken under the session lock, so a
  reader sees either the pre- or post-mutation record, never a torn one

Critical sections must stay short and must not perform I/O.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from exceptions.exceptions import SessionIdCollision, SessionNotFoundError

from ..models.session_models import Session


logger = logging.getLogger(__name__)


class SessionStore:
    """Thread-safe in-memory session store.

    Callers obtain a handle to a store instance explicitly (the server
    builds one and hands it to the coordinator); there is no module-level
    store.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._table_lock = threading.Lock()

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._table_lock:
            return session_id in self._sessions

    def insert(self, session: Session) -> None:
        """Add a new session.

        Raises
        ------
        SessionIdCollision
            If a session with the same id already exists. The existing
            record is never overwritten.
        """
        with self._table_lock:
            if session.id in self._sessions:
                raise SessionIdCollision(session.id)
            self._sessions[session.id] = session
            self._locks[session.id] = threading.Lock()

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._table_lock:
            lock = self._locks.get(session_id)
        if lock is None:
            raise SessionNotFoundError(session_id)
        return lock

    @contextmanager
    def locked(self, session_id: str) -> Iterator[Session]:
        """Yield the live session record while holding its lock.

        The record may have been removed between looking up the lock and
        acquiring it, so presence is re-checked under the lock.

        Raises
        ------
        SessionNotFoundError
            If the session does not exist.
        """
        lock = self._lock_for(session_id)
        with lock:
            with self._table_lock:
                session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            yield session

    def get_session(self, session_id: str) -> Optional[Session]:
        """Return a snapshot of the session, or None if it does not exist."""
        try:
            with self.locked(session_id) as session:
                return session.model_copy(deep=True)
        except SessionNotFoundError:
            return None

    def require_session(self, session_id: str) -> Session:
        """Return a snapshot of the session or raise SessionNotFoundError."""
        with self.locked(session_id) as session:
            return session.model_copy(deep=True)

    def list_sessions(self) -> List[Session]:
        """Return snapshots of every stored session, oldest first."""
        with self._table_lock:
            session_ids = list(self._sessions)
        snapshots = []
        for session_id in session_ids:
            snapshot = self.get_session(session_id)
            if snapshot is not None:
                snapshots.append(snapshot)
        snapshots.sort(key=lambda s: s.created_at)
        return snapshots

    def remove(self, session_id: str) -> bool:
        """Remove a whole session record.

        Waits for any in-flight read or mutation of that session to finish
        first. Returns False if the session was already gone.
        """
        try:
            lock = self._lock_for(session_id)
        except SessionNotFoundError:
            return False

        with lock:
            with self._table_lock:
                removed = self._sessions.pop(session_id, None)
                self._locks.pop(session_id, None)

        if removed is not None:
            logger.debug("[STORE] removed session_id=%s", session_id)
        return removed is not None
