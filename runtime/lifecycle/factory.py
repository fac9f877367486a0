"""SessionFactory: creates new interview sessions and registers them."""

import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Callable, Optional

from exceptions.exceptions import InternalError, SessionIdCollision

from ..models.session_models import Session, SessionConfig, SessionStatus
from ..store.session_store import SessionStore


logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LENGTH = 9


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_session_id(now: datetime) -> str:
    """Build an id like `interview_1718000000000_k3j9x0a1b`."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"interview_{int(now.timestamp() * 1000)}_{suffix}"


class SessionFactory:
    """Creates sessions in the `created` state and inserts them into the store.

    Parameters
    ----------
    store:
        Store that receives the new record.
    clock:
        Returns the current UTC time; injectable for tests.
    id_generator:
        Builds a candidate id from the creation time. On an actual
        collision the factory asks for a new one, up to `max_attempts`.
    """

    def __init__(
        self,
        store: SessionStore,
        clock: Callable[[], datetime] = utc_now,
        id_generator: Callable[[datetime], str] = generate_session_id,
        max_attempts: int = 5,
    ) -> None:
        self.store = store
        self.clock = clock
        self.id_generator = id_generator
        self.max_attempts = max_attempts

    def create(self, config: Optional[SessionConfig] = None) -> Session:
        """Create, register and return a snapshot of a new session."""
        config = config or SessionConfig()
        for attempt in range(1, self.max_attempts + 1):
            now = self.clock()
            session = Session(
                id=self.id_generator(now),
                status=SessionStatus.CREATED,
                created_at=now,
                last_activity=now,
                config=config,
            )
            snapshot = session.model_copy(deep=True)
            try:
                self.store.insert(session)
            except SessionIdCollision:
                logger.warning(
                    "[SESSION] id collision on attempt %d for session_id=%s",
                    attempt,
                    session.id,
                )
                continue

            logger.info(
                "[SESSION] created session_id=%s avatar_id=%s language=%s",
                session.id,
                config.avatar_id,
                config.language,
            )
            return snapshot

        raise InternalError(
            f"Could not allocate a unique session id after {self.max_attempts} attempts"
        )
