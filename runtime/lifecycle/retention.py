"""RetentionManager: deferred eviction of completed sessions.

Each completed session gets one asyncio task that sleeps for the retention
window and then removes the whole record from the store. Timers are owned
here (not fire-and-forget) so the server can cancel them on shutdown; no
session operation cancels them.

Removal is best-effort: if the process exits first the record is simply
gone with the rest of the in-memory store.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from configs.settings import DEFAULT_RETENTION_SECONDS

from ..store.session_store import SessionStore


logger = logging.getLogger(__name__)


class RetentionManager:
    def __init__(
        self,
        store: SessionStore,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
    ) -> None:
        self.store = store
        self.retention_seconds = retention_seconds
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> List[str]:
        """Session ids with an eviction still scheduled."""
        return [sid for sid, task in self._tasks.items() if not task.done()]

    def schedule(self, session_id: str, delay: Optional[float] = None) -> asyncio.Task:
        """Schedule removal of `session_id` after `delay` seconds.

        Must be called from a running event loop. Scheduling the same id
        twice keeps the first timer.
        """
        existing = self._tasks.get(session_id)
        if existing is not None and not existing.done():
            return existing

        delay = self.retention_seconds if delay is None else delay
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._expire(session_id, delay))
        self._tasks[session_id] = task
        task.add_done_callback(lambda done: self._forget(session_id, done))

        logger.info(
            "[RETENTION] session_id=%s scheduled for removal in %.0fs",
            session_id,
            delay,
        )
        return task

    def _forget(self, session_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(session_id) is task:
            del self._tasks[session_id]

    async def _expire(self, session_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        # The removal itself is the one action allowed to log and carry on.
        try:
            removed = self.store.remove(session_id)
        except Exception:
            logger.exception("[RETENTION] failed to remove session_id=%s", session_id)
            return

        if removed:
            logger.info("[RETENTION] session_id=%s cleaned up from memory", session_id)
        else:
            logger.info("[RETENTION] session_id=%s was already gone", session_id)

    async def shutdown(self) -> None:
        """Cancel every pending timer and wait for them to finish."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("[RETENTION] cancelled %d pending removal(s)", len(tasks))
        self._tasks.clear()
