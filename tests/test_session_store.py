"""Tests for the in-memory SessionStore."""

import threading
from datetime import timedelta

import pytest

from exceptions.exceptions import SessionIdCollision, SessionNotFoundError
from runtime.models.session_models import PromptEntry, Session, SessionStatus

from conftest import START


def make_session(session_id: str = "interview_1_abc", created_at=START) -> Session:
    return Session(id=session_id, created_at=created_at, last_activity=created_at)


class TestInsertAndGet:
    def test_insert_then_get_returns_snapshot(self, store):
        store.insert(make_session())
        snapshot = store.get_session("interview_1_abc")
        assert snapshot is not None
        assert snapshot.id == "interview_1_abc"
        assert snapshot.status == SessionStatus.CREATED

    def test_get_unknown_returns_none(self, store):
        assert store.get_session("missing") is None

    def test_require_unknown_raises_not_found(self, store):
        with pytest.raises(SessionNotFoundError):
            store.require_session("missing")

    def test_collision_is_rejected_and_original_kept(self, store):
        original = make_session()
        store.insert(original)
        with store.locked(original.id) as live:
            live.status = SessionStatus.SPEAKING

        with pytest.raises(SessionIdCollision):
            store.insert(make_session())

        assert store.require_session(original.id).status == SessionStatus.SPEAKING
        assert len(store) == 1

    def test_snapshot_is_isolated_from_live_record(self, store):
        store.insert(make_session())
        snapshot = store.require_session("interview_1_abc")
        snapshot.transcript.append(PromptEntry(text="Q", timestamp=START))
        snapshot.status = SessionStatus.COMPLETED

        fresh = store.require_session("interview_1_abc")
        assert fresh.transcript == []
        assert fresh.status == SessionStatus.CREATED


class TestLockedAndRemove:
    def test_locked_unknown_raises(self, store):
        with pytest.raises(SessionNotFoundError):
            with store.locked("missing"):
                pass

    def test_remove_deletes_whole_record(self, store):
        store.insert(make_session())
        assert store.remove("interview_1_abc") is True
        assert "interview_1_abc" not in store
        assert store.get_session("interview_1_abc") is None

    def test_remove_absent_returns_false(self, store):
        assert store.remove("missing") is False

    def test_remove_waits_for_in_flight_holder(self, store):
        store.insert(make_session())
        entered = threading.Event()
        release = threading.Event()
        seen = []

        def reader():
            with store.locked("interview_1_abc") as session:
                entered.set()
                release.wait(timeout=2)
                seen.append(session.id)

        thread = threading.Thread(target=reader)
        thread.start()
        entered.wait(timeout=2)

        remover = threading.Thread(target=store.remove, args=("interview_1_abc",))
        remover.start()
        # Removal cannot complete while the reader holds the session lock.
        remover.join(timeout=0.1)
        assert remover.is_alive()
        assert "interview_1_abc" in store

        release.set()
        thread.join(timeout=2)
        remover.join(timeout=2)
        assert seen == ["interview_1_abc"]
        assert "interview_1_abc" not in store


class TestListSessions:
    def test_lists_snapshots_oldest_first(self, store):
        store.insert(make_session("b", created_at=START + timedelta(seconds=5)))
        store.insert(make_session("a", created_at=START))
        assert [s.id for s in store.list_sessions()] == ["a", "b"]

    def test_empty_store(self, store):
        assert store.list_sessions() == []
        assert len(store) == 0
