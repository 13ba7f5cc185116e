"""Session store: FIFO trim, id allocation, idle eviction."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from cvchat_server.runtime_state import SessionStore, Turn


def _user(text: str) -> Turn:
    return Turn(role="user", content=text)


class TestGetOrCreate:

    def test_no_id_generates_fresh_unique_ids(self):
        store = SessionStore()
        ids = {store.get_or_create(None)[0] for _ in range(200)}
        assert len(ids) == 200
        assert len(store) == 200

    def test_known_id_returns_same_session(self):
        store = SessionStore()
        sid, _ = store.get_or_create(None)
        store.append_turn(sid, _user("hi"))
        again, session = store.get_or_create(sid)
        assert again == sid
        assert [t.content for t in session.turns] == ["hi"]
        assert len(store) == 1

    def test_unknown_id_creates_session_under_that_id(self):
        store = SessionStore()
        sid, session = store.get_or_create("client-chosen")
        assert sid == "client-chosen"
        assert session.turns == []
        assert store.has_session("client-chosen")

    def test_returned_session_is_a_snapshot(self):
        store = SessionStore()
        sid, session = store.get_or_create(None)
        session.turns.append(_user("sneaky"))
        assert store.get_history_as_messages(sid) == []


class TestAppendTurn:

    def test_fifo_trim_keeps_most_recent_in_order(self):
        for cap in (1, 2, 6, 8):
            store = SessionStore(max_history_turns=cap)
            sid, _ = store.get_or_create(None)
            for n in range(1, 25):
                store.append_turn(sid, _user(f"m{n}"))
                contents = [m["content"] for m in store.get_history_as_messages(sid)]
                assert len(contents) == min(n, cap)
                expected = [f"m{i}" for i in range(max(1, n - cap + 1), n + 1)]
                assert contents == expected

    def test_append_to_missing_session_is_noop(self):
        store = SessionStore()
        assert store.append_turn("ghost", _user("hello")) is False
        assert len(store) == 0
        assert store.get_session("ghost") is None

    def test_invalid_cap_rejected(self):
        with pytest.raises(ValueError):
            SessionStore(max_history_turns=0)

    def test_turns_are_immutable(self):
        turn = _user("fixed")
        with pytest.raises(ValidationError):
            turn.content = "changed"


class TestEviction:

    def test_idle_session_evicted_touched_session_survives(self, clock):
        store = SessionStore(ttl=timedelta(minutes=30), clock=clock)
        stale, _ = store.get_or_create(None)
        clock.advance(minutes=20)
        fresh, _ = store.get_or_create(None)
        clock.advance(minutes=15)

        assert store.evict_idle() == 1
        assert not store.has_session(stale)
        assert store.has_session(fresh)

    def test_access_refreshes_last_active(self, clock):
        store = SessionStore(ttl=timedelta(minutes=30), clock=clock)
        sid, _ = store.get_or_create(None)
        clock.advance(minutes=25)
        store.append_turn(sid, _user("still here"))
        clock.advance(minutes=25)
        assert store.evict_idle() == 0
        assert store.has_session(sid)

    def test_exactly_ttl_is_not_evicted(self, clock):
        store = SessionStore(ttl=timedelta(minutes=30), clock=clock)
        sid, _ = store.get_or_create(None)
        clock.advance(minutes=30)
        assert store.evict_idle() == 0
        clock.advance(seconds=1)
        assert store.evict_idle() == 1

    def test_explicit_now_and_ttl(self, clock):
        store = SessionStore(clock=clock)
        store.get_or_create("a")
        assert store.evict_idle(now=clock.now + timedelta(seconds=10), ttl=timedelta(seconds=5)) == 1
        assert len(store) == 0

    def test_evicted_id_can_be_reused_as_new_session(self, clock):
        store = SessionStore(ttl=timedelta(minutes=1), clock=clock)
        store.get_or_create("reuse-me")
        store.append_turn("reuse-me", _user("old"))
        clock.advance(minutes=2)
        store.evict_idle()

        sid, session = store.get_or_create("reuse-me")
        assert sid == "reuse-me"
        assert session.turns == []

    def test_last_active_never_moves_backwards(self, clock):
        store = SessionStore(clock=clock)
        sid, first = store.get_or_create(None)
        clock.advance(minutes=-5)
        _, second = store.get_or_create(sid)
        assert second.last_active == first.last_active


class TestMisc:

    def test_delete_session(self):
        store = SessionStore()
        sid, _ = store.get_or_create(None)
        assert store.delete_session(sid) is True
        assert store.delete_session(sid) is False

    def test_to_dict_is_json_ready(self):
        store = SessionStore()
        sid, _ = store.get_or_create(None)
        store.append_turn(sid, _user("hello"))
        data = store.to_dict()
        assert data[sid]["turns"][0]["content"] == "hello"
        assert isinstance(data[sid]["last_active"], str)
