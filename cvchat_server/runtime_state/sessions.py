# cvchat_server/runtime_state/sessions.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Runtime Session State
--------------------------------------

In-memory session store for the chat server.

Purpose
~~~~~~~
- Track per-session conversation history so the website assistant can hold
  multi-turn conversations without mixing different visitors.
- Forget sessions that have been idle for longer than the TTL.

Design notes
~~~~~~~~~~~~
- Nothing is persisted; a restart forgets every session.
- One store per process. Sessions are NOT shared between workers or
  instances, so scaling out loses continuity unless a shared store is added.
- Every mutation goes through one store-wide lock, so the periodic eviction
  sweep never races an append.
- History is truncated FIFO to `max_history_turns`.
- Callers only ever receive copies; the live SessionData never leaves here.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from cvchat_server.utils import get_logger


logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class Turn(BaseModel):
    """One message in the conversation history."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    ts: datetime = Field(default_factory=_utcnow)


class SessionData(BaseModel):
    """
    Per-session state.

    Attributes
    ----------
    session_id:
        Opaque key for the session (generated here or supplied by the client).
    created_at:
        When this session was first created.
    last_active:
        Last time the session was touched (used for idle eviction).
    turns:
        Recent conversation turns, oldest first.
    """

    session_id: str
    created_at: datetime = Field(default_factory=_utcnow)
    last_active: datetime = Field(default_factory=_utcnow)
    turns: List[Turn] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Session store implementation
# ---------------------------------------------------------------------------


class SessionStore:
    """
    Thread-safe in-memory session store.

    Parameters
    ----------
    max_history_turns:
        Maximum number of turns (user + assistant) to keep per session.
        Older turns are dropped from the front.
    ttl:
        Idle time after which `evict_idle()` removes a session.
    clock:
        Returns "now" as an aware datetime. Tests pass a fake clock.
    """

    def __init__(
        self,
        max_history_turns: int = 6,
        ttl: timedelta = timedelta(minutes=30),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_history_turns < 1:
            raise ValueError("max_history_turns must be >= 1")
        self.max_history_turns = max_history_turns
        self.ttl = ttl
        self._clock = clock
        self._sessions: Dict[str, SessionData] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Internal helpers (lock must be held)
    # ------------------------------------------------------------------

    def _new_session_id(self) -> str:
        while True:
            candidate = uuid.uuid4().hex
            if candidate not in self._sessions:
                return candidate

    def _touch(self, session: SessionData) -> None:
        now = self._clock()
        if now > session.last_active:
            session.last_active = now

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_or_create(
        self, session_id: Optional[str] = None
    ) -> Tuple[str, SessionData]:
        """
        Resolve a session, creating it when needed.

        - known id   -> that session
        - unknown id -> fresh session stored under the given id
        - no id      -> fresh session under a newly generated unique id

        Updates `last_active` and returns (session_id, snapshot).
        """
        with self._lock:
            if session_id is None:
                session_id = self._new_session_id()

            session = self._sessions.get(session_id)
            if session is None:
                logger.info("[SessionStore] Creating new session %s", session_id)
                now = self._clock()
                session = SessionData(
                    session_id=session_id, created_at=now, last_active=now
                )
                self._sessions[session_id] = session
            else:
                self._touch(session)

            return session_id, session.model_copy(deep=True)

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get_session(self, session_id: str) -> Optional[SessionData]:
        """Return a snapshot of the session, or None if not found."""
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session is not None else None

    def append_turn(self, session_id: str, turn: Turn) -> bool:
        """
        Append a turn and trim history to at most `max_history_turns`.

        Returns False (and changes nothing) if the session no longer exists,
        e.g. because it was evicted while a request was in flight.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                logger.debug(
                    "[SessionStore] append_turn on missing session %s ignored",
                    session_id,
                )
                return False

            session.turns.append(turn)
            overflow = len(session.turns) - self.max_history_turns
            if overflow > 0:
                del session.turns[:overflow]
            self._touch(session)
            return True

    def get_history_as_messages(self, session_id: str) -> List[Dict[str, str]]:
        """
        Return history in chat message format:

            [{"role": "user", "content": "..."}, ...]

        If no session exists, returns an empty list.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return []
            return [{"role": t.role, "content": t.content} for t in session.turns]

    def delete_session(self, session_id: str) -> bool:
        """Delete a session. Returns True if something was removed."""
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                return False
            logger.info("[SessionStore] Deleted session %s", session_id)
            return True

    def evict_idle(
        self,
        now: Optional[datetime] = None,
        ttl: Optional[timedelta] = None,
    ) -> int:
        """
        Remove sessions idle for longer than `ttl` (default: the store TTL).

        Returns
        -------
        int
            Number of evicted sessions.
        """
        ttl = self.ttl if ttl is None else ttl
        with self._lock:
            now = self._clock() if now is None else now
            expired = [
                sid
                for sid, sess in self._sessions.items()
                if now - sess.last_active > ttl
            ]
            for sid in expired:
                logger.info(
                    "[SessionStore] Evicting idle session %s (last_active=%s)",
                    sid,
                    self._sessions[sid].last_active,
                )
                del self._sessions[sid]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def to_dict(self) -> Dict[str, Any]:
        """Return all sessions as plain JSON-ready data (for debugging / admin)."""
        with self._lock:
            return {
                sid: sess.model_dump(mode="json")
                for sid, sess in self._sessions.items()
            }
