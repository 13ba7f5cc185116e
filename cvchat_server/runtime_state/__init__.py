"""
Runtime state package for the CV chat server.

Tracks per-session conversation memory so visitors can hold multi-turn
conversations without mixing with each other.

Typical usage (the app factory builds one store and hands it to the
orchestrator):

    from cvchat_server.runtime_state import SessionStore, Turn

    store = SessionStore(max_history_turns=6, ttl=timedelta(minutes=30))
    session_id, session = store.get_or_create(None)
    store.append_turn(session_id, Turn(role="user", content="Hello"))
    store.evict_idle()
"""

from .sessions import (
    Turn,
    SessionData,
    SessionStore,
)

__all__ = [
    "Turn",
    "SessionData",
    "SessionStore",
]
