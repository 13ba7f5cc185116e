# cvchat_server/core/types.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Shared result types
------------------------------------
- ChatResult : outcome of one chat turn (what the router sends back)
- WarmResult : outcome of a warm-up priming call
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ChatResult:
    """
    Attributes
    ----------
    reply:
        Text shown to the user (model output or the fallback string).
    session_id:
        Session the turn was stored under; clients send it back next time.
    history_length:
        Number of turns held for the session after this exchange.
    degraded:
        True if the provider failed and `reply` is the fallback.
    """
    reply: str
    session_id: str
    history_length: int
    degraded: bool = False


@dataclass(frozen=True)
class WarmResult:
    warmed: bool
    error: Optional[str] = None
