# cvchat_server/models/status_models.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — meta / status payloads
---------------------------------------
Small response models for the health, warm-up and status endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PingResponse(BaseModel):
    status: Literal["online"] = "online"
    time: int = Field(..., description="Server time in epoch milliseconds.")


class WarmResponse(BaseModel):
    warmed: bool
    error: Optional[str] = None


class ServerStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_name: str = Field(..., alias="appName")
    environment: str
    model: str
    active_sessions: int = Field(..., alias="activeSessions")
    max_history_turns: int = Field(..., alias="maxHistoryTurns")
    session_ttl_s: float = Field(..., alias="sessionTtlS")
    unknown_session_policy: str = Field(..., alias="unknownSessionPolicy")


class TurnView(BaseModel):
    role: str
    content: str
    ts: datetime


class SessionView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    created_at: datetime = Field(..., alias="createdAt")
    last_active: datetime = Field(..., alias="lastActive")
    turns: List[TurnView]


class DeleteSessionResponse(BaseModel):
    deleted: bool
