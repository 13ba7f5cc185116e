# cvchat_server/routers/status.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — /api/status and /api/sessions routers
------------------------------------------------------
Read-only server snapshot plus per-session views:

    GET    /api/status              -> model, limits, active session count
    GET    /api/sessions/{id}       -> remembered turns for one session
    DELETE /api/sessions/{id}       -> forget a session ("new conversation")
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cvchat_server.core.config import Settings
from cvchat_server.models.chat_response import ErrorResponse
from cvchat_server.models.status_models import (
    DeleteSessionResponse,
    ServerStatus,
    SessionView,
    TurnView,
)
from cvchat_server.routers.deps import get_session_store, get_settings
from cvchat_server.runtime_state import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["status"])


@router.get("/status", response_model=ServerStatus)
async def server_status(
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> ServerStatus:
    return ServerStatus(
        app_name=settings.app_name,
        environment=settings.environment,
        model=settings.openai_model,
        active_sessions=len(store),
        max_history_turns=store.max_history_turns,
        session_ttl_s=store.ttl.total_seconds(),
        unknown_session_policy=settings.unknown_session_policy,
    )


@router.get(
    "/sessions/{session_id}",
    response_model=SessionView,
    responses={404: {"model": ErrorResponse}},
)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    session = store.get_session(session_id)
    if session is None:
        return JSONResponse(status_code=404, content={"error": "Unknown session"})

    return SessionView(
        session_id=session.session_id,
        created_at=session.created_at,
        last_active=session.last_active,
        turns=[TurnView(role=t.role, content=t.content, ts=t.ts) for t in session.turns],
    )


@router.delete("/sessions/{session_id}", response_model=DeleteSessionResponse)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> DeleteSessionResponse:
    deleted = store.delete_session(session_id)
    logger.info("[/api/sessions] delete %s -> %s", session_id, deleted)
    return DeleteSessionResponse(deleted=deleted)
