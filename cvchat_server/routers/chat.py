# cvchat_server/routers/chat.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — /api/chat router
---------------------------------
Main endpoint called by the website's chat widget.

Flow:
  HTTP POST /api/chat  {"message": "...", "sessionId"?: "..."}
    -> ChatOrchestrator.handle_chat()
       - rejects empty messages (400) before touching any session
       - resolves / creates the session
       - asks the completion provider, falling back to a fixed reply
    -> {"reply": "...", "sessionId": "...", "historyLength": n}
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cvchat_server.core.errors import InvalidRequest
from cvchat_server.core.orchestrator import ChatOrchestrator
from cvchat_server.models.chat_request import ChatRequest
from cvchat_server.models.chat_response import ChatResponse, ErrorResponse
from cvchat_server.routers.deps import get_orchestrator

router = APIRouter(prefix="/api", tags=["chat"])
logger = logging.getLogger(__name__)


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat_endpoint(
    payload: Optional[ChatRequest] = None,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    """
    Answer one chat message.

    - Missing / empty message      -> 400 {"error": "No message provided"}
    - Provider failure or timeout  -> 200 with the fallback reply
    - Anything unexpected          -> 500 {"error": "Internal server error"}
    """
    message = payload.message if payload is not None else None
    session_id = payload.session_id if payload is not None else None

    logger.info("[/api/chat] session_id=%s", session_id)
    logger.debug("[/api/chat] message=%r", message)

    try:
        result = await orchestrator.handle_chat(message, session_id)
    except InvalidRequest as exc:
        logger.info("[/api/chat] rejected (%d): %s", exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
    except Exception:  # noqa: BLE001
        logger.exception("Unhandled exception in /api/chat endpoint")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    logger.info(
        "[/api/chat] session_id=%s history=%d degraded=%s",
        result.session_id,
        result.history_length,
        result.degraded,
    )
    return ChatResponse.from_result(result)
