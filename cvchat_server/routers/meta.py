# cvchat_server/routers/meta.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — health and warm-up endpoints
---------------------------------------------
    GET /api/ping -> {"status": "online", "time": <epoch-ms>}
    GET /api/warm -> {"warmed": bool, "error"?: str}
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends

from cvchat_server.core.orchestrator import ChatOrchestrator
from cvchat_server.models.status_models import PingResponse, WarmResponse
from cvchat_server.routers.deps import get_orchestrator

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/ping", response_model=PingResponse)
async def ping() -> PingResponse:
    """Liveness probe; also the target of the self-ping keep-alive."""
    return PingResponse(time=int(time.time() * 1000))


@router.get("/warm", response_model=WarmResponse, response_model_exclude_none=True)
async def warm(
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> WarmResponse:
    """Prime the completion provider so the first real chat is not slow."""
    result = await orchestrator.warm_up()
    return WarmResponse(warmed=result.warmed, error=result.error)
