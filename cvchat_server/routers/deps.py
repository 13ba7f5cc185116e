# cvchat_server/routers/deps.py
# -*- coding: utf-8 -*-
"""
FastAPI dependencies that hand routers the objects built by create_app().
"""

from __future__ import annotations

from fastapi import Request

from cvchat_server.core.config import Settings
from cvchat_server.core.orchestrator import ChatOrchestrator
from cvchat_server.runtime_state import SessionStore


def get_orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
