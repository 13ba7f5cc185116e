# cvchat_server/main.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — FastAPI application entrypoint
-----------------------------------------------
This file wires everything together:

- Sets up central logging.
- Refuses to build the app without OPENAI_API_KEY (ConfigurationFatal).
- Builds the process-wide SessionStore, the completion provider and the
  ChatOrchestrator, and stores them on `app.state`.
- Adds CORS (the front-end may be served from another origin).
- Mounts routers:
    * /api/chat           (POST) → chat with session memory
    * /api/ping, /api/warm (GET) → health + provider warm-up
    * /api/status, /api/sessions/{id} → read-only views, session reset
- Serves the static front-end from STATIC_DIR when it exists.
- Lifespan starts the background jobs (idle-session eviction, optional
  warm-up, optional self-ping) and cancels them on shutdown.

Typical run command (dev):

    uvicorn cvchat_server.main:app --host 0.0.0.0 --port 3000 --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from functools import partial
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from cvchat_server import __version__
from cvchat_server.core.config import Settings, settings
from cvchat_server.core.errors import ConfigurationFatal
from cvchat_server.core.keepalive import self_ping
from cvchat_server.core.orchestrator import ChatOrchestrator
from cvchat_server.core.scheduler import PeriodicTask
from cvchat_server.providers import CompletionProvider, OpenAIResponsesProvider
from cvchat_server.routers.chat import router as chat_router
from cvchat_server.routers.meta import router as meta_router
from cvchat_server.routers.status import router as status_router
from cvchat_server.runtime_state import SessionStore
from cvchat_server.utils import get_logger, setup_logging

logger = get_logger(__name__)


def _build_background_tasks(
    cfg: Settings,
    store: SessionStore,
    orchestrator: ChatOrchestrator,
) -> List[PeriodicTask]:
    async def evict_idle_sessions() -> None:
        evicted = store.evict_idle()
        if evicted:
            logger.info("Evicted %d idle session(s); %d active", evicted, len(store))

    tasks = [
        PeriodicTask("session-eviction", cfg.eviction_interval_s, evict_idle_sessions),
    ]

    if cfg.warmup_interval_s > 0:
        tasks.append(
            PeriodicTask(
                "provider-warmup",
                cfg.warmup_interval_s,
                orchestrator.warm_up,
                run_immediately=True,
            )
        )

    if cfg.public_base_url:
        tasks.append(
            PeriodicTask(
                "keepalive-ping",
                cfg.keepalive_interval_s,
                partial(self_ping, cfg.public_base_url),
            )
        )

    return tasks


def create_app(
    app_settings: Optional[Settings] = None,
    *,
    provider: Optional[CompletionProvider] = None,
    store: Optional[SessionStore] = None,
) -> FastAPI:
    """
    Application factory.

    Parameters
    ----------
    app_settings:
        Settings to use (defaults to the global `settings`).
    provider:
        Completion provider override (tests pass a fake).
    store:
        Session store override.

    Raises
    ------
    ConfigurationFatal
        If OPENAI_API_KEY is missing.
    """
    cfg = app_settings if app_settings is not None else settings
    setup_logging(debug=cfg.debug)

    try:
        cfg.require_credentials()
    except ConfigurationFatal as exc:
        logger.critical("Refusing to start: %s", exc)
        raise

    if store is None:
        store = SessionStore(
            max_history_turns=cfg.max_history_turns,
            ttl=timedelta(seconds=cfg.session_ttl_s),
        )
    if provider is None:
        provider = OpenAIResponsesProvider.from_settings(cfg)
    orchestrator = ChatOrchestrator.from_settings(cfg, store, provider)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tasks = _build_background_tasks(cfg, store, orchestrator)
        for task in tasks:
            task.start()
        app.state.background_tasks = tasks
        logger.info(
            "%s ready (env=%s, model=%s, max_turns=%d, ttl=%.0fs)",
            cfg.app_name,
            cfg.environment,
            cfg.openai_model,
            cfg.max_history_turns,
            cfg.session_ttl_s,
        )
        try:
            yield
        finally:
            for task in tasks:
                await task.stop()
            provider.close()
            logger.info("%s stopped", cfg.app_name)

    app = FastAPI(
        title=cfg.app_name,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.session_store = store
    app.state.provider = provider
    app.state.orchestrator = orchestrator
    app.state.background_tasks = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Invalid request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    app.include_router(chat_router)
    app.include_router(meta_router)
    app.include_router(status_router)

    index_file = cfg.static_dir / "index.html"

    @app.get("/", include_in_schema=False)
    async def root():
        """Front-end entry page, or a small banner when no front-end is deployed."""
        if index_file.is_file():
            return FileResponse(index_file)
        return {
            "name": cfg.app_name,
            "environment": cfg.environment,
            "message": "CV chat server is running.",
        }

    # Mounted last so the API routes above take precedence.
    if cfg.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=cfg.static_dir), name="static")
    else:
        logger.info("No static directory at %s; serving API only.", cfg.static_dir)

    logger.info("FastAPI app created (env=%s)", cfg.environment)
    return app


# ASGI app for uvicorn
app = create_app()
