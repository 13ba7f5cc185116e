# cvchat_server/core/config.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Configuration
------------------------------
Central configuration for the chat server, including:

- app metadata and listening address
- filesystem paths (prompts, static front-end)
- completion provider (OpenAI Responses API) credentials and limits
- session memory limits (max turns, idle TTL, eviction sweep)
- optional background jobs (warm-up, self-ping keep-alive)

Values come from environment variables or a `.env` file at the project root.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cvchat_server.core.errors import ConfigurationFatal

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

# This file is: <root>/cvchat_server/core/config.py
PACKAGE_DIR: Path = Path(__file__).resolve().parents[1]   # .../cvchat_server
ROOT_DIR: Path = PACKAGE_DIR.parent                       # project root

PROMPTS_DIR: Path = PACKAGE_DIR / "prompts"
STATIC_DIR: Path = ROOT_DIR / "public"


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """
    Global configuration for the chat server.

    Instantiated once at import time as `settings`. Tests and embedders can
    build their own instance and hand it to `create_app(settings=...)`.
    """

    model_config = SettingsConfigDict(
        env_file=ROOT_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App / server basics -----------------------------------------------
    app_name: str = "CV Chat Server"
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 3000

    # --- Filesystem paths ---------------------------------------------------
    prompts_dir: Path = PROMPTS_DIR
    static_dir: Path = STATIC_DIR

    cors_allow_origins: List[str] = ["*"]

    # --- Completion provider (OpenAI Responses API) -------------------------
    # ENV: OPENAI_API_KEY=sk-...
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for the completion provider (env: OPENAI_API_KEY).",
    )
    openai_model: str = "gpt-4o-mini"
    provider_base_url: str = "https://api.openai.com/v1/responses"

    # Upper bound (seconds) for one provider call, including the HTTP round-trip.
    provider_timeout_s: float = 30.0

    # Text the user gets when the provider fails or returns nothing usable.
    fallback_reply: str = "AI returned no text"

    # --- Session memory -----------------------------------------------------
    max_history_turns: int = Field(default=6, ge=1)
    session_ttl_s: float = Field(default=30 * 60, gt=0)
    eviction_interval_s: float = Field(default=10 * 60, gt=0)

    # What to do with a client-supplied sessionId we do not know:
    #   start_fresh -> create a new session under that id
    #   reject      -> answer 404 so the client drops its stale id
    unknown_session_policy: Literal["start_fresh", "reject"] = "start_fresh"

    # Hard cap for user text accepted into the prompt.
    max_user_chars: int = Field(default=4000, ge=1)

    # --- Background jobs ----------------------------------------------------
    # Warm-up priming call every N seconds (0 disables the schedule;
    # GET /api/warm still works on demand).
    warmup_interval_s: float = Field(default=0.0, ge=0)

    # Self-ping keep-alive for hosts that idle out free instances.
    public_base_url: Optional[str] = None
    keepalive_interval_s: float = Field(default=4 * 60, gt=0)

    def require_credentials(self) -> None:
        """Raise ConfigurationFatal if the provider credential is missing."""
        if not self.openai_api_key or not self.openai_api_key.strip():
            raise ConfigurationFatal(
                "OPENAI_API_KEY is not set. Add it to the environment or .env file."
            )


# Single global settings instance used by the rest of the app.
settings = Settings()
