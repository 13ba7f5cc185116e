# cvchat_server/core/orchestrator.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Chat orchestration
-----------------------------------
Turns one inbound user message into one model reply with bounded context:

    message, sessionId?
      -> sanitize (empty -> InvalidRequest, nothing stored)
      -> resolve / create session
      -> append user turn (FIFO trim happens in the store)
      -> system prompt + recent turns -> completion provider (with timeout)
      -> provider failure of any kind -> fallback reply, logged
      -> append assistant turn
      -> ChatResult(reply, session_id, ...)

Requests for the same session are serialized by a per-session asyncio.Lock,
so two tabs sharing a sessionId cannot interleave their turns. Requests for
different sessions run concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Literal, Optional, Tuple

from cvchat_server.core.config import Settings
from cvchat_server.core.errors import InvalidRequest, ProviderUnavailable, UnknownSession
from cvchat_server.core.prompting import build_conversation_prompt, load_system_prompt
from cvchat_server.core.safety import sanitize_user_text
from cvchat_server.core.types import ChatResult, WarmResult
from cvchat_server.providers.base import CompletionProvider
from cvchat_server.runtime_state import SessionStore, Turn
from cvchat_server.utils import Stopwatch

logger = logging.getLogger(__name__)

WARMUP_PROMPT = "hi"

UnknownSessionPolicy = Literal["start_fresh", "reject"]


class ChatOrchestrator:
    """
    Parameters
    ----------
    store:
        Session store shared by every request in this process.
    provider:
        Completion provider used for replies and warm-up calls.
    model:
        Model identifier passed to the provider.
    system_prompt:
        Fixed instruction placed before the conversation.
    fallback_reply:
        Text returned when the provider fails.
    provider_timeout_s:
        Upper bound for a single provider call.
    max_user_chars:
        Cap for user text after sanitizing.
    unknown_session_policy:
        "start_fresh" creates a session under an unknown client id,
        "reject" raises UnknownSession.
    """

    def __init__(
        self,
        store: SessionStore,
        provider: CompletionProvider,
        *,
        model: str,
        system_prompt: str,
        fallback_reply: str = "AI returned no text",
        provider_timeout_s: float = 30.0,
        max_user_chars: int = 4000,
        unknown_session_policy: UnknownSessionPolicy = "start_fresh",
    ) -> None:
        self.store = store
        self.provider = provider
        self.model = model
        self.system_prompt = system_prompt
        self.fallback_reply = fallback_reply
        self.provider_timeout_s = provider_timeout_s
        self.max_user_chars = max_user_chars
        self.unknown_session_policy = unknown_session_policy
        self._session_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: SessionStore,
        provider: CompletionProvider,
    ) -> "ChatOrchestrator":
        return cls(
            store,
            provider,
            model=settings.openai_model,
            system_prompt=load_system_prompt(settings.prompts_dir),
            fallback_reply=settings.fallback_reply,
            provider_timeout_s=settings.provider_timeout_s,
            max_user_chars=settings.max_user_chars,
            unknown_session_policy=settings.unknown_session_policy,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._session_locks[session_id] = lock
        return lock

    def _resolve_session(self, session_id: Optional[str]) -> str:
        requested = session_id.strip() if isinstance(session_id, str) else None
        if not requested:
            new_id, _ = self.store.get_or_create(None)
            return new_id

        if not self.store.has_session(requested):
            if self.unknown_session_policy == "reject":
                logger.info("Rejecting unknown sessionId %s", requested)
                raise UnknownSession(requested)
            logger.info(
                "Unknown sessionId %s supplied (expired or never seen); "
                "starting a fresh session under it.",
                requested,
            )

        resolved, _ = self.store.get_or_create(requested)
        return resolved

    def _store_turns(self, session_id: str, *turns: Turn) -> None:
        """Append turns; if the session was evicted meanwhile, re-create it."""
        for turn in turns:
            if not self.store.append_turn(session_id, turn):
                logger.warning(
                    "Session %s disappeared mid-request; re-creating it.", session_id
                )
                self.store.get_or_create(session_id)
                for t in turns:
                    self.store.append_turn(session_id, t)
                return

    async def _call_provider(self, prompt: str) -> str:
        with Stopwatch(f"provider call (model={self.model})", logger):
            return await asyncio.wait_for(
                self.provider.complete(prompt, model=self.model),
                timeout=self.provider_timeout_s,
            )

    async def _generate_reply(self, prompt: str) -> Tuple[str, bool]:
        """Return (reply, degraded). Never raises for provider failures."""
        try:
            text = await self._call_provider(prompt)
        except asyncio.TimeoutError:
            logger.warning(
                "Provider call timed out after %.1f s; using fallback reply.",
                self.provider_timeout_s,
            )
        except ProviderUnavailable as exc:
            logger.warning("Provider unavailable (%s); using fallback reply.", exc)
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected provider failure; using fallback reply.")
        else:
            if isinstance(text, str) and text.strip():
                return text.strip(), False
            logger.warning("Provider returned empty text; using fallback reply.")

        return self.fallback_reply, True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def handle_chat(
        self,
        message: Optional[str],
        session_id: Optional[str] = None,
    ) -> ChatResult:
        """
        Process one chat message.

        Raises
        ------
        InvalidRequest
            If `message` is missing or empty after sanitizing.
        UnknownSession
            If `session_id` is unknown and the policy is "reject".
        """
        cleaned = sanitize_user_text(message, self.max_user_chars)
        if cleaned.too_short:
            raise InvalidRequest("No message provided")

        resolved_id = self._resolve_session(session_id)

        async with self._lock_for(resolved_id):
            user_turn = Turn(role="user", content=cleaned.sanitized)
            self._store_turns(resolved_id, user_turn)

            session = self.store.get_session(resolved_id)
            turns = session.turns if session is not None else [user_turn]
            prompt = build_conversation_prompt(self.system_prompt, turns)

            logger.debug(
                "Session %s: sending %d turn(s) to provider", resolved_id, len(turns)
            )
            reply, degraded = await self._generate_reply(prompt)

            assistant_turn = Turn(role="assistant", content=reply)
            if not self.store.append_turn(resolved_id, assistant_turn):
                self._store_turns(resolved_id, user_turn, assistant_turn)

            history_length = len(self.store.get_history_as_messages(resolved_id))

        return ChatResult(
            reply=reply,
            session_id=resolved_id,
            history_length=history_length,
            degraded=degraded,
        )

    async def warm_up(self) -> WarmResult:
        """
        Send a trivial priming prompt to hide cold-start latency.

        Never raises; the outcome is diagnostic only.
        """
        try:
            await self._call_provider(WARMUP_PROMPT)
        except asyncio.TimeoutError:
            error = f"timed out after {self.provider_timeout_s:.1f} s"
        except ProviderUnavailable as exc:
            error = str(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure during warm-up")
            error = str(exc) or type(exc).__name__
        else:
            logger.info("Provider warm-up succeeded (model=%s)", self.model)
            return WarmResult(warmed=True)

        logger.warning("Provider warm-up failed: %s", error)
        return WarmResult(warmed=False, error=error)
