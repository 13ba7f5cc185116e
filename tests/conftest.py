"""Pytest configuration for the CV chat server tests.

Sets a dummy provider credential so the package imports cleanly, and
provides a fake completion provider so no test touches the network.
"""

from __future__ import annotations

import asyncio
import os
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import pytest

os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("ENVIRONMENT", "test")

from fastapi.testclient import TestClient  # noqa: E402

from cvchat_server.core.config import Settings  # noqa: E402
from cvchat_server.core.orchestrator import ChatOrchestrator  # noqa: E402
from cvchat_server.runtime_state import SessionStore  # noqa: E402


def echo_last_user_line(prompt: str) -> str:
    user_lines = [line for line in prompt.splitlines() if line.startswith("User: ")]
    last = user_lines[-1][len("User: "):] if user_lines else ""
    return f"reply to {last}"


class FakeProvider:
    """In-memory completion provider that records every call."""

    def __init__(
        self,
        reply: Callable[[str], str] = echo_last_user_line,
        *,
        error: Optional[BaseException] = None,
        delay_s: float = 0.0,
    ) -> None:
        self.reply = reply
        self.error = error
        self.delay_s = delay_s
        self.prompts: List[str] = []
        self.models: List[str] = []
        self.closed = False

    async def complete(self, prompt: str, *, model: str) -> str:
        self.prompts.append(prompt)
        self.models.append(model)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return self.reply(prompt)

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_orchestrator():
    def _make(provider, store: Optional[SessionStore] = None, **kwargs) -> ChatOrchestrator:
        if store is None:
            store = SessionStore(max_history_turns=6)
        return ChatOrchestrator(
            store,
            provider,
            model="test-model",
            system_prompt="SYSTEM",
            **kwargs,
        )

    return _make


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides) -> Settings:
        values = {
            "openai_api_key": "test-key",
            "environment": "test",
            "static_dir": tmp_path / "no-static",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def make_client(make_settings):
    from cvchat_server.main import create_app

    def _make(provider=None, store: Optional[SessionStore] = None, **overrides) -> TestClient:
        app = create_app(
            make_settings(**overrides),
            provider=provider if provider is not None else FakeProvider(),
            store=store,
        )
        return TestClient(app)

    return _make
