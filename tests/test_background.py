"""Periodic tasks, self-ping keep-alive, input sanitizing and prompt building."""

from __future__ import annotations

import asyncio
import logging

import pytest
import requests

from cvchat_server.core import keepalive
from cvchat_server.core.prompting import (
    DEFAULT_SYSTEM_PROMPT,
    build_conversation_prompt,
    load_system_prompt,
)
from cvchat_server.core.config import PROMPTS_DIR
from cvchat_server.core.safety import sanitize_user_text
from cvchat_server.core.scheduler import PeriodicTask
from cvchat_server.runtime_state import Turn
from cvchat_server.utils import setup_logging


class TestPeriodicTask:

    def test_runs_repeatedly_and_stops(self):
        calls = []

        async def job():
            calls.append(1)

        async def scenario():
            task = PeriodicTask("test-job", 0.01, job)
            task.start()
            await asyncio.sleep(0.1)
            assert task.running
            await task.stop()
            return task

        task = asyncio.run(scenario())
        assert len(calls) >= 3
        assert not task.running

    def test_survives_exceptions(self):
        async def broken():
            raise RuntimeError("nope")

        async def scenario():
            task = PeriodicTask("broken-job", 0.01, broken)
            task.start()
            await asyncio.sleep(0.08)
            still_running = task.running
            await task.stop()
            return task, still_running

        task, still_running = asyncio.run(scenario())
        assert still_running
        assert task.runs >= 2

    def test_run_immediately(self):
        calls = []

        async def job():
            calls.append(1)

        async def scenario():
            task = PeriodicTask("eager-job", 3600, job, run_immediately=True)
            task.start()
            await asyncio.sleep(0.02)
            await task.stop()

        asyncio.run(scenario())
        assert calls == [1]

    def test_stop_without_start_is_noop(self):
        asyncio.run(PeriodicTask("idle", 1, lambda: asyncio.sleep(0)).stop())

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            PeriodicTask("bad", 0, lambda: asyncio.sleep(0))


class TestKeepalive:

    def test_ping_url(self):
        assert keepalive.ping_url("https://cv.example.test/") == "https://cv.example.test/api/ping"

    def test_self_ping_ok(self, monkeypatch):
        seen = {}

        class Resp:
            status_code = 200

        def fake_get(url, timeout):
            seen["url"] = url
            seen["timeout"] = timeout
            return Resp()

        monkeypatch.setattr(keepalive.requests, "get", fake_get)
        assert asyncio.run(keepalive.self_ping("https://cv.example.test", timeout_s=3)) is True
        assert seen == {"url": "https://cv.example.test/api/ping", "timeout": 3}

    def test_self_ping_failures_return_false(self, monkeypatch):
        class Resp:
            status_code = 503

        monkeypatch.setattr(keepalive.requests, "get", lambda url, timeout: Resp())
        assert asyncio.run(keepalive.self_ping("https://cv.example.test")) is False

        def refuse(url, timeout):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(keepalive.requests, "get", refuse)
        assert asyncio.run(keepalive.self_ping("https://cv.example.test")) is False


class TestSanitize:

    def test_strips_control_chars_and_keeps_lines(self):
        res = sanitize_user_text("\x00  SKILLS:\x7f  \r\n\tPython-90,\n\n\n\n  JavaScript-60 \x0b", 100)
        assert res.sanitized == "SKILLS:\n\tPython-90,\n\n  JavaScript-60"
        assert not res.truncated
        assert not res.too_short

    def test_work_experience_block_unchanged(self):
        block = "Dev | Acme | 2020 | Built APIs\nQA | Beta | 2018 | Tests"
        assert sanitize_user_text(block, 1000).sanitized == block

    def test_truncates(self):
        res = sanitize_user_text("x" * 50, 10)
        assert res.sanitized == "x" * 10
        assert res.truncated

    @pytest.mark.parametrize("raw", [None, "", "  \n\t ", 7])
    def test_too_short(self, raw):
        assert sanitize_user_text(raw, 100).too_short


class TestPrompting:

    def test_build_conversation_prompt(self):
        turns = [
            Turn(role="user", content="Hi"),
            Turn(role="assistant", content="Hello! How can I help?"),
            Turn(role="user", content="Format for education?"),
        ]
        assert build_conversation_prompt("SYS", turns) == (
            "SYS\n\n"
            "User: Hi\n"
            "Assistant: Hello! How can I help?\n"
            "User: Format for education?"
        )

    def test_packaged_system_prompt_describes_site(self):
        text = load_system_prompt(PROMPTS_DIR)
        assert "CV generator" in text
        assert "Degree | Institute | Year" in text

    def test_missing_prompt_falls_back(self, tmp_path):
        assert load_system_prompt(tmp_path) == DEFAULT_SYSTEM_PROMPT


class TestLogging:

    def test_setup_logging_levels(self, monkeypatch):
        root = logging.getLogger()
        saved = (root.level, [h.level for h in root.handlers])
        saved_quiet = {name: logging.getLogger(name).level for name in ("uvicorn.access", "urllib3")}
        monkeypatch.setenv("CVCHAT_NOISY_LOG_LEVEL", "error")
        try:
            setup_logging(debug=True)
            assert root.level == logging.DEBUG
            assert logging.getLogger("urllib3").level == logging.ERROR
            assert logging.getLogger("uvicorn.access").level == logging.ERROR

            setup_logging(debug=True, level=logging.WARNING)
            assert root.level == logging.WARNING
        finally:
            root.setLevel(saved[0])
            for handler, level in zip(root.handlers, saved[1]):
                handler.setLevel(level)
            for name, level in saved_quiet.items():
                logging.getLogger(name).setLevel(level)
