# cvchat_server/providers/base.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Completion provider interface
----------------------------------------------
Anything that turns a prompt into generated text. The orchestrator only
depends on this protocol, so tests can plug in a fake.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CompletionProvider(Protocol):
    """Given a prompt, return generated text or raise ProviderUnavailable."""

    async def complete(self, prompt: str, *, model: str) -> str:
        ...

    def close(self) -> None:
        ...
