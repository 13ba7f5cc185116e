# cvchat_server/core/prompting.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Prompt building
--------------------------------
The model receives one flat text prompt:

    <system instruction>

    User: ...
    Assistant: ...
    User: ...

The system instruction lives in prompts/system_prompt.txt.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable

from cvchat_server.runtime_state import Turn

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_FILE = "system_prompt.txt"

DEFAULT_SYSTEM_PROMPT = (
    "You are the built-in AI assistant for a CV generator website. "
    "Answer any question helpfully and keep responses short."
)

ROLE_LABELS: Dict[str, str] = {"user": "User", "assistant": "Assistant"}

_PROMPT_CACHE: Dict[Path, str] = {}


def load_system_prompt(prompts_dir: Path) -> str:
    """
    Read the system instruction from `prompts_dir` with simple caching.

    Falls back to DEFAULT_SYSTEM_PROMPT (and logs a warning) if the file is
    missing or empty.
    """
    path = prompts_dir / SYSTEM_PROMPT_FILE
    if path in _PROMPT_CACHE:
        return _PROMPT_CACHE[path]

    text = ""
    if path.is_file():
        text = path.read_text(encoding="utf-8").strip()
    if not text:
        logger.warning("System prompt not found or empty at %s; using default.", path)
        text = DEFAULT_SYSTEM_PROMPT

    _PROMPT_CACHE[path] = text
    return text


def format_turn(turn: Turn) -> str:
    return f"{ROLE_LABELS[turn.role]}: {turn.content}"


def build_conversation_prompt(system_prompt: str, turns: Iterable[Turn]) -> str:
    """System instruction, a blank line, then one labelled line per turn."""
    lines = "\n".join(format_turn(t) for t in turns)
    return f"{system_prompt}\n\n{lines}"
