# cvchat_server/core/safety.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Input sanitizing
---------------------------------
Cleans user text before it reaches the session history or the model.
Pure functions, no I/O.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_EXTRA_BLANK_LINES_RE = re.compile(r"\n{3,}")


@dataclass
class SanitizedTextResult:
    """
    Result of sanitize_user_text().

    Attributes
    ----------
    original:
        Original raw text ("" if the client sent None or a non-string).
    sanitized:
        Cleaned version stored in history and sent to the model.
    truncated:
        True if the text was cut at the character limit.
    too_short:
        True if nothing usable is left after cleaning.
    """
    original: str
    sanitized: str
    truncated: bool
    too_short: bool


def sanitize_user_text(raw_text: Any, max_chars: int) -> SanitizedTextResult:
    """
    Steps:
    - Non-strings become "" so callers never see None.
    - Normalize line endings to \\n and remove other control characters
      (tabs and newlines stay, pasted CV blocks keep their lines).
    - Drop trailing spaces on each line, squash 3+ newlines into one blank
      line, and trim the outer whitespace.
    - Truncate to `max_chars`.
    """
    original = raw_text if isinstance(raw_text, str) else ""

    cleaned = original.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _CONTROL_CHARS_RE.sub("", cleaned)
    cleaned = "\n".join(line.rstrip() for line in cleaned.split("\n"))
    cleaned = _EXTRA_BLANK_LINES_RE.sub("\n\n", cleaned).strip()

    truncated = False
    if len(cleaned) > max_chars:
        cleaned = cleaned[:max_chars].rstrip()
        truncated = True
        logger.debug(
            "sanitize_user_text: truncated user text from %d to %d chars",
            len(original),
            len(cleaned),
        )

    return SanitizedTextResult(
        original=original,
        sanitized=cleaned,
        truncated=truncated,
        too_short=not cleaned,
    )
