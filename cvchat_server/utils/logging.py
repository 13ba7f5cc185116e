# cvchat_server/utils/logging.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — logging utilities
----------------------------------
One log format for the whole process, set up by create_app() and by the
`cvchat-server` entry point. Every chat request writes a couple of INFO
lines and every provider call writes a latency line, so the per-request
uvicorn access log and urllib3's connection pool messages are held back
to keep the console readable.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Loggers that repeat what our own request logs already say.
QUIET_LOGGERS = ("uvicorn.access", "urllib3")


def setup_logging(
    *,
    debug: bool = False,
    level: Optional[int] = None,
) -> None:
    """
    Install the chat server's log format on the root logger.

    Parameters
    ----------
    debug:
        DEBUG logs show each chat message and prompt size; without it the
        server logs at INFO. Wired from Settings.debug (env: DEBUG).
    level:
        Exact level to use instead of the DEBUG/INFO choice above.

    If handlers already exist (uvicorn installed its own, or a test runner
    did), only their levels change; no second handler is added.
    The quiet loggers go to CVCHAT_NOISY_LOG_LEVEL, WARNING unless set.
    """
    if level is None:
        level = logging.DEBUG if debug else logging.INFO

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        for handler in root.handlers:
            handler.setLevel(level)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    quiet_level = os.getenv("CVCHAT_NOISY_LOG_LEVEL", "WARNING").upper()
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    """Module logger; call as get_logger(__name__)."""
    return logging.getLogger(name)
