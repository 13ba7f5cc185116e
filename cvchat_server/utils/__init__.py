# cvchat_server/utils/__init__.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Utility toolbox
--------------------------------
Shared helpers used across the server:

- logging : central logging configuration
- timers  : small timing helper for provider latency

    from cvchat_server.utils import setup_logging, get_logger
"""

from __future__ import annotations

from .logging import (  # noqa: F401
    setup_logging,
    get_logger,
)

from .timers import (  # noqa: F401
    Stopwatch,
)
