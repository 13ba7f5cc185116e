# cvchat_server/core/keepalive.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Self-ping keep-alive
-------------------------------------
Some hosts put free instances to sleep after a few idle minutes. When
PUBLIC_BASE_URL is set, the server pings its own /api/ping on a schedule.
Purely operational; session logic does not depend on it.
"""

from __future__ import annotations

import logging

import requests
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

PING_PATH = "/api/ping"


def ping_url(public_base_url: str) -> str:
    return public_base_url.rstrip("/") + PING_PATH


def _ping(url: str, timeout_s: float) -> bool:
    try:
        resp = requests.get(url, timeout=timeout_s)
    except requests.RequestException as exc:
        logger.warning("Keep-alive ping to %s failed: %s", url, exc)
        return False

    if resp.status_code != 200:
        logger.warning("Keep-alive ping to %s returned HTTP %d", url, resp.status_code)
        return False

    logger.debug("Keep-alive ping to %s OK", url)
    return True


async def self_ping(public_base_url: str, timeout_s: float = 10.0) -> bool:
    """Ping the public URL without blocking the event loop."""
    return await run_in_threadpool(_ping, ping_url(public_base_url), timeout_s)
