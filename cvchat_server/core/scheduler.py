# cvchat_server/core/scheduler.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Periodic background tasks
------------------------------------------
Small asyncio helper for jobs that run on a fixed interval, independent of
request handling:

- idle session eviction sweep
- provider warm-up (optional)
- self-ping keep-alive (optional)

Started from the app lifespan, cancelled on shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Run `func` every `interval_s` seconds until stopped.

    Exceptions raised by `func` are logged and the loop keeps going.

    Example:
        sweep = PeriodicTask("session-eviction", 600, evict)
        sweep.start()
        ...
        await sweep.stop()
    """

    def __init__(
        self,
        name: str,
        interval_s: float,
        func: Callable[[], Awaitable[object]],
        *,
        run_immediately: bool = False,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self.name = name
        self.interval_s = interval_s
        self.func = func
        self.run_immediately = run_immediately
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("Started background task %s (every %.0f s)", self.name, self.interval_s)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Stopped background task %s", self.name)

    async def _run_once(self) -> None:
        try:
            await self.func()
        except Exception:  # noqa: BLE001
            logger.exception("Background task %s failed", self.name)
        finally:
            self.runs += 1

    async def _loop(self) -> None:
        if self.run_immediately:
            await self._run_once()
        while True:
            await asyncio.sleep(self.interval_s)
            await self._run_once()
