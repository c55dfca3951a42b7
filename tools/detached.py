"""
Detached tasks — work spawned off the caller's critical path.

Errors are captured and logged, never propagated. `drain()` waits for
everything spawned so far (including tasks spawned while draining), which
gives tests and the CLI a deterministic completion point.
"""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine

from config.log import get_logger
from tools.telemetry import Telemetry

log = get_logger(__name__)


class DetachedTasks:
    def __init__(self, telemetry: Telemetry | None = None) -> None:
        self._telemetry = telemetry
        self._pending: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str = "detached") -> asyncio.Task:
        """Schedule `coro` on the running loop without awaiting it."""
        task = asyncio.get_running_loop().create_task(self._guard(coro, name), name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def __len__(self) -> int:
        return len(self._pending)

    async def _guard(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        try:
            await coro
        except Exception as exc:
            log.warning("%s: detached task failed: %s", name, exc)
            if self._telemetry is not None:
                self._telemetry.log_error(exc)
