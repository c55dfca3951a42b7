"""
Debounce Executor — coalesces bursts of calls into one trailing-edge run.

Each `call()` cancels the pending timer and schedules a new one; `fn` runs
once `delay_ms` passes without another call. Work that already started is
never cancelled.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable

from config.log import get_logger
from tools.detached import DetachedTasks
from tools.telemetry import Telemetry
from tools.timers import LoopTimer, Timer, TimerHandle

log = get_logger(__name__)


class DebounceExecutor:
    def __init__(
        self,
        name: str,
        fn: Callable[[], Awaitable[object]],
        delay_ms: int = 30000,
        timer: Timer | None = None,
        tasks: DetachedTasks | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self.name = name
        self._fn = fn
        self._delay_s = delay_ms / 1000
        self._timer = timer or LoopTimer()
        self._tasks = tasks if tasks is not None else DetachedTasks(telemetry)
        self._telemetry = telemetry
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self) -> None:
        self.cancel()
        self._handle = self._timer.call_later(self._delay_s, self._fire)

    def cancel(self) -> None:
        """Drop the pending timer, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run now if a call is pending."""
        if self._handle is None:
            return
        self.cancel()
        await self._execute()

    def _fire(self) -> None:
        self._handle = None
        self._tasks.spawn(self._execute(), self.name)

    async def _execute(self) -> None:
        start = time.perf_counter()
        status = "ok"
        try:
            await self._fn()
        except Exception as exc:
            status = "error"
            log.warning("%s: failed: %s", self.name, exc)
            if self._telemetry is not None:
                self._telemetry.log_error(exc)
        finally:
            if self._telemetry is not None:
                duration_ms = (time.perf_counter() - start) * 1000
                self._telemetry.log_call(self.name, duration_ms, status)
