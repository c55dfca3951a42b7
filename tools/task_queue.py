"""
Task Queue — bounded-concurrency FIFO worker pool on asyncio.

Tasks start in enqueue order, at most `concurrency_limit` at a time, and may
finish in any order. A failing task is logged and reported; it never stops
the queue. There is no cancellation: a started task runs to completion.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

from config.log import get_logger
from tools.detached import DetachedTasks
from tools.telemetry import Telemetry

log = get_logger(__name__)

T = TypeVar("T")


class _Node(Generic[T]):
    __slots__ = ("value", "next")

    def __init__(self, value: T) -> None:
        self.value = value
        self.next: _Node[T] | None = None


class TaskQueue(Generic[T]):
    def __init__(
        self,
        name: str,
        worker: Callable[[T], Awaitable[object]],
        concurrency_limit: int = 5,
        task_delay_ms: int = 0,
        on_complete: Callable[[], object] | None = None,
        tasks: DetachedTasks | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")

        self.name = name
        self._worker = worker
        self._limit = concurrency_limit
        self._delay_s = task_delay_ms / 1000
        self._on_complete = on_complete
        self._tasks = tasks if tasks is not None else DetachedTasks(telemetry)
        self._telemetry = telemetry

        # head and tail are both None iff the queue is empty
        self._head: _Node[T] | None = None
        self._tail: _Node[T] | None = None
        self._size = 0
        self._active = 0

    @property
    def active(self) -> int:
        return self._active

    def __len__(self) -> int:
        return self._size

    def add(self, tasks: Iterable[T]) -> None:
        """Enqueue all tasks and start as many as the limit allows."""
        for task in tasks:
            self._enqueue(task)
        self._begin()

    def _begin(self) -> None:
        while self._head is not None and self._active < self._limit:
            item = self._dequeue()
            self._active += 1
            self._tasks.spawn(self._run(item), f"{self.name}.task")

    def _enqueue(self, task: T) -> None:
        node = _Node(task)
        if self._tail is None:
            self._head = self._tail = node
        else:
            self._tail.next = node
            self._tail = node
        self._size += 1

    def _dequeue(self) -> T:
        node = self._head
        assert node is not None
        self._head = node.next
        if self._head is None:
            self._tail = None
        self._size -= 1
        return node.value

    async def _run(self, item: T) -> None:
        succeeded = False
        try:
            await self._worker(item)
            succeeded = True
        except Exception as exc:
            log.warning("%s: task failed: %s", self.name, exc)
            if self._telemetry is not None:
                self._telemetry.log_error(exc)
        finally:
            self._active -= 1

        if succeeded and self._on_complete is not None:
            try:
                self._on_complete()
            except Exception as exc:
                log.warning("%s: on_complete failed: %s", self.name, exc)

        if self._delay_s:
            await asyncio.sleep(self._delay_s)

        self._begin()
