"""
Batch runner — applies an async function to values in fixed-size groups.

Each group runs concurrently; a failure for one value is logged and
reported without aborting the rest.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from config.log import get_logger
from tools.telemetry import Telemetry

log = get_logger(__name__)

T = TypeVar("T")


async def async_batch(
    name: str,
    values: Sequence[T],
    fn: Callable[[T], Awaitable[object]],
    size: int = 5,
    telemetry: Telemetry | None = None,
) -> int:
    """
    Run `fn` over `values`, `size` at a time.

    Returns:
        Number of values that failed.
    """
    if not values:
        return 0

    if telemetry is not None:
        telemetry.log_property(f"Batch_{name}", len(values))

    failures = 0
    for i in range(0, len(values), size):
        batch = values[i : i + size]
        results = await asyncio.gather(*(fn(value) for value in batch), return_exceptions=True)

        for index, result in enumerate(results):
            if isinstance(result, Exception):
                failures += 1
                log.warning("Batch_%s: at values[%d]: %s", name, i + index, result)
                if telemetry is not None:
                    telemetry.log_error(f"Batch_{name}: at values[{i + index}]: {result}")
            elif isinstance(result, BaseException):
                raise result

    return failures
