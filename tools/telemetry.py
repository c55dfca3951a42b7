"""
Telemetry collaborator — fire-and-forget call timings, properties, counters and errors.

Every method swallows its own failures: telemetry must never break the
operation that reports to it.
"""

from __future__ import annotations

from typing import Any, Protocol

from config.log import get_logger

log = get_logger("telemetry")

MAX_CALLS = 100


class Telemetry(Protocol):
    def log_call(self, name: str, duration_ms: float, status: int | str, **properties: Any) -> None: ...

    def log_property(self, key: str, value: Any) -> None: ...

    def log_counter(self, name: str, value: int = 1) -> None: ...

    def log_error(self, error: BaseException | str) -> None: ...


class LoggingTelemetry:
    """Telemetry that writes to the log and keeps bounded records in memory."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.call_count = 0
        self.call_ms = 0.0
        self.properties: dict[str, Any] = {}
        self.counters: dict[str, int] = {}
        self.errors: list[str] = []

    def log_call(self, name: str, duration_ms: float, status: int | str, **properties: Any) -> None:
        try:
            entry = {"name": name, "ms": round(duration_ms, 1), "status": status, **properties}
            if len(self.calls) < MAX_CALLS:
                self.calls.append(entry)
            self.call_count += 1
            self.call_ms += duration_ms
            log.debug("call %s", entry)
        except Exception as exc:
            log.debug("log_call dropped: %s", exc)

    def log_property(self, key: str, value: Any) -> None:
        try:
            # Repeated keys accumulate into a list
            if key in self.properties:
                current = self.properties[key]
                if isinstance(current, list) and not isinstance(value, list):
                    current.append(value)
                else:
                    self.properties[key] = [current, value]
            else:
                self.properties[key] = value
            log.debug("property %s=%r", key, value)
        except Exception as exc:
            log.debug("log_property dropped: %s", exc)

    def log_counter(self, name: str, value: int = 1) -> None:
        try:
            self.counters[name] = self.counters.get(name, 0) + value
        except Exception as exc:
            log.debug("log_counter dropped: %s", exc)

    def log_error(self, error: BaseException | str) -> None:
        try:
            if isinstance(error, BaseException):
                lines = getattr(error, "to_error_list", None)
                message = " <- ".join(lines()) if callable(lines) else f"{type(error).__name__}: {error}"
            else:
                message = str(error)
            if len(self.errors) < MAX_CALLS:
                self.errors.append(message)
            log.error(message)
        except Exception as exc:
            log.debug("log_error dropped: %s", exc)
