"""
Normalization Cache — two-tier cache of expensive text normalizations.

Lookups go to a process-local LRU first, then to a store collection (a hit
back-fills the LRU), and only on a total miss to the loader, whose result is
written to both tiers. The store write is detached; its failures are logged
and never reach the caller.
"""

from __future__ import annotations

import re
from typing import Awaitable, Callable, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from config.log import get_logger
from tools.detached import DetachedTasks
from tools.job_store import Store
from tools.lru_cache import LRUCache
from tools.telemetry import Telemetry

log = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

_RESERVED_CHARS = re.compile(r"[/\\#?]")
_DOC_FIELDS = ("id", "pkey", "_ts")


def normalize_key(text: str) -> str:
    """Lowercase, trimmed, with characters invalid in document ids replaced by '_'."""
    return _RESERVED_CHARS.sub("_", (text or "").strip().lower())


class NormalizationCache(Generic[M]):
    def __init__(
        self,
        name: str,
        store: Store,
        collection: str,
        model: Type[M],
        loader: Callable[[str], Awaitable[Optional[M]]],
        capacity: int = 1000,
        tasks: DetachedTasks | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self.name = name
        self.store = store
        self.collection = collection
        self.model = model
        self._loader = loader
        self._lru: LRUCache[str, M] = LRUCache(capacity)
        self._tasks = tasks if tasks is not None else DetachedTasks(telemetry)
        self._telemetry = telemetry

    @property
    def memory(self) -> LRUCache[str, M]:
        return self._lru

    async def get(self, text: str) -> Optional[M]:
        """Cached value for `text` from either tier, without invoking the loader."""
        key = normalize_key(text)
        if not key:
            return None

        value = self._lru.get(key)
        if value is not None:
            self._count("MemoryHit")
            return value

        try:
            doc = await self.store.get_item(self.collection, key, key[0])
        except Exception as e:
            log.warning("%s: store read failed for %r: %s", self.name, key, e)
            if self._telemetry is not None:
                self._telemetry.log_error(e)
            return None

        if doc is None:
            return None

        try:
            value = self.model.model_validate({k: v for k, v in doc.items() if k not in _DOC_FIELDS})
        except ValidationError as e:
            log.warning("%s: discarding unreadable entry %r: %s", self.name, key, e)
            return None

        self._lru.set(key, value)
        self._count("DbHit")
        return value

    async def resolve(self, text: str) -> Optional[M]:
        """Cached value for `text`, computing and caching it on a total miss."""
        key = normalize_key(text)
        if not key:
            return None

        value = await self.get(text)
        if value is not None:
            return value

        self._count("Miss")
        value = await self._loader(text)
        if value is not None:
            self.set(text, value)
        return value

    def set(self, text: str, value: M) -> None:
        key = normalize_key(text)
        if not key:
            return

        self._lru.set(key, value)
        self._tasks.spawn(self._persist(key, value), f"{self.name}.persist")

    async def _persist(self, key: str, value: M) -> None:
        try:
            await self.store.upsert(
                self.collection,
                {"id": key, "pkey": key[0], **value.model_dump(mode="json")},
            )
        except Exception as e:
            log.warning("%s: store write failed for %r: %s", self.name, key, e)
            if self._telemetry is not None:
                self._telemetry.log_error(e)

    def _count(self, outcome: str) -> None:
        if self._telemetry is not None:
            self._telemetry.log_counter(f"{self.name}_{outcome}")
