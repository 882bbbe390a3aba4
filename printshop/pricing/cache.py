"""Explicit caches for settings and pricing matrices.

``SettingsCache`` lives as long as one ``ConfigStore`` (one request).
``MatrixCache`` is owned by the application; its contents are tagged with
the shared generation number they were loaded under, so another worker's
write shows up as a newer generation and forces a reload.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import redis.asyncio as redis
import structlog
from cachetools import Cache, TTLCache

from printshop.schemas.matrix import PricingMatrix

logger = structlog.get_logger()


class SettingsCache:
    """Per-store memo of decoded setting values."""

    def __init__(self):
        self._values: dict[str, Any] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str) -> Any:
        return self._values.get(key)

    def put(self, key: str, value: Any) -> None:
        self._values[key] = value

    def clear(self, key: Optional[str] = None) -> None:
        if key is None:
            self._values.clear()
        else:
            self._values.pop(key, None)


class MatrixCache:
    """All matrices by book size, loaded in one bulk read.

    Entries expire after ``ttl`` seconds so workers without a shared
    generation counter still pick up other workers' writes eventually.
    ``ttl=None`` (or 0) keeps them until ``clear``, for deployments that
    always run with Redis.
    """

    _ENTRY = "all"

    def __init__(self, ttl: Optional[float] = 300, timer=time.monotonic):
        self._entries: Cache
        if ttl:
            self._entries = TTLCache(maxsize=1, ttl=ttl, timer=timer)
        else:
            self._entries = Cache(maxsize=1)

    @property
    def loaded(self) -> bool:
        return self._ENTRY in self._entries

    @property
    def matrices(self) -> Optional[dict[str, PricingMatrix]]:
        entry = self._entries.get(self._ENTRY)
        return entry[0] if entry is not None else None

    @property
    def generation(self) -> Optional[int]:
        entry = self._entries.get(self._ENTRY)
        return entry[1] if entry is not None else None

    def fill(self, matrices: dict[str, PricingMatrix], generation: Optional[int] = None) -> None:
        self._entries[self._ENTRY] = (matrices, generation)

    def clear(self) -> None:
        self._entries.clear()


class GenerationCounter:
    """Monotonic matrix-write counter shared through Redis."""

    KEY = "pricing:matrix_generation"

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    async def current(self) -> int:
        value = await self.redis.get(self.KEY)
        return int(value) if value else 0

    async def bump(self) -> int:
        generation = int(await self.redis.incr(self.KEY))
        logger.debug("matrix_generation_bumped", generation=generation)
        return generation
