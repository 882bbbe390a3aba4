"""Pricing matrix repository — one matrix per book size, stored as settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import structlog
from pydantic import ValidationError
from redis.exceptions import RedisError

from printshop.pricing.cache import GenerationCounter, MatrixCache
from printshop.pricing.defaults import default_matrix
from printshop.pricing.keys import (
    MATRIX_KEY_PREFIX,
    decode_size_key,
    encode_size_key,
    normalize_book_size,
)
from printshop.repositories.settings import ConfigStore
from printshop.schemas.matrix import PricingMatrix

logger = structlog.get_logger()


@dataclass
class StoredMatrix:
    """One raw ``pricing_matrix_*`` row as found in storage."""

    key: str
    book_size: Optional[str]
    matrix: Optional[PricingMatrix] = None
    error: Optional[str] = None

    @property
    def readable(self) -> bool:
        return self.book_size is not None and self.matrix is not None


class PricingMatrixRepository:
    """Sole writer of pricing matrices.

    All matrices are loaded in one bulk read into the shared ``MatrixCache``.
    With a ``GenerationCounter`` the cache is reloaded whenever another
    process has written since it was filled.
    """

    def __init__(
        self,
        store: ConfigStore,
        cache: MatrixCache,
        counter: Optional[GenerationCounter] = None,
    ):
        self.store = store
        self.cache = cache
        self.counter = counter

    async def _generation(self) -> Optional[int]:
        if self.counter is None:
            return None
        try:
            return await self.counter.current()
        except RedisError as e:
            logger.warning("matrix_generation_unavailable", error=str(e))
            return None

    async def _bump_generation(self) -> None:
        if self.counter is None:
            return
        try:
            await self.counter.bump()
        except RedisError as e:
            logger.warning("matrix_generation_bump_failed", error=str(e))

    async def scan(self) -> list[StoredMatrix]:
        """Every stored matrix row, including undecodable keys and bad JSON."""
        rows = await self.store.get_by_prefix(MATRIX_KEY_PREFIX)
        found = []
        for key, raw in rows.items():
            book_size = decode_size_key(key)
            if book_size is None:
                found.append(StoredMatrix(key=key, book_size=None, error="undecodable_key"))
                continue
            try:
                matrix = PricingMatrix.model_validate_json(raw)
            except ValidationError as e:
                found.append(
                    StoredMatrix(key=key, book_size=book_size, error=f"invalid_json: {e.error_count()} errors")
                )
                continue
            found.append(StoredMatrix(key=key, book_size=book_size, matrix=matrix))
        return found

    async def get_all(self) -> dict[str, PricingMatrix]:
        """All readable matrices by normalized book size."""
        generation = await self._generation()
        cached = self.cache.matrices
        if cached is not None and (generation is None or generation == self.cache.generation):
            return dict(cached)

        matrices: dict[str, PricingMatrix] = {}
        for stored in await self.scan():
            if stored.book_size is None:
                logger.warning("matrix_key_undecodable", key=stored.key)
                continue
            if stored.matrix is None:
                logger.warning("matrix_invalid", book_size=stored.book_size, error=stored.error)
                continue
            size = normalize_book_size(stored.book_size)
            matrix = stored.matrix
            if matrix.book_size != size:
                matrix = matrix.model_copy(update={"book_size": size})
            matrices[size] = matrix

        self.cache.fill(matrices, generation)
        logger.debug("matrices_loaded", count=len(matrices), generation=generation)
        return dict(matrices)

    async def get_matrix(self, book_size: str) -> Optional[PricingMatrix]:
        matrices = await self.get_all()
        return matrices.get(normalize_book_size(book_size))

    async def list_configured_sizes(self) -> list[str]:
        return list((await self.get_all()).keys())

    async def save_matrix(self, book_size: str, matrix: PricingMatrix) -> bool:
        size = normalize_book_size(book_size)
        matrix = matrix.model_copy(update={"book_size": size})
        saved = await self.store.set(
            encode_size_key(size), matrix.model_dump_json(), setting_type="json"
        )
        if not saved:
            logger.error("matrix_save_failed", book_size=size)
            return False

        self.clear_cache()
        await self._bump_generation()
        logger.info("matrix_saved", book_size=size, complete=matrix.is_complete())
        return True

    async def delete_matrix(self, book_size: str) -> bool:
        size = normalize_book_size(book_size)
        removed = await self.store.delete([encode_size_key(size)])
        if not removed:
            return False

        self.clear_cache()
        await self._bump_generation()
        logger.info("matrix_deleted", book_size=size)
        return True

    async def remove_orphaned(self, valid_sizes: Iterable[str]) -> int:
        """Delete matrices whose size is not in ``valid_sizes``, and unreadable keys."""
        valid = {normalize_book_size(size) for size in valid_sizes}
        orphaned = [
            stored.key
            for stored in await self.scan()
            if stored.book_size is None or normalize_book_size(stored.book_size) not in valid
        ]
        if not orphaned:
            return 0

        removed = await self.store.delete(orphaned)
        if removed:
            self.clear_cache()
            await self._bump_generation()
        logger.info("orphaned_matrices_removed", count=removed, keys=orphaned)
        return removed

    def clear_cache(self) -> None:
        self.cache.clear()

    async def is_stale(self) -> bool:
        """True when another process wrote since the cache was filled."""
        if self.counter is None or not self.cache.loaded:
            return False
        generation = await self._generation()
        return generation is not None and generation != self.cache.generation

    def default_matrix(self, book_size: str) -> PricingMatrix:
        return default_matrix(normalize_book_size(book_size))
