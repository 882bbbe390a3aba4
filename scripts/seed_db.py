"""Seed database with initial pricing data (book sizes, starter matrices, discounts)."""

import asyncio

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from printshop.config import settings
from printshop.models.base import Base
from printshop.pricing.cache import MatrixCache
from printshop.pricing.defaults import (
    BOOK_SIZES_KEY,
    DEFAULT_BOOK_SIZES,
    DISCOUNTS_KEY,
    ENGINE_FLAG_KEY,
    LEGACY_DEFAULTS,
    default_matrix,
)
from printshop.repositories.matrix import PricingMatrixRepository
from printshop.repositories.settings import ConfigStore


DISCOUNTS = {"100": 10, "50": 5}


async def seed():
    """Seed the database with reference data."""
    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        store = ConfigStore(session)
        matrices = PricingMatrixRepository(store, MatrixCache())

        await store.set_json(BOOK_SIZES_KEY, DEFAULT_BOOK_SIZES)
        print(f"  + Book sizes: {', '.join(DEFAULT_BOOK_SIZES)}")

        for size in DEFAULT_BOOK_SIZES:
            if await matrices.get_matrix(size) is not None:
                print(f"  = Matrix exists: {size}")
                continue
            await matrices.save_matrix(size, default_matrix(size))
            print(f"  + Matrix: {size}")

        if await store.get(DISCOUNTS_KEY) is None:
            await store.set_json(DISCOUNTS_KEY, DISCOUNTS)
            print("  + Quantity discounts")

        for key, value in LEGACY_DEFAULTS.items():
            if await store.get(key) is None:
                await store.set_json(key, value)
        print("  + Legacy pricing tables")

        await store.set(ENGINE_FLAG_KEY, "1")
        print("  + Matrix pricing engine enabled")

    await engine.dispose()
    print("\nSeed completed!")


if __name__ == "__main__":
    asyncio.run(seed())
