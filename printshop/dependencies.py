"""FastAPI dependencies wiring stores, repositories and engines per request."""

from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.database import get_db
from printshop.pricing.cache import GenerationCounter, MatrixCache
from printshop.pricing.calculator import PriceCalculator
from printshop.pricing.constraints import ConstraintEngine
from printshop.pricing.engine import select_calculator
from printshop.pricing.health import PricingHealthChecker
from printshop.redis_client import get_redis
from printshop.repositories.matrix import PricingMatrixRepository
from printshop.repositories.order import OrderRepository
from printshop.repositories.settings import ConfigStore


def get_matrix_cache(request: Request) -> MatrixCache:
    return request.app.state.matrix_cache


async def get_config_store(db: AsyncSession = Depends(get_db)) -> ConfigStore:
    return ConfigStore(db)


async def get_matrix_repository(
    store: ConfigStore = Depends(get_config_store),
    cache: MatrixCache = Depends(get_matrix_cache),
    redis_client: Optional[redis.Redis] = Depends(get_redis),
) -> PricingMatrixRepository:
    counter = GenerationCounter(redis_client) if redis_client is not None else None
    return PricingMatrixRepository(store, cache, counter)


async def get_constraint_engine(
    store: ConfigStore = Depends(get_config_store),
    matrices: PricingMatrixRepository = Depends(get_matrix_repository),
) -> ConstraintEngine:
    return ConstraintEngine(matrices, store)


async def get_calculator(
    store: ConfigStore = Depends(get_config_store),
    matrices: PricingMatrixRepository = Depends(get_matrix_repository),
) -> PriceCalculator:
    return await select_calculator(store, matrices)


async def get_health_checker(
    store: ConfigStore = Depends(get_config_store),
    matrices: PricingMatrixRepository = Depends(get_matrix_repository),
    constraints: ConstraintEngine = Depends(get_constraint_engine),
) -> PricingHealthChecker:
    return PricingHealthChecker(store, matrices, constraints)


async def get_order_repository(db: AsyncSession = Depends(get_db)) -> OrderRepository:
    return OrderRepository(db)
