"""Admin API — pricing matrices, discounts and the engine flag."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from printshop.dependencies import (
    get_config_store,
    get_constraint_engine,
    get_matrix_repository,
)
from printshop.pricing.constraints import ConstraintEngine
from printshop.pricing.defaults import DISCOUNTS_KEY, ENGINE_FLAG_KEY
from printshop.pricing.engine import engine_status
from printshop.pricing.keys import normalize_book_size
from printshop.repositories.matrix import PricingMatrixRepository
from printshop.repositories.settings import ConfigStore
from printshop.schemas.matrix import PricingMatrix

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/admin/pricing", tags=["admin"])


class EngineToggle(BaseModel):
    enabled: bool


def _failure(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


@router.get("/book-sizes")
async def list_book_sizes(
    constraints: ConstraintEngine = Depends(get_constraint_engine),
) -> dict:
    """All canonical sizes, including ones disabled for the order form."""
    sizes = await constraints.get_available_book_sizes(include_disabled=True)
    return {"success": True, "data": [info.model_dump() for info in sizes]}


@router.get("/matrices/{book_size}")
async def get_matrix(
    book_size: str,
    matrices: PricingMatrixRepository = Depends(get_matrix_repository),
) -> dict:
    """Stored matrix, or the starter matrix when the size has none yet."""
    matrix = await matrices.get_matrix(book_size)
    if matrix is None:
        return {
            "success": True,
            "configured": False,
            "data": matrices.default_matrix(book_size).model_dump(),
        }
    return {
        "success": True,
        "configured": True,
        "complete": matrix.is_complete(),
        "data": matrix.model_dump(),
    }


@router.put("/matrices/{book_size}")
async def save_matrix(
    book_size: str,
    matrix: PricingMatrix,
    matrices: PricingMatrixRepository = Depends(get_matrix_repository),
    constraints: ConstraintEngine = Depends(get_constraint_engine),
) -> Any:
    """Create or replace the matrix for a canonical book size.

    Args:
        book_size: Size label; parenthetical descriptions are ignored
        matrix: Full pricing matrix

    Returns:
        {"success": true, "complete": bool} or a failure envelope
    """
    size = normalize_book_size(book_size)
    canonical = {normalize_book_size(s) for s in await constraints.canonical_book_sizes()}
    if size not in canonical:
        return _failure(
            400,
            f"قطع {size} در تنظیمات محصول تعریف نشده است",
            code="unknown_book_size",
            field="book_size",
        )

    if not await matrices.save_matrix(size, matrix):
        return _failure(500, "خطا در ذخیره ماتریس قیمت")

    return {"success": True, "book_size": size, "complete": matrix.is_complete()}


@router.delete("/matrices/{book_size}")
async def delete_matrix(
    book_size: str,
    matrices: PricingMatrixRepository = Depends(get_matrix_repository),
) -> Any:
    if not await matrices.delete_matrix(book_size):
        return _failure(404, f"ماتریس قیمت برای قطع {book_size} یافت نشد")
    return {"success": True}


@router.post("/matrices/prune")
async def prune_orphaned_matrices(
    matrices: PricingMatrixRepository = Depends(get_matrix_repository),
    constraints: ConstraintEngine = Depends(get_constraint_engine),
) -> dict:
    """Remove matrices for sizes no longer in product parameters."""
    removed = await matrices.remove_orphaned(await constraints.canonical_book_sizes())
    return {"success": True, "removed": removed}


@router.put("/discounts")
async def save_discounts(
    discounts: dict[int, float],
    store: ConfigStore = Depends(get_config_store),
) -> Any:
    """Replace the quantity discount table. An empty table disables discounts."""
    if any(threshold <= 0 or not 0 <= percent <= 100 for threshold, percent in discounts.items()):
        return _failure(400, "جدول تخفیف نامعتبر است", code="invalid_discounts", field="discounts")

    table = {str(threshold): percent for threshold, percent in sorted(discounts.items())}
    if not await store.set_json(DISCOUNTS_KEY, table):
        return _failure(500, "خطا در ذخیره جدول تخفیف")

    logger.info("discounts_saved", table=table)
    return {"success": True, "data": table}


@router.get("/engine")
async def get_engine_status(store: ConfigStore = Depends(get_config_store)) -> dict:
    return {"success": True, "data": await engine_status(store)}


@router.put("/engine")
async def set_engine(
    data: EngineToggle,
    store: ConfigStore = Depends(get_config_store),
) -> Any:
    if not await store.set(ENGINE_FLAG_KEY, "1" if data.enabled else "0"):
        return _failure(500, "خطا در ذخیره وضعیت موتور قیمت‌گذاری")

    logger.info("pricing_engine_toggled", enabled=data.enabled)
    return {"success": True, "data": await engine_status(store)}
