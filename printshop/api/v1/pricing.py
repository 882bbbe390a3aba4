"""Pricing API — quotes and cascading options for the order form."""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from printshop.dependencies import (
    get_calculator,
    get_constraint_engine,
    get_health_checker,
)
from printshop.pricing.calculator import PriceCalculator
from printshop.pricing.constraints import ConstraintEngine
from printshop.pricing.errors import PricingError
from printshop.pricing.health import PricingHealthChecker
from printshop.pricing.params import parse_params
from printshop.schemas.pricing import PriceRequest

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/pricing", tags=["pricing"])

REQUIRED_FIELDS = ("book_size", "paper_type", "quantity", "binding_type")


def missing_fields_response(params: dict[str, Any]) -> Optional[JSONResponse]:
    """400 envelope when a required field is empty or quantity is not positive."""
    parsed = parse_params(params)
    missing = [field for field in REQUIRED_FIELDS if not getattr(parsed, field)]
    if not missing:
        return None
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "code": "missing_fields",
            "field": missing[0],
            "message": "لطفا تمام فیلدهای الزامی را پر کنید",
            "missing": missing,
        },
    )


def rejection_response(error: PricingError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, **error.details()})


@router.post("/calculate")
async def calculate_price(
    data: PriceRequest,
    calculator: PriceCalculator = Depends(get_calculator),
) -> Any:
    """Compute a full price breakdown for one order.

    Returns:
        {"success": true, "data": OrderPriceBreakdown} or a 400 rejection
    """
    params = data.model_dump()
    missing = missing_fields_response(params)
    if missing is not None:
        return missing

    try:
        price = await calculator.calculate_price(params)
    except PricingError as e:
        logger.info("price_rejected", code=e.code, field=e.field, book_size=data.book_size)
        return rejection_response(e)

    return {"success": True, "data": price.model_dump()}


@router.get("/allowed-options")
async def allowed_options(
    book_size: str = Query(..., min_length=1),
    paper_type: Optional[str] = Query(None),
    paper_weight: Optional[str] = Query(None),
    binding_type: Optional[str] = Query(None),
    constraints: ConstraintEngine = Depends(get_constraint_engine),
) -> dict:
    """Options still selectable after the choices made so far."""
    selection = {
        "paper_type": paper_type,
        "paper_weight": paper_weight,
        "binding_type": binding_type,
    }
    view = await constraints.get_allowed_options(selection, book_size)
    return {"success": True, "data": view.model_dump()}


@router.post("/validate")
async def validate_combination(
    data: PriceRequest,
    constraints: ConstraintEngine = Depends(get_constraint_engine),
) -> dict:
    result = await constraints.validate_combination(data.model_dump())
    return {"success": True, **result.model_dump()}


@router.get("/book-sizes")
async def book_sizes(
    constraints: ConstraintEngine = Depends(get_constraint_engine),
) -> dict:
    """Book sizes the order form may offer (complete matrices only)."""
    sizes = await constraints.get_available_book_sizes()
    return {"success": True, "data": [info.model_dump() for info in sizes]}


@router.get("/health")
async def pricing_health(
    checker: PricingHealthChecker = Depends(get_health_checker),
) -> dict:
    report = await checker.run()
    return {"success": True, "data": report.model_dump()}
