"""Orders API — price an order, then persist it."""

import uuid
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.api.v1.pricing import missing_fields_response, rejection_response
from printshop.database import get_db
from printshop.dependencies import get_calculator, get_order_repository
from printshop.pricing.calculator import PriceCalculator
from printshop.pricing.errors import PricingError
from printshop.repositories.order import OrderRepository
from printshop.schemas.order import OrderCreate, OrderResponse
from printshop.schemas.pricing import OrderPriceBreakdown

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["orders"])

CUSTOMER_FIELDS = {"customer_name", "customer_phone", "book_title", "notes"}


@router.post("/orders")
async def create_order(
    data: OrderCreate,
    calculator: PriceCalculator = Depends(get_calculator),
    orders: OrderRepository = Depends(get_order_repository),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Price the order and store it. Nothing is stored when pricing rejects it.

    Args:
        data: Book specification plus customer details
        calculator: Engine selected by the pricing flag
        orders: Order repository
        db: Database session

    Returns:
        {"success": true, "data": OrderResponse} or a 400 rejection
    """
    params = data.model_dump(exclude=CUSTOMER_FIELDS)
    missing = missing_fields_response(params)
    if missing is not None:
        return missing

    try:
        price = await calculator.calculate_price(params)
    except PricingError as e:
        logger.info("order_rejected", code=e.code, field=e.field, book_size=data.book_size)
        return rejection_response(e)

    order = await orders.create(
        params,
        price,
        customer_name=data.customer_name,
        customer_phone=data.customer_phone,
        book_title=data.book_title,
        notes=data.notes,
    )
    await db.commit()

    response = OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        book_size=order.book_size,
        quantity=order.quantity,
        total_price=price.total_price,
        status=order.status,
        price=price,
    )
    return {"success": True, "data": response.model_dump()}


@router.get("/orders/{order_id}")
async def get_order(
    order_id: uuid.UUID,
    orders: OrderRepository = Depends(get_order_repository),
) -> dict:
    order = await orders.get(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    response = OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        book_size=order.book_size,
        quantity=order.quantity,
        total_price=float(order.total_price),
        status=order.status,
        price=OrderPriceBreakdown.model_validate(order.price_breakdown),
    )
    return {"success": True, "data": response.model_dump()}
