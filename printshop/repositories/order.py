"""Order repository — persists priced orders."""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.models.order import Order
from printshop.schemas.pricing import OrderPriceBreakdown

logger = structlog.get_logger()

SPECIFICATION_FIELDS = (
    "book_size",
    "paper_type",
    "paper_weight",
    "print_type",
    "page_count_color",
    "page_count_bw",
    "binding_type",
    "cover_weight",
    "cover_type",
    "lamination_type",
    "extras",
)


def generate_order_number() -> str:
    """``PS-YYYYMMDD-XXXXXX``."""
    today = datetime.now(timezone.utc).strftime("%Y%m%d")
    return f"PS-{today}-{secrets.token_hex(3).upper()}"


class OrderRepository:
    """Creates orders. Only ever called with a successful price."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        params: Mapping[str, Any],
        price: OrderPriceBreakdown,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        book_title: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Order:
        """Create an order from posted parameters and their computed price.

        Args:
            params: Order parameters as posted
            price: Breakdown returned by the pricing engine
            customer_name: Customer's name
            customer_phone: Customer's phone
            book_title: Title printed on the order sheet
            notes: Free-form notes

        Returns:
            Created Order object (flushed, not committed)
        """
        specification = {field: params.get(field) for field in SPECIFICATION_FIELDS}

        order = Order(
            order_number=generate_order_number(),
            customer_name=customer_name,
            customer_phone=customer_phone,
            book_title=book_title,
            book_size=price.breakdown.book_size,
            specification=specification,
            quantity=price.quantity,
            page_count_total=price.page_count_total,
            total_price=Decimal(str(price.total_price)),
            price_breakdown=price.model_dump(mode="json"),
            pricing_engine=price.pricing_engine,
            status="pending",
            notes=notes,
        )

        self.db.add(order)
        await self.db.flush()

        logger.info(
            "order_created",
            order_id=str(order.id),
            order_number=order.order_number,
            book_size=order.book_size,
            quantity=order.quantity,
            total=price.total_price,
        )

        return order

    async def get(self, order_id: uuid.UUID) -> Optional[Order]:
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        return result.scalar_one_or_none()
