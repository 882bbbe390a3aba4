"""Order schemas for API."""

from typing import Optional

from pydantic import BaseModel

from printshop.schemas.pricing import OrderPriceBreakdown, PriceRequest


class OrderCreate(PriceRequest):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    book_title: Optional[str] = None
    notes: Optional[str] = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    book_size: str
    quantity: int
    total_price: float
    status: str
    price: OrderPriceBreakdown
