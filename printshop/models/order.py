"""Print orders — persisted only after a successful price calculation."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from printshop.models.base import Base, TimestampMixin, UUIDMixin


class Order(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)

    # Customer (denormalized, no accounts here)
    customer_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Book specification
    book_title: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    book_size: Mapped[str] = mapped_column(String(100), nullable=False)
    specification: Mapped[dict] = mapped_column(JSON, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    page_count_total: Mapped[int] = mapped_column(Integer, nullable=False)

    # Price
    total_price: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    price_breakdown: Mapped[dict] = mapped_column(JSON, nullable=False)
    pricing_engine: Mapped[str] = mapped_column(String(20), nullable=False)

    status: Mapped[str] = mapped_column(String(30), default="pending")  # pending|processing|completed|cancelled
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
