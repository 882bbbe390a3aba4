"""SQLAlchemy ORM models."""

from printshop.models.base import Base
from printshop.models.order import Order
from printshop.models.setting import Setting

__all__ = [
    "Base",
    "Order",
    "Setting",
]
