"""Common interface and order totals for the pricing engines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from printshop.pricing.arithmetic import HUNDRED, discount_percent, parse_discount_table
from printshop.pricing.defaults import DISCOUNTS_KEY
from printshop.repositories.settings import ConfigStore
from printshop.schemas.pricing import OrderPriceBreakdown


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total_after_discount: Decimal
    profit_margin: Decimal
    profit_amount: Decimal
    total_price: Decimal


def order_totals(
    subtotal: Decimal,
    quantity: int,
    discounts: Mapping[int, Decimal],
    profit_margin: Decimal,
) -> OrderTotals:
    """Discount, then margin on the discounted amount."""
    percent = discount_percent(quantity, discounts)
    discount_amount = subtotal * percent / HUNDRED
    after_discount = subtotal - discount_amount
    profit_amount = after_discount * profit_margin
    return OrderTotals(
        subtotal=subtotal,
        discount_percent=percent,
        discount_amount=discount_amount,
        total_after_discount=after_discount,
        profit_margin=profit_margin,
        profit_amount=profit_amount,
        total_price=after_discount + profit_amount,
    )


async def load_discounts(store: ConfigStore) -> dict[int, Decimal]:
    raw = await store.get_json(DISCOUNTS_KEY)
    if raw is not None and not isinstance(raw, dict):
        # Empty table stored as []
        raw = {}
    return parse_discount_table(raw)


class PriceCalculator(ABC):
    """One pricing strategy. Raises ``PricingError`` subclasses on rejection."""

    name: str

    @abstractmethod
    async def calculate_price(self, params: Mapping[str, Any]) -> OrderPriceBreakdown:
        ...
