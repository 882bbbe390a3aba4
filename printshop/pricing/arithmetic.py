"""Pure arithmetic shared by both pricing engines."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

DEFAULT_QUANTITY_DISCOUNTS: dict[int, Decimal] = {100: Decimal(10), 50: Decimal(5)}

HUNDRED = Decimal(100)


def round_up_to_even(pages: int) -> int:
    """Books are bound in even-page increments."""
    return pages + (pages % 2)


def ceil_div(numerator: int, step: int) -> int:
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    return -(-numerator // step)


def to_decimal(value: Any, default: Decimal = Decimal(0)) -> Decimal:
    """Decimal from a stored number; ``default`` for anything unparseable.

    Floats go through ``str`` so 0.1 stays 0.1.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def parse_discount_table(raw: Optional[Mapping[Any, Any]]) -> dict[int, Decimal]:
    """Normalize a stored ``threshold -> percent`` table.

    ``None`` (key absent) yields the default table; an empty mapping means
    no discounts. Rows with a non-numeric threshold are dropped.
    """
    if raw is None:
        return dict(DEFAULT_QUANTITY_DISCOUNTS)
    table: dict[int, Decimal] = {}
    for threshold, percent in raw.items():
        try:
            key = int(str(threshold).strip())
        except ValueError:
            continue
        table[key] = to_decimal(percent)
    return table


def discount_percent(quantity: int, table: Mapping[int, Decimal]) -> Decimal:
    """Percent for the highest threshold not above ``quantity``. Not cumulative."""
    eligible = [threshold for threshold in table if threshold <= quantity]
    if not eligible:
        return Decimal(0)
    return table[max(eligible)]


def money(value: Decimal) -> float:
    return float(value)
