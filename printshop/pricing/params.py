"""Sanitized order parameters, as both engines consume them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from printshop.pricing.arithmetic import round_up_to_even, to_decimal

# Counts of a trillion or more are rejected before int() expands them
MAX_COUNT_DIGITS = 12


@dataclass(frozen=True)
class PriceParams:
    book_size: str = ""
    paper_type: str = ""
    paper_weight: str = ""
    print_type: str = ""
    page_count_color: int = 0
    page_count_bw: int = 0
    quantity: int = 0
    binding_type: str = ""
    cover_weight: str = ""
    cover_type: str = ""
    lamination_type: str = ""
    extras: tuple[str, ...] = field(default_factory=tuple)

    @property
    def page_count_total(self) -> int:
        return round_up_to_even(self.page_count_color + self.page_count_bw)


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list, tuple)):
        return ""
    return str(value).strip()


def _count(value: Any) -> int:
    """Non-negative integer, truncated. Anything unusable becomes 0."""
    number = to_decimal(value)
    if number.adjusted() >= MAX_COUNT_DIGITS:
        return 0
    return max(int(number), 0)


def _extras(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return ()
    names = (_text(item) for item in value)
    return tuple(name for name in names if name)


def parse_params(raw: Mapping[str, Any]) -> PriceParams:
    return PriceParams(
        book_size=_text(raw.get("book_size")),
        paper_type=_text(raw.get("paper_type")),
        paper_weight=_text(raw.get("paper_weight")),
        print_type=_text(raw.get("print_type")),
        page_count_color=_count(raw.get("page_count_color")),
        page_count_bw=_count(raw.get("page_count_bw")),
        quantity=_count(raw.get("quantity")),
        binding_type=_text(raw.get("binding_type")),
        cover_weight=_text(raw.get("cover_weight") or raw.get("cover_paper_weight")),
        cover_type=_text(raw.get("cover_type")),
        lamination_type=_text(raw.get("lamination_type")),
        extras=_extras(raw.get("extras")),
    )
