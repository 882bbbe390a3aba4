"""Pricing matrix schema — one matrix per book size, stored as JSON."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationInfo, field_validator

PRINT_MODES = ("bw", "color")


class PriceState(str, Enum):
    """How a single price cell reads.

    The constraint layer treats DISABLED (an explicit 0) as unavailable,
    the pricing engine charges it as a free line. Both go through
    ``price_state`` so the rule lives in one place.
    """

    UNSET = "unset"
    DISABLED = "disabled"
    PRICED = "priced"


def price_state(value: Optional[float]) -> PriceState:
    if value is None:
        return PriceState.UNSET
    if value > 0:
        return PriceState.PRICED
    return PriceState.DISABLED


def _non_negative(value: float, label: str) -> float:
    if not value >= 0:
        raise ValueError(f"{label} must be a non-negative number, got {value}")
    return value


def _empty_list_as_dict(value: Any) -> Any:
    # Older admin tooling encodes empty maps as [].
    if isinstance(value, list) and not value:
        return {}
    return value


class ExtraCost(BaseModel):
    """Add-on service price. ``type`` selects the formula."""

    price: float = 0
    type: str = "fixed"  # fixed | per_unit | page_based
    step: int = 0

    @field_validator("price")
    @classmethod
    def _price_non_negative(cls, value: float) -> float:
        return _non_negative(value, "price")


class Restrictions(BaseModel):
    forbidden_paper_types: list[str] = []
    forbidden_binding_types: list[str] = []
    # paper -> [mode], or paper -> weight -> [mode]
    forbidden_print_types: dict[str, Union[list[str], dict[str, list[str]]]] = {}
    forbidden_cover_weights: dict[str, list[str]] = {}
    forbidden_extras: dict[str, list[str]] = {}

    @field_validator(
        "forbidden_print_types",
        "forbidden_cover_weights",
        "forbidden_extras",
        mode="before",
    )
    @classmethod
    def _accept_empty_list(cls, value: Any) -> Any:
        return _empty_list_as_dict(value)

    def forbidden_modes(self, paper_type: str, weight: str) -> set[str]:
        """Print modes forbidden for one paper weight."""
        entry = self.forbidden_print_types.get(paper_type)
        if entry is None:
            return set()
        if isinstance(entry, list):
            return set(entry)
        return set(entry.get(weight, []))

    def is_empty(self) -> bool:
        return not (
            self.forbidden_paper_types
            or self.forbidden_binding_types
            or self.forbidden_print_types
            or self.forbidden_cover_weights
            or self.forbidden_extras
        )


class QuantityConstraints(BaseModel):
    """Advisory bounds for the order form. Not enforced by pricing."""

    minimum_quantity: int = 0
    maximum_quantity: int = 0
    quantity_step: int = 0


class PricingMatrix(BaseModel):
    """Complete, size-scoped pricing configuration."""

    book_size: str = ""
    page_costs: dict[str, dict[str, dict[str, float]]] = {}
    binding_costs: dict[str, Union[float, dict[str, float]]] = {}
    cover_cost: float = 0
    extras_costs: dict[str, ExtraCost] = {}
    restrictions: Restrictions = Restrictions()
    profit_margin: float = 0
    quantity_constraints: QuantityConstraints = QuantityConstraints()

    @field_validator("page_costs", mode="before")
    @classmethod
    def _page_costs(cls, value: Any) -> Any:
        value = _empty_list_as_dict(value)
        if not isinstance(value, dict):
            return value
        cleaned = {}
        for paper, weights in value.items():
            weights = _empty_list_as_dict(weights)
            if isinstance(weights, dict):
                weights = {w: _empty_list_as_dict(modes) for w, modes in weights.items()}
            cleaned[paper] = weights
        return cleaned

    @field_validator("binding_costs", mode="before")
    @classmethod
    def _binding_costs(cls, value: Any) -> Any:
        value = _empty_list_as_dict(value)
        if isinstance(value, dict):
            return {k: _empty_list_as_dict(v) for k, v in value.items()}
        return value

    @field_validator("extras_costs", mode="before")
    @classmethod
    def _extras_costs(cls, value: Any) -> Any:
        return _empty_list_as_dict(value)

    @field_validator("page_costs")
    @classmethod
    def _page_costs_non_negative(
        cls, value: dict[str, dict[str, dict[str, float]]]
    ) -> dict[str, dict[str, dict[str, float]]]:
        for paper, weights in value.items():
            for weight, modes in weights.items():
                for mode, price in modes.items():
                    _non_negative(price, f"page cost {paper}/{weight}/{mode}")
        return value

    @field_validator("binding_costs")
    @classmethod
    def _binding_costs_non_negative(
        cls, value: dict[str, Union[float, dict[str, float]]]
    ) -> dict[str, Union[float, dict[str, float]]]:
        for binding, prices in value.items():
            if isinstance(prices, dict):
                for weight, price in prices.items():
                    _non_negative(price, f"binding cost {binding}/{weight}")
            else:
                _non_negative(prices, f"binding cost {binding}")
        return value

    @field_validator("cover_cost", "profit_margin")
    @classmethod
    def _amount_non_negative(cls, value: float, info: ValidationInfo) -> float:
        return _non_negative(value, info.field_name)

    # -- lookups -------------------------------------------------------

    def page_cost(self, paper_type: str, weight: str, mode: str) -> Optional[float]:
        return self.page_costs.get(paper_type, {}).get(weight, {}).get(mode)

    def has_paper_weight(self, paper_type: str, weight: str) -> bool:
        return weight in self.page_costs.get(paper_type, {})

    def cover_weights(self, binding_type: str) -> list[str]:
        """Cover weights a binding is priced for (empty for flat binding prices)."""
        data = self.binding_costs.get(binding_type)
        if isinstance(data, dict):
            return list(data.keys())
        return []

    def binding_cost(self, binding_type: str, cover_weight: str = "") -> Optional[float]:
        """Binding price, by cover weight when the binding is priced per weight.

        Falls back to the first configured weight only when no cover weight
        is requested. A requested weight the binding is not priced for is
        unset, not defaulted.
        """
        data = self.binding_costs.get(binding_type)
        if data is None:
            return None
        if isinstance(data, dict):
            if cover_weight:
                return data.get(cover_weight)
            if data:
                return next(iter(data.values()))
            return None
        return data

    def priced_modes(self, paper_type: str, weight: str) -> list[str]:
        modes = self.page_costs.get(paper_type, {}).get(weight, {})
        return [m for m in PRINT_MODES if price_state(modes.get(m)) is PriceState.PRICED]

    def is_complete(self) -> bool:
        """At least one positively priced page cell and at least one binding."""
        if not self.binding_costs:
            return False
        for paper_type, weights in self.page_costs.items():
            for weight in weights:
                if self.priced_modes(paper_type, weight):
                    return True
        return False
