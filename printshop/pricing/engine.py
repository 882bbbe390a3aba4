"""Pricing Engine — matrix-based price calculation per book size."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog

from printshop.pricing.arithmetic import ceil_div, money, to_decimal
from printshop.pricing.calculator import PriceCalculator, load_discounts, order_totals
from printshop.pricing.defaults import ENGINE_FLAG_KEY, PRINT_TYPE_LABELS
from printshop.pricing.errors import (
    ForbiddenCombination,
    InvalidExtraConfig,
    UnknownBookSize,
    UnpricedBinding,
    UnpricedCombination,
)
from printshop.pricing.legacy import LegacyPricingEngine
from printshop.pricing.params import PriceParams, parse_params
from printshop.repositories.matrix import PricingMatrixRepository
from printshop.repositories.settings import ConfigStore
from printshop.schemas.matrix import PRINT_MODES, PricingMatrix
from printshop.schemas.pricing import CostBreakdown, OrderPriceBreakdown

logger = structlog.get_logger()

_MODE_BY_LABEL = {label: mode for mode, label in PRINT_TYPE_LABELS.items()}


def print_mode(print_type: str) -> Optional[str]:
    """``bw``/``color`` for a print type given as a slug or a Persian label."""
    if print_type in PRINT_MODES:
        return print_type
    return _MODE_BY_LABEL.get(print_type)


def requested_modes(params: PriceParams) -> list[str]:
    """Modes the order actually uses: the chosen print type plus every lane with pages."""
    modes = set()
    mode = print_mode(params.print_type)
    if mode:
        modes.add(mode)
    if params.page_count_bw > 0:
        modes.add("bw")
    if params.page_count_color > 0:
        modes.add("color")
    return [m for m in PRINT_MODES if m in modes]


def check_restrictions(matrix: PricingMatrix, params: PriceParams) -> None:
    """Reject forbidden combinations before any price lookup."""
    restrictions = matrix.restrictions
    size = matrix.book_size or params.book_size

    if params.paper_type in restrictions.forbidden_paper_types:
        raise ForbiddenCombination("paper_type", params.paper_type, size)

    if params.binding_type in restrictions.forbidden_binding_types:
        raise ForbiddenCombination("binding_type", params.binding_type, size)

    forbidden_modes = restrictions.forbidden_modes(params.paper_type, params.paper_weight)
    for mode in requested_modes(params):
        if mode in forbidden_modes:
            raise ForbiddenCombination("print_type", PRINT_TYPE_LABELS[mode], size)

    forbidden_weights = restrictions.forbidden_cover_weights.get(params.binding_type, [])
    if params.cover_weight and params.cover_weight in forbidden_weights:
        raise ForbiddenCombination("cover_weight", params.cover_weight, size)

    forbidden_extras = restrictions.forbidden_extras.get(params.binding_type, [])
    for extra in params.extras:
        if extra in forbidden_extras:
            raise ForbiddenCombination("extras", extra, size)


def extras_costs(
    matrix: PricingMatrix, params: PriceParams
) -> dict[str, Decimal]:
    """Cost of each selected extra. Unknown extra names cost nothing."""
    costs: dict[str, Decimal] = {}
    for name in params.extras:
        config = matrix.extras_costs.get(name)
        if config is None:
            logger.debug("extra_not_configured", extra=name, book_size=matrix.book_size)
            continue
        price = to_decimal(config.price)
        if config.type == "fixed":
            cost = price
        elif config.type == "per_unit":
            cost = price * params.quantity
        elif config.type == "page_based":
            if config.step <= 0:
                raise InvalidExtraConfig(name, reason="step must be positive")
            cost = price * ceil_div(params.page_count_total * params.quantity, config.step)
        else:
            raise InvalidExtraConfig(name, reason=f"unknown type {config.type!r}")
        costs[name] = costs.get(name, Decimal(0)) + cost
    return costs


def price_with_matrix(
    matrix: PricingMatrix,
    params: PriceParams,
    discounts: Mapping[int, Decimal],
) -> OrderPriceBreakdown:
    """Full breakdown for validated parameters against one matrix."""
    check_restrictions(matrix, params)

    paper, weight = params.paper_type, params.paper_weight
    if not matrix.has_paper_weight(paper, weight):
        modes = requested_modes(params) or ["bw"]
        raise UnpricedCombination(paper, weight, modes[0], matrix.book_size)

    units: dict[str, Decimal] = {}
    for mode, pages in (("bw", params.page_count_bw), ("color", params.page_count_color)):
        unit = matrix.page_cost(paper, weight, mode)
        if unit is None and pages > 0:
            raise UnpricedCombination(paper, weight, mode, matrix.book_size)
        units[mode] = to_decimal(unit)

    pages_cost_bw = units["bw"] * params.page_count_bw
    pages_cost_color = units["color"] * params.page_count_color
    total_pages_cost = pages_cost_bw + pages_cost_color

    binding = matrix.binding_cost(params.binding_type, params.cover_weight)
    if binding is None:
        missing_weight = params.cover_weight if params.binding_type in matrix.binding_costs else ""
        raise UnpricedBinding(params.binding_type, matrix.book_size, cover_weight=missing_weight)
    binding_cost = to_decimal(binding)

    cover_cost = to_decimal(matrix.cover_cost)

    extras = extras_costs(matrix, params)
    extras_cost = sum(extras.values(), Decimal(0))

    production_cost = total_pages_cost + cover_cost + binding_cost + extras_cost
    totals = order_totals(
        production_cost * params.quantity,
        params.quantity,
        discounts,
        to_decimal(matrix.profit_margin),
    )

    return OrderPriceBreakdown(
        price_per_book=money(production_cost),
        quantity=params.quantity,
        subtotal=money(totals.subtotal),
        discount_percent=money(totals.discount_percent),
        discount_amount=money(totals.discount_amount),
        total_after_discount=money(totals.total_after_discount),
        profit_margin_percent=money(totals.profit_margin * 100),
        profit_amount=money(totals.profit_amount),
        total_price=money(totals.total_price),
        page_count_total=params.page_count_total,
        pricing_engine=MatrixPricingEngine.name,
        breakdown=CostBreakdown(
            book_size=matrix.book_size or params.book_size,
            pages_cost_bw=money(pages_cost_bw),
            pages_cost_color=money(pages_cost_color),
            total_pages_cost=money(total_pages_cost),
            cover_cost=money(cover_cost),
            binding_cost=money(binding_cost),
            extras_cost=money(extras_cost),
            per_page_cost_bw=money(units["bw"]),
            per_page_cost_color=money(units["color"]),
            extras={name: money(cost) for name, cost in extras.items()},
        ),
    )


class MatrixPricingEngine(PriceCalculator):
    """Prices an order from the matrix configured for its book size."""

    name = "v2_matrix"

    def __init__(self, matrices: PricingMatrixRepository, store: ConfigStore):
        self.matrices = matrices
        self.store = store

    async def calculate_price(self, params: Mapping[str, Any]) -> OrderPriceBreakdown:
        """Validate and price one order.

        Args:
            params: Raw order parameters (strings or numbers, as posted)

        Returns:
            OrderPriceBreakdown with every intermediate amount

        Raises:
            PricingError: Unknown size, forbidden or unpriced combination,
                or a misconfigured extra
        """
        parsed = parse_params(params)
        matrix = await self.matrices.get_matrix(parsed.book_size)
        if matrix is None:
            logger.warning("matrix_not_found", book_size=parsed.book_size)
            raise UnknownBookSize(parsed.book_size)

        result = price_with_matrix(matrix, parsed, await load_discounts(self.store))

        logger.info(
            "price_calculated",
            engine=self.name,
            book_size=matrix.book_size,
            paper=parsed.paper_type,
            weight=parsed.paper_weight,
            binding=parsed.binding_type,
            quantity=parsed.quantity,
            pages=result.page_count_total,
            total=result.total_price,
        )
        return result


def is_v2_enabled(flag_value: Optional[str]) -> bool:
    """The stored flag reads ``"1"`` or ``"true"`` when the matrix engine is on."""
    if flag_value is None:
        return False
    return flag_value.strip().strip('"').lower() in ("1", "true")


async def engine_status(store: ConfigStore) -> dict[str, Any]:
    """Diagnostics for the engine flag."""
    raw = await store.get(ENGINE_FLAG_KEY)
    enabled = is_v2_enabled(raw)
    return {
        "database_value": raw,
        "is_null": raw is None,
        "is_v2_active": enabled,
        "engine": MatrixPricingEngine.name if enabled else LegacyPricingEngine.name,
    }


async def select_calculator(
    store: ConfigStore, matrices: PricingMatrixRepository
) -> PriceCalculator:
    """Pick the engine once, at the start of a calculation."""
    if is_v2_enabled(await store.get(ENGINE_FLAG_KEY)):
        return MatrixPricingEngine(matrices, store)
    return LegacyPricingEngine(store)
