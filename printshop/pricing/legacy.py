"""Legacy pricing engine — flat tables with a book-size multiplier.

Kept for shops that have not configured pricing matrices yet. Selected
when the ``pricing_engine_v2_enabled`` flag is off.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

import structlog

from printshop.pricing.arithmetic import ceil_div, money, to_decimal
from printshop.pricing.calculator import PriceCalculator, load_discounts, order_totals
from printshop.pricing.defaults import LEGACY_DEFAULTS
from printshop.pricing.params import parse_params
from printshop.repositories.settings import ConfigStore
from printshop.schemas.pricing import CostBreakdown, OrderPriceBreakdown

logger = structlog.get_logger()

DEFAULT_PAPER_COST = Decimal(250)
DEFAULT_COVER_COST = Decimal(8000)
DEFAULT_OPTION_STEP = 16000


def _table(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


class LegacyPricingEngine(PriceCalculator):
    """Per-page cost = (paper base + print cost) x size multiplier."""

    name = "v1_legacy"

    def __init__(self, store: ConfigStore):
        self.store = store

    async def load_config(self) -> dict[str, Any]:
        """Every legacy table, falling back to its default when unset."""
        config = {}
        for key, default in LEGACY_DEFAULTS.items():
            config[key] = await self.store.get_json(key, default)
        return config

    async def calculate_price(self, params: Mapping[str, Any]) -> OrderPriceBreakdown:
        config = await self.load_config()
        result = price_with_tables(config, params, await load_discounts(self.store))
        logger.info(
            "price_calculated",
            engine=self.name,
            book_size=result.breakdown.book_size,
            quantity=result.quantity,
            pages=result.page_count_total,
            total=result.total_price,
        )
        return result


def _option_configs(config: Mapping[str, Any]) -> dict[str, dict]:
    options = {
        name: option
        for name, option in _table(config.get("pricing_options_config")).items()
        if isinstance(option, dict)
    }
    # Old flat format: name -> price, always fixed
    for name, price in _table(config.get("pricing_options_costs")).items():
        options.setdefault(name, {"price": price, "type": "fixed", "step": 0})
    return options


def price_with_tables(
    config: Mapping[str, Any],
    raw_params: Mapping[str, Any],
    discounts: Mapping[int, Decimal],
) -> OrderPriceBreakdown:
    params = parse_params(raw_params)
    size = params.book_size
    cover_type = params.cover_type or "soft"
    lamination = params.lamination_type or "براق"

    multiplier = to_decimal(_table(config.get("pricing_book_sizes")).get(size), Decimal(1))

    weights = _table(_table(config.get("pricing_paper_weights")).get(params.paper_type))
    if params.paper_weight in weights:
        paper_cost = to_decimal(weights[params.paper_weight])
    else:
        paper_cost = to_decimal(
            _table(config.get("pricing_paper_types")).get(params.paper_type), DEFAULT_PAPER_COST
        )
        logger.debug(
            "legacy_paper_weight_fallback",
            paper=params.paper_type,
            weight=params.paper_weight,
            cost=str(paper_cost),
        )

    print_costs = _table(config.get("pricing_print_costs"))
    per_page_bw = (paper_cost + to_decimal(print_costs.get("bw"), Decimal(200))) * multiplier
    per_page_color = (paper_cost + to_decimal(print_costs.get("color"), Decimal(800))) * multiplier

    pages_cost_bw = per_page_bw * params.page_count_bw
    pages_cost_color = per_page_color * params.page_count_color
    total_pages_cost = pages_cost_bw + pages_cost_color

    cover_cost = to_decimal(
        _table(config.get("pricing_cover_types")).get(cover_type), DEFAULT_COVER_COST
    ) + to_decimal(_table(config.get("pricing_lamination_costs")).get(lamination))

    by_size = _table(_table(config.get("pricing_binding_matrix")).get(params.binding_type))
    if size in by_size:
        binding_cost = to_decimal(by_size[size])
    else:
        binding_cost = to_decimal(
            _table(config.get("pricing_binding_costs")).get(params.binding_type)
        )

    # Fixed options are per book; per-unit and page-based ones already
    # cover the whole order and are added after the quantity multiplication.
    fixed_cost = Decimal(0)
    variable_cost = Decimal(0)
    itemized: dict[str, Decimal] = {}
    options = _option_configs(config)
    for name in params.extras:
        option = options.get(name)
        if option is None:
            logger.debug("legacy_option_not_configured", option=name)
            continue
        price = to_decimal(option.get("price"))
        kind = option.get("type", "fixed")
        step = int(to_decimal(option.get("step"), Decimal(DEFAULT_OPTION_STEP)))
        if kind == "per_unit":
            cost = price * params.quantity
            variable_cost += cost
        elif kind == "page_based":
            if step > 0:
                units = max(1, ceil_div(params.page_count_total * params.quantity, step))
                cost = price * units
            else:
                cost = price
            variable_cost += cost
        else:
            cost = price
            fixed_cost += cost
        itemized[name] = itemized.get(name, Decimal(0)) + cost

    production_cost = total_pages_cost + cover_cost + binding_cost + fixed_cost
    totals = order_totals(
        production_cost * params.quantity + variable_cost,
        params.quantity,
        discounts,
        to_decimal(config.get("pricing_profit_margin")),
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
        pricing_engine=LegacyPricingEngine.name,
        breakdown=CostBreakdown(
            book_size=size,
            pages_cost_bw=money(pages_cost_bw),
            pages_cost_color=money(pages_cost_color),
            total_pages_cost=money(total_pages_cost),
            cover_cost=money(cover_cost),
            binding_cost=money(binding_cost),
            extras_cost=money(fixed_cost + variable_cost),
            per_page_cost_bw=money(per_page_bw),
            per_page_cost_color=money(per_page_color),
            extras={name: money(cost) for name, cost in itemized.items()},
            size_multiplier=money(multiplier),
            fixed_options_cost=money(fixed_cost),
            variable_options_cost=money(variable_cost),
        ),
    )
