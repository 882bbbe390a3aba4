"""Factory defaults: starter matrix, canonical book sizes, legacy tables."""

from __future__ import annotations

from typing import Any

from printshop.schemas.matrix import PricingMatrix

DEFAULT_BOOK_SIZES = ["A5", "A4", "B5", "رقعی", "وزیری", "خشتی"]

PRINT_TYPE_LABELS = {
    "bw": "سیاه و سفید",
    "color": "رنگی",
}

# Setting keys
BOOK_SIZES_KEY = "book_sizes"
ENGINE_FLAG_KEY = "pricing_engine_v2_enabled"
DISCOUNTS_KEY = "pricing_quantity_discounts"


def _cover_weight_prices(start: int, step: int) -> dict[str, float]:
    return {weight: start + step * i for i, weight in enumerate(("200", "250", "300", "350"))}


def default_matrix(book_size: str) -> PricingMatrix:
    """Starter matrix an administrator edits from."""
    return PricingMatrix.model_validate(
        {
            "book_size": book_size,
            "page_costs": {
                "تحریر": {
                    "60": {"bw": 350, "color": 950},
                    "70": {"bw": 380, "color": 980},
                    "80": {"bw": 400, "color": 1000},
                },
                "بالک": {
                    "60": {"bw": 400, "color": 1000},
                    "70": {"bw": 430, "color": 1030},
                    "80": {"bw": 450, "color": 1050},
                    "100": {"bw": 500, "color": 1100},
                },
            },
            "binding_costs": {
                "شومیز": _cover_weight_prices(5000, 500),
                "جلد سخت": _cover_weight_prices(10000, 1000),
                "گالینگور": _cover_weight_prices(8000, 500),
                "سیمی": _cover_weight_prices(3000, 500),
            },
            "extras_costs": {
                "لب گرد": {"price": 1000, "type": "per_unit"},
                "خط تا": {"price": 500, "type": "per_unit"},
                "شیرینک": {"price": 1500, "type": "per_unit"},
            },
            "profit_margin": 0.0,
            "quantity_constraints": {
                "minimum_quantity": 10,
                "maximum_quantity": 10000,
                "quantity_step": 10,
            },
        }
    )


# Legacy engine tables, keyed by their settings key.
LEGACY_DEFAULTS: dict[str, Any] = {
    "pricing_book_sizes": {
        "A5": 1.0,
        "A4": 1.5,
        "B5": 1.2,
        "رقعی": 1.1,
        "وزیری": 1.3,
        "خشتی": 1.4,
    },
    "pricing_paper_types": {
        "glossy": 250,
        "matte": 200,
        "cream": 180,
        "تحریر": 200,
        "بالک": 250,
    },
    "pricing_paper_weights": {
        "تحریر": {"60": 150, "70": 180, "80": 200},
        "بالک": {"60": 200, "70": 230, "80": 250, "100": 300},
    },
    "pricing_print_costs": {"bw": 200, "color": 800},
    "pricing_cover_types": {"soft": 8000, "hard": 15000},
    "pricing_lamination_costs": {"براق": 2000, "مات": 2500, "بدون سلفون": 0},
    "pricing_binding_costs": {
        "شومیز": 3000,
        "جلد سخت": 8000,
        "گالینگور": 6000,
        "سیمی": 2000,
    },
    "pricing_binding_matrix": {
        "شومیز": {"A5": 3000, "A4": 4500, "رقعی": 3500, "وزیری": 4000},
        "جلد سخت": {"A5": 8000, "A4": 12000, "رقعی": 9000, "وزیری": 10000},
    },
    "pricing_options_costs": {},
    "pricing_options_config": {
        "لب گرد": {"price": 1000, "type": "per_unit", "step": 0},
        "خط تا": {"price": 500, "type": "per_unit", "step": 0},
        "شیرینک": {"price": 1500, "type": "per_unit", "step": 0},
        "سوراخ": {"price": 300, "type": "per_unit", "step": 0},
        "شماره گذاری": {"price": 800, "type": "per_unit", "step": 0},
        "بسته‌بندی کارتن": {"price": 50000, "type": "page_based", "step": 16000},
    },
    "pricing_profit_margin": 0,
}
