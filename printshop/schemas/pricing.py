"""Pricing schemas for the engines and API."""

from typing import Any, Optional

from pydantic import BaseModel, field_validator


class PriceRequest(BaseModel):
    """Order parameters as posted by the order form.

    Kept loose on purpose: the engines do their own parsing and defaulting.
    """

    book_size: str = ""
    paper_type: str = ""
    paper_weight: str = ""
    print_type: str = ""
    page_count_color: Any = 0
    page_count_bw: Any = 0
    quantity: Any = 0
    binding_type: str = ""
    cover_weight: str = ""
    cover_type: str = ""
    lamination_type: str = ""
    extras: list[str] = []

    model_config = {"extra": "allow", "coerce_numbers_to_str": True}

    @field_validator(
        "book_size",
        "paper_type",
        "paper_weight",
        "print_type",
        "binding_type",
        "cover_weight",
        "cover_type",
        "lamination_type",
        mode="before",
    )
    @classmethod
    def _blank_text(cls, value: Any) -> Any:
        # Forms post null (or an empty array) for untouched selects.
        if value is None or isinstance(value, (dict, list)):
            return ""
        return value

    @field_validator("extras", mode="before")
    @classmethod
    def _extras_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [name.strip() for name in value.split(",") if name.strip()]
        if not isinstance(value, (list, tuple)):
            return []
        names = (str(item).strip() for item in value if isinstance(item, (str, int, float)))
        return [name for name in names if name]


class CostBreakdown(BaseModel):
    """Itemized per-book costs behind a quote."""

    book_size: str
    pages_cost_bw: float
    pages_cost_color: float
    total_pages_cost: float
    cover_cost: float
    binding_cost: float
    extras_cost: float
    per_page_cost_bw: float
    per_page_cost_color: float
    extras: dict[str, float] = {}

    # Legacy engine only
    size_multiplier: Optional[float] = None
    fixed_options_cost: Optional[float] = None
    variable_options_cost: Optional[float] = None

    model_config = {"frozen": True}


class OrderPriceBreakdown(BaseModel):
    """Result of one price calculation. Embedded in the order record."""

    price_per_book: float
    quantity: int
    subtotal: float
    discount_percent: float
    discount_amount: float
    total_after_discount: float
    profit_margin_percent: float
    profit_amount: float
    total_price: float
    page_count_total: int
    pricing_engine: str  # v2_matrix | v1_legacy
    breakdown: CostBreakdown

    model_config = {"frozen": True}


class WeightOption(BaseModel):
    weight: str
    slug: str


class PaperOption(BaseModel):
    type: str
    slug: str
    weights: list[WeightOption] = []


class BindingOption(BaseModel):
    type: str
    slug: str
    cover_weights: list[WeightOption] = []


class PrintTypeOption(BaseModel):
    type: str
    slug: str
    label: str


class ExtraOption(BaseModel):
    name: str
    slug: str
    price: float
    type: str


class AllowedOptionsView(BaseModel):
    """What the order form may offer next, given the choices made so far."""

    book_size: str
    configured: bool = True
    message: Optional[str] = None
    allowed_papers: list[PaperOption] = []
    allowed_bindings: list[BindingOption] = []
    allowed_print_types: list[PrintTypeOption] = []
    allowed_cover_weights: list[WeightOption] = []
    allowed_extras: list[ExtraOption] = []


class ValidationResult(BaseModel):
    """User-facing explanation of why a combination is (not) valid."""

    allowed: bool
    status: str
    message: str
    field: Optional[str] = None
    suggestions: list[str] = []


class BookSizeInfo(BaseModel):
    size: str
    slug: str
    has_pricing: bool
    complete: bool
    paper_count: int = 0
    binding_count: int = 0
    has_restrictions: bool = False
    enabled: bool
