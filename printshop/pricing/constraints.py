"""Constraint engine — what the order form may offer at each step.

Each dimension is resolved on its own from whatever has been selected so
far (size -> paper -> weight -> print mode -> binding -> cover weight ->
extras). There is no search across dimensions.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from printshop.pricing.defaults import BOOK_SIZES_KEY, DEFAULT_BOOK_SIZES, PRINT_TYPE_LABELS
from printshop.pricing.engine import requested_modes
from printshop.pricing.keys import normalize_book_size
from printshop.pricing.params import PriceParams, parse_params
from printshop.pricing.slugs import slugify, unslugify
from printshop.repositories.matrix import PricingMatrixRepository
from printshop.repositories.settings import ConfigStore
from printshop.schemas.matrix import PRINT_MODES, PricingMatrix
from printshop.schemas.pricing import (
    AllowedOptionsView,
    BindingOption,
    BookSizeInfo,
    ExtraOption,
    PaperOption,
    PrintTypeOption,
    ValidationResult,
    WeightOption,
)

logger = structlog.get_logger()


def allowed_modes(matrix: PricingMatrix, paper_type: str, weight: str) -> list[str]:
    """Print modes that are positively priced and not forbidden."""
    forbidden = matrix.restrictions.forbidden_modes(paper_type, weight)
    return [mode for mode in matrix.priced_modes(paper_type, weight) if mode not in forbidden]


def allowed_cover_weights(matrix: PricingMatrix, binding_type: str) -> list[str]:
    forbidden = matrix.restrictions.forbidden_cover_weights.get(binding_type, [])
    return [w for w in matrix.cover_weights(binding_type) if w not in forbidden]


def allowed_extra_names(matrix: PricingMatrix, binding_type: str) -> list[str]:
    forbidden = matrix.restrictions.forbidden_extras.get(binding_type, [])
    return [name for name in matrix.extras_costs if name not in forbidden]


def _selected(value: Any, known: Mapping[str, Any]) -> str:
    """A selected label, or the label behind a slug this module handed out."""
    text = str(value or "").strip()
    if not text or text in known:
        return text
    return unslugify(text)


def _print_option(mode: str) -> PrintTypeOption:
    return PrintTypeOption(type=mode, slug=mode, label=PRINT_TYPE_LABELS[mode])


def build_allowed_options(
    matrix: PricingMatrix, selection: Mapping[str, Any]
) -> AllowedOptionsView:
    """Allowed next-step options for one matrix and a partial selection."""
    restrictions = matrix.restrictions
    paper_type = _selected(selection.get("paper_type"), matrix.page_costs)
    paper_weight = str(selection.get("paper_weight") or "").strip()
    binding_type = _selected(selection.get("binding_type"), matrix.binding_costs)

    papers = []
    for paper, weights in matrix.page_costs.items():
        if paper in restrictions.forbidden_paper_types:
            continue
        usable = [w for w in weights if allowed_modes(matrix, paper, w)]
        if not usable:
            continue
        papers.append(
            PaperOption(
                type=paper,
                slug=slugify(paper),
                weights=[WeightOption(weight=w, slug=slugify(f"{paper}-{w}")) for w in usable],
            )
        )

    bindings = []
    for binding in matrix.binding_costs:
        if binding in restrictions.forbidden_binding_types:
            continue
        if matrix.binding_cost(binding) is None:
            continue
        bindings.append(
            BindingOption(
                type=binding,
                slug=slugify(binding),
                cover_weights=[
                    WeightOption(weight=w, slug=slugify(w))
                    for w in allowed_cover_weights(matrix, binding)
                ],
            )
        )

    print_types = []
    if (
        paper_type in matrix.page_costs
        and paper_type not in restrictions.forbidden_paper_types
    ):
        if paper_weight:
            modes = allowed_modes(matrix, paper_type, paper_weight)
        else:
            union = set()
            for weight in matrix.page_costs[paper_type]:
                union.update(allowed_modes(matrix, paper_type, weight))
            modes = [m for m in PRINT_MODES if m in union]
        print_types = [_print_option(mode) for mode in modes]

    cover_weights = []
    extras = []
    if binding_type:
        cover_weights = [
            WeightOption(weight=w, slug=slugify(w))
            for w in allowed_cover_weights(matrix, binding_type)
        ]
        extras = [
            ExtraOption(
                name=name,
                slug=slugify(name),
                price=matrix.extras_costs[name].price,
                type=matrix.extras_costs[name].type,
            )
            for name in allowed_extra_names(matrix, binding_type)
        ]

    return AllowedOptionsView(
        book_size=matrix.book_size,
        allowed_papers=papers,
        allowed_bindings=bindings,
        allowed_print_types=print_types,
        allowed_cover_weights=cover_weights,
        allowed_extras=extras,
    )


def check_combination(matrix: PricingMatrix, params: PriceParams) -> ValidationResult:
    """Explain the first problem with a full selection, with alternatives."""
    restrictions = matrix.restrictions
    size = params.book_size
    paper = params.paper_type
    weight = params.paper_weight
    binding = params.binding_type

    if paper:
        if paper in restrictions.forbidden_paper_types:
            return ValidationResult(
                allowed=False,
                status="forbidden_paper_type",
                message=f"کاغذ {paper} برای قطع {size} مجاز نیست",
                field="paper_type",
                suggestions=[p.type for p in build_allowed_options(matrix, {}).allowed_papers],
            )
        if paper not in matrix.page_costs:
            return ValidationResult(
                allowed=False,
                status="unknown_paper_type",
                message=f"کاغذ {paper} برای قطع {size} تعریف نشده است",
                field="paper_type",
                suggestions=[p.type for p in build_allowed_options(matrix, {}).allowed_papers],
            )
        if weight and not matrix.has_paper_weight(paper, weight):
            return ValidationResult(
                allowed=False,
                status="unknown_paper_weight",
                message=f"گرماژ {weight} برای کاغذ {paper} تعریف نشده است",
                field="paper_weight",
                suggestions=[w for w in matrix.page_costs[paper] if allowed_modes(matrix, paper, w)],
            )
        forbidden_modes = restrictions.forbidden_modes(paper, weight)
        for mode in requested_modes(params):
            if mode in forbidden_modes:
                return ValidationResult(
                    allowed=False,
                    status="forbidden_print_type",
                    message=(
                        f"چاپ {PRINT_TYPE_LABELS[mode]} "
                        f"برای کاغذ {paper} در قطع {size} مجاز نیست"
                    ),
                    field="print_type",
                    suggestions=allowed_modes(matrix, paper, weight),
                )

    if binding:
        alternatives = [b.type for b in build_allowed_options(matrix, {}).allowed_bindings]
        if binding in restrictions.forbidden_binding_types:
            return ValidationResult(
                allowed=False,
                status="forbidden_binding_type",
                message=f"صحافی {binding} برای قطع {size} مجاز نیست",
                field="binding_type",
                suggestions=alternatives,
            )
        if binding not in matrix.binding_costs:
            return ValidationResult(
                allowed=False,
                status="unknown_binding_type",
                message=f"صحافی {binding} برای قطع {size} تعریف نشده است",
                field="binding_type",
                suggestions=alternatives,
            )

    if params.cover_weight and params.cover_weight in restrictions.forbidden_cover_weights.get(binding, []):
        return ValidationResult(
            allowed=False,
            status="forbidden_cover_weight",
            message=f"گرماژ جلد {params.cover_weight} برای صحافی {binding} مجاز نیست",
            field="cover_weight",
            suggestions=allowed_cover_weights(matrix, binding),
        )

    priced_weights = matrix.cover_weights(binding)
    if params.cover_weight and priced_weights and params.cover_weight not in priced_weights:
        return ValidationResult(
            allowed=False,
            status="unknown_cover_weight",
            message=f"گرماژ جلد {params.cover_weight} برای صحافی {binding} تنظیم نشده است",
            field="cover_weight",
            suggestions=allowed_cover_weights(matrix, binding),
        )

    forbidden_extras = restrictions.forbidden_extras.get(binding, [])
    for extra in params.extras:
        if extra in forbidden_extras:
            return ValidationResult(
                allowed=False,
                status="forbidden_extra",
                message=f"خدمت اضافی «{extra}» برای صحافی {binding} مجاز نیست",
                field="extras",
                suggestions=allowed_extra_names(matrix, binding),
            )

    return ValidationResult(allowed=True, status="valid", message="ترکیب معتبر است")


class ConstraintEngine:
    """Filters pricing matrices into form options and explanations."""

    def __init__(self, matrices: PricingMatrixRepository, store: ConfigStore):
        self.matrices = matrices
        self.store = store

    async def get_allowed_options(
        self, current_selection: Mapping[str, Any], book_size: str
    ) -> AllowedOptionsView:
        matrix = await self.matrices.get_matrix(book_size)
        if matrix is None:
            logger.info("allowed_options_unconfigured", book_size=book_size)
            return AllowedOptionsView(
                book_size=book_size,
                configured=False,
                message=f"قطع {book_size} پیکربندی نشده است",
            )
        return build_allowed_options(matrix, current_selection)

    async def validate_combination(self, params: Mapping[str, Any]) -> ValidationResult:
        """User-facing explanation only; pricing does its own checks."""
        parsed = parse_params(params)
        matrix = await self.matrices.get_matrix(parsed.book_size)
        if matrix is None:
            return ValidationResult(
                allowed=False,
                status="invalid_book_size",
                message=f"قطع {parsed.book_size} پشتیبانی نمی‌شود",
                field="book_size",
                suggestions=[
                    info.size for info in await self.get_available_book_sizes()
                ],
            )
        return check_combination(matrix, parsed)

    async def canonical_book_sizes(self) -> list[str]:
        """Book sizes defined in product parameters."""
        sizes = await self.store.get_json(BOOK_SIZES_KEY)
        if not isinstance(sizes, list):
            return list(DEFAULT_BOOK_SIZES)
        return [str(size).strip() for size in sizes if str(size).strip()]

    async def get_available_book_sizes(self, include_disabled: bool = False) -> list[BookSizeInfo]:
        """Canonical sizes with pricing status; end users only see enabled ones."""
        matrices = await self.matrices.get_all()
        sizes = []
        for size in await self.canonical_book_sizes():
            matrix = matrices.get(normalize_book_size(size))
            if matrix is None:
                info = BookSizeInfo(
                    size=size,
                    slug=slugify(normalize_book_size(size)),
                    has_pricing=False,
                    complete=False,
                    enabled=False,
                )
            else:
                view = build_allowed_options(matrix, {})
                complete = matrix.is_complete()
                info = BookSizeInfo(
                    size=size,
                    slug=slugify(normalize_book_size(size)),
                    has_pricing=True,
                    complete=complete,
                    paper_count=len(view.allowed_papers),
                    binding_count=len(view.allowed_bindings),
                    has_restrictions=not matrix.restrictions.is_empty(),
                    enabled=complete and bool(view.allowed_papers) and bool(view.allowed_bindings),
                )
            if info.enabled or include_disabled:
                sizes.append(info)
        return sizes
