"""Pricing rejections.

Every failure the engines can report is a ``PricingError`` subclass carrying
the offending field so the order form can highlight it. Callers at the
HTTP boundary turn these into the ``{"success": false}`` envelope; none of
them may lead to an order record.
"""

from __future__ import annotations

from typing import Any, Optional


class PricingError(Exception):
    """Base class for structured pricing rejections."""

    code = "pricing_error"

    def __init__(self, message: str, field: Optional[str] = None, **context: Any):
        super().__init__(message)
        self.message = message
        self.field = field
        self.context = context

    def details(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "field": self.field,
            "message": self.message,
            **self.context,
        }


class UnknownBookSize(PricingError):
    code = "unknown_book_size"

    def __init__(self, book_size: str):
        super().__init__(
            f"قیمت‌گذاری برای قطع {book_size} تنظیم نشده است",
            field="book_size",
            book_size=book_size,
        )
        self.book_size = book_size


class ForbiddenCombination(PricingError):
    code = "forbidden_combination"

    _LABELS = {
        "paper_type": "کاغذ",
        "binding_type": "صحافی",
        "print_type": "چاپ",
        "cover_weight": "گرماژ جلد",
        "extras": "خدمت اضافی",
    }

    def __init__(self, field: str, value: str, book_size: str):
        label = self._LABELS.get(field, field)
        super().__init__(
            f"{label} {value} برای قطع {book_size} مجاز نیست",
            field=field,
            value=value,
            book_size=book_size,
        )
        self.value = value


class UnpricedCombination(PricingError):
    code = "unpriced_combination"

    def __init__(self, paper_type: str, weight: str, print_type: str, book_size: str = ""):
        super().__init__(
            f"قیمت چاپ {print_type} برای کاغذ {paper_type} گرماژ {weight} "
            f"در قطع {book_size} تنظیم نشده است",
            field="paper_type",
            paper_type=paper_type,
            weight=weight,
            print_type=print_type,
        )
        self.paper_type = paper_type
        self.weight = weight
        self.print_type = print_type


class UnpricedBinding(PricingError):
    code = "unpriced_binding"

    def __init__(self, binding_type: str, book_size: str = "", cover_weight: str = ""):
        if cover_weight:
            message = (
                f"قیمت صحافی {binding_type} با گرماژ جلد {cover_weight} "
                f"برای قطع {book_size} تنظیم نشده است"
            )
            field = "cover_weight"
        else:
            message = f"قیمت صحافی {binding_type} برای قطع {book_size} تنظیم نشده است"
            field = "binding_type"
        super().__init__(
            message,
            field=field,
            binding_type=binding_type,
            cover_weight=cover_weight,
        )
        self.binding_type = binding_type
        self.cover_weight = cover_weight


class InvalidExtraConfig(PricingError):
    code = "invalid_extra_config"

    def __init__(self, extra_name: str, reason: str = ""):
        super().__init__(
            f"تنظیمات خدمت اضافی «{extra_name}» نامعتبر است",
            field="extras",
            extra_name=extra_name,
            reason=reason,
        )
        self.extra_name = extra_name
