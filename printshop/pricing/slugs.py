"""Persian label <-> slug mapping for the order form."""

from __future__ import annotations

import re
from functools import lru_cache

_NON_WORD = re.compile(r"[\W_]+")
_SPACES = re.compile(r"\s+")


@lru_cache(maxsize=1)
def slug_mapping() -> dict[str, str]:
    return {
        # Paper types
        "تحریر": "tahrir",
        "بالک": "bulk",
        "گلاسه": "glossy",
        # Binding types
        "شومیز": "shomiz",
        "جلد سخت": "hard-cover",
        "گالینگور": "galingoor",
        "سیمی": "simi",
        "منگنه": "mangane",
        # Print types
        "سیاه و سفید": "bw",
        "رنگی": "color",
        # Extras
        "لب گرد": "rounded-corner",
        "خط تا": "creasing",
        "شیرینک": "shrink",
        "سوراخ": "hole-punch",
        "شماره گذاری": "numbering",
        "سلفون براق": "glossy-lamination",
        "سلفون مات": "matte-lamination",
        # Book sizes
        "a5": "a5",
        "a4": "a4",
        "b5": "b5",
        "رقعی": "roghei",
        "وزیری": "vaziri",
        "خشتی": "kheshti",
    }


@lru_cache(maxsize=1)
def _reverse_mapping() -> dict[str, str]:
    return {slug: label for label, slug in slug_mapping().items()}


def slugify(label: str) -> str:
    label = _SPACES.sub(" ", label.strip()).lower()
    mapped = slug_mapping().get(label)
    if mapped is not None:
        return mapped
    return _NON_WORD.sub("-", label).strip("-")


def unslugify(slug: str) -> str:
    """Label for a known slug; unknown slugs are returned unchanged."""
    return _reverse_mapping().get(slug, slug)


def clear_slug_cache() -> None:
    slug_mapping.cache_clear()
    _reverse_mapping.cache_clear()
