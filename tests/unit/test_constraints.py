"""Tests for the constraint engine (allowed options and combination checks)."""

import pytest

from printshop.pricing.constraints import (
    ConstraintEngine,
    build_allowed_options,
    check_combination,
)
from printshop.pricing.engine import price_with_matrix
from printshop.pricing.errors import ForbiddenCombination, PricingError
from printshop.pricing.params import parse_params
from printshop.pricing.slugs import clear_slug_cache, slugify, unslugify


def _papers(view):
    return {paper.type: [w.weight for w in paper.weights] for paper in view.allowed_papers}


class TestAllowedOptions:
    def test_papers_filter_forbidden_and_zero_priced(self, restricted_matrix):
        view = build_allowed_options(restricted_matrix, {})

        # بالک forbidden; تحریر 80 only has zero prices; گلاسه keeps color
        assert _papers(view) == {"تحریر": ["60", "70"], "گلاسه": ["100"]}

    def test_weight_slugs(self, restricted_matrix):
        view = build_allowed_options(restricted_matrix, {})
        tahrir = next(p for p in view.allowed_papers if p.type == "تحریر")
        assert tahrir.slug == "tahrir"
        assert tahrir.weights[0].slug == "تحریر-60"

    def test_bindings_filter_forbidden(self, restricted_matrix):
        view = build_allowed_options(restricted_matrix, {})
        bindings = {b.type: [w.weight for w in b.cover_weights] for b in view.allowed_bindings}
        assert bindings == {"شومیز": ["200", "250"], "سیمی": []}

    def test_print_types_need_paper(self, restricted_matrix):
        assert build_allowed_options(restricted_matrix, {}).allowed_print_types == []

    def test_print_types_for_paper_and_weight(self, restricted_matrix):
        def modes(selection):
            view = build_allowed_options(restricted_matrix, selection)
            return [p.type for p in view.allowed_print_types]

        # color forbidden at 60, zero priced at 70
        assert modes({"paper_type": "تحریر", "paper_weight": "60"}) == ["bw"]
        assert modes({"paper_type": "تحریر", "paper_weight": "70"}) == ["bw"]
        assert modes({"paper_type": "گلاسه", "paper_weight": "100"}) == ["color"]

    def test_print_types_union_without_weight(self, restricted_matrix):
        view = build_allowed_options(restricted_matrix, {"paper_type": "گلاسه"})
        assert [p.type for p in view.allowed_print_types] == ["color"]
        assert view.allowed_print_types[0].label == "رنگی"

    def test_selection_by_slug(self, restricted_matrix):
        by_label = build_allowed_options(
            restricted_matrix, {"paper_type": "تحریر", "paper_weight": "60", "binding_type": "شومیز"}
        )
        by_slug = build_allowed_options(
            restricted_matrix, {"paper_type": "tahrir", "paper_weight": "60", "binding_type": "shomiz"}
        )
        assert by_slug == by_label
        assert [p.type for p in by_slug.allowed_print_types] == ["bw"]
        assert [w.weight for w in by_slug.allowed_cover_weights] == ["200", "250"]

    def test_forbidden_paper_offers_no_print_types(self, restricted_matrix):
        view = build_allowed_options(restricted_matrix, {"paper_type": "بالک"})
        assert view.allowed_print_types == []

    def test_cover_weights_and_extras_need_binding(self, restricted_matrix):
        view = build_allowed_options(restricted_matrix, {"binding_type": "شومیز"})
        assert [w.weight for w in view.allowed_cover_weights] == ["200", "250"]
        assert [e.name for e in view.allowed_extras] == ["لب گرد", "خط تا", "شیرینک"]

        view = build_allowed_options(restricted_matrix, {"binding_type": "سیمی"})
        assert view.allowed_cover_weights == []
        assert [e.name for e in view.allowed_extras] == ["خط تا", "شیرینک"]

    def test_forbidden_paper_never_offered_and_always_rejected(self, restricted_matrix):
        forbidden = restricted_matrix.restrictions.forbidden_paper_types
        view = build_allowed_options(restricted_matrix, {})
        offered = {paper.type for paper in view.allowed_papers}

        for paper in forbidden:
            assert paper not in offered
            params = parse_params(
                {
                    "book_size": "وزیری",
                    "paper_type": paper,
                    "paper_weight": "80",
                    "page_count_bw": 10,
                    "quantity": 10,
                    "binding_type": "سیمی",
                }
            )
            with pytest.raises(ForbiddenCombination):
                price_with_matrix(restricted_matrix, params, {})


class TestCheckCombination:
    def _check(self, matrix, **params):
        base = {"book_size": "وزیری", "paper_type": "تحریر", "paper_weight": "70", "binding_type": "سیمی"}
        base.update(params)
        return check_combination(matrix, parse_params(base))

    def test_valid(self, restricted_matrix):
        result = self._check(restricted_matrix)
        assert result.allowed
        assert result.status == "valid"

    @pytest.mark.parametrize(
        "params, status, field",
        [
            ({"paper_type": "بالک"}, "forbidden_paper_type", "paper_type"),
            ({"paper_type": "کرافت"}, "unknown_paper_type", "paper_type"),
            ({"paper_weight": "90"}, "unknown_paper_weight", "paper_weight"),
            ({"paper_type": "گلاسه", "paper_weight": "100", "print_type": "bw"}, "forbidden_print_type", "print_type"),
            ({"binding_type": "جلد سخت"}, "forbidden_binding_type", "binding_type"),
            ({"binding_type": "گالینگور"}, "unknown_binding_type", "binding_type"),
            ({"binding_type": "شومیز", "cover_weight": "300"}, "forbidden_cover_weight", "cover_weight"),
            ({"binding_type": "شومیز", "cover_weight": "999"}, "unknown_cover_weight", "cover_weight"),
            ({"extras": ["لب گرد"]}, "forbidden_extra", "extras"),
            # Persian label for a forbidden mode
            ({"paper_weight": "60", "print_type": "رنگی"}, "forbidden_print_type", "print_type"),
            # bw requested but the color lane has pages
            ({"paper_weight": "60", "print_type": "bw", "page_count_color": 10}, "forbidden_print_type", "print_type"),
        ],
    )
    def test_rejections(self, restricted_matrix, params, status, field):
        result = self._check(restricted_matrix, **params)
        assert not result.allowed
        assert result.status == status
        assert result.field == field
        assert result.message

    @pytest.mark.parametrize(
        "params",
        [
            {"paper_weight": "60", "print_type": "رنگی"},
            {"paper_weight": "60", "print_type": "bw", "page_count_color": 10},
            {"paper_weight": "60", "page_count_bw": 10},
            {"paper_type": "گلاسه", "paper_weight": "100", "page_count_color": 4},
            {"paper_type": "گلاسه", "paper_weight": "100", "page_count_bw": 4},
            {"binding_type": "شومیز", "cover_weight": "999"},
            {"binding_type": "شومیز", "cover_weight": "250"},
        ],
    )
    def test_agrees_with_pricing(self, restricted_matrix, params):
        base = {
            "book_size": "وزیری",
            "paper_type": "تحریر",
            "paper_weight": "70",
            "binding_type": "سیمی",
            "quantity": 10,
        }
        base.update(params)
        parsed = parse_params(base)

        result = check_combination(restricted_matrix, parsed)
        try:
            price_with_matrix(restricted_matrix, parsed, {})
            priced = True
        except PricingError:
            priced = False

        assert result.allowed == priced

    def test_suggestions_exclude_forbidden(self, restricted_matrix):
        result = self._check(restricted_matrix, paper_type="بالک")
        assert result.suggestions == ["تحریر", "گلاسه"]

        result = self._check(restricted_matrix, binding_type="شومیز", cover_weight="300")
        assert result.suggestions == ["200", "250"]

        result = self._check(restricted_matrix, extras=["لب گرد"])
        assert result.suggestions == ["خط تا", "شیرینک"]


class TestConstraintEngine:
    @pytest.mark.asyncio
    async def test_unconfigured_size_is_a_view_not_an_error(self, matrices, store):
        engine = ConstraintEngine(matrices, store)
        view = await engine.get_allowed_options({}, "A3")
        assert view.configured is False
        assert view.message
        assert view.allowed_papers == []

    @pytest.mark.asyncio
    async def test_allowed_options_from_storage(self, matrices, store, a5_matrix):
        await matrices.save_matrix("A5", a5_matrix)
        engine = ConstraintEngine(matrices, store)

        view = await engine.get_allowed_options({"paper_type": "تحریر"}, "A5")

        assert view.configured
        assert [p.type for p in view.allowed_papers] == ["تحریر"]
        assert [p.type for p in view.allowed_print_types] == ["bw", "color"]

    @pytest.mark.asyncio
    async def test_validate_unknown_size(self, matrices, store):
        engine = ConstraintEngine(matrices, store)
        result = await engine.validate_combination({"book_size": "A3"})
        assert result.status == "invalid_book_size"
        assert not result.allowed

    @pytest.mark.asyncio
    async def test_available_book_sizes(self, matrices, store, a5_matrix):
        await store.set_json("book_sizes", ["A5", "رقعی (14×20)", "وزیری"])
        await matrices.save_matrix("A5", a5_matrix)
        incomplete = a5_matrix.model_copy(update={"binding_costs": {}})
        await matrices.save_matrix("رقعی", incomplete)
        engine = ConstraintEngine(matrices, store)

        public = await engine.get_available_book_sizes()
        assert [info.size for info in public] == ["A5"]
        assert public[0].enabled and public[0].complete

        everything = {info.size: info for info in await engine.get_available_book_sizes(include_disabled=True)}
        assert set(everything) == {"A5", "رقعی (14×20)", "وزیری"}
        assert everything["رقعی (14×20)"].has_pricing
        assert not everything["رقعی (14×20)"].enabled
        assert everything["رقعی (14×20)"].slug == "roghei"
        assert not everything["وزیری"].has_pricing

    @pytest.mark.asyncio
    async def test_default_book_sizes(self, matrices, store):
        engine = ConstraintEngine(matrices, store)
        assert await engine.canonical_book_sizes() == ["A5", "A4", "B5", "رقعی", "وزیری", "خشتی"]


class TestSlugs:
    def test_mapped_labels(self):
        assert slugify("جلد سخت") == "hard-cover"
        assert slugify("  جلد   سخت ") == "hard-cover"
        assert slugify("A5") == "a5"

    def test_fallback(self):
        assert slugify("کاغذ کرافت!") == "کاغذ-کرافت"
        assert slugify("Super Gloss 2") == "super-gloss-2"

    def test_unslugify(self):
        assert unslugify("shomiz") == "شومیز"
        assert unslugify("no-such-slug") == "no-such-slug"

    def test_clear_cache_is_harmless(self):
        clear_slug_cache()
        assert slugify("رقعی") == "roghei"
