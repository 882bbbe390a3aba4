"""Tests for the pricing matrix schema."""

import pytest
from pydantic import ValidationError

from printshop.schemas.matrix import PriceState, PricingMatrix, price_state


class TestPriceState:
    def test_tri_state(self):
        assert price_state(None) is PriceState.UNSET
        assert price_state(0) is PriceState.DISABLED
        assert price_state(0.0) is PriceState.DISABLED
        assert price_state(380) is PriceState.PRICED


class TestLoading:
    def test_empty_lists_accepted_as_maps(self):
        raw = (
            '{"book_size": "A5", "page_costs": {"تحریر": []}, "binding_costs": [],'
            ' "extras_costs": [], "restrictions": {"forbidden_print_types": [],'
            ' "forbidden_cover_weights": [], "forbidden_extras": []}}'
        )
        matrix = PricingMatrix.model_validate_json(raw)
        assert matrix.page_costs == {"تحریر": {}}
        assert matrix.binding_costs == {}
        assert matrix.restrictions.forbidden_print_types == {}
        assert not matrix.is_complete()

    def test_defaults(self):
        matrix = PricingMatrix()
        assert matrix.cover_cost == 0
        assert matrix.profit_margin == 0
        assert matrix.restrictions.is_empty()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"page_costs": {"تحریر": {"70": {"bw": -1000}}}},
            {"binding_costs": {"شومیز": -3000}},
            {"binding_costs": {"شومیز": {"250": -1}}},
            {"cover_cost": -8000},
            {"extras_costs": {"لب گرد": {"price": -500, "type": "fixed"}}},
            {"profit_margin": -0.1},
        ],
    )
    def test_negative_prices_rejected(self, a5_matrix, overrides):
        raw = {**a5_matrix.model_dump(), **overrides}
        with pytest.raises(ValidationError):
            PricingMatrix.model_validate(raw)

    def test_zero_prices_allowed(self):
        matrix = PricingMatrix.model_validate(
            {
                "page_costs": {"تحریر": {"70": {"bw": 0}}},
                "binding_costs": {"شومیز": 0},
                "extras_costs": {"خط تا": {"price": 0}},
            }
        )
        assert matrix.page_cost("تحریر", "70", "bw") == 0


class TestLookups:
    def test_forbidden_modes_flat_and_per_weight(self, restricted_matrix):
        restrictions = restricted_matrix.restrictions
        assert restrictions.forbidden_modes("گلاسه", "100") == {"bw"}
        assert restrictions.forbidden_modes("تحریر", "60") == {"color"}
        assert restrictions.forbidden_modes("تحریر", "70") == set()
        assert restrictions.forbidden_modes("بالک", "80") == set()

    def test_binding_cost_flat(self, restricted_matrix):
        assert restricted_matrix.binding_cost("سیمی") == 3000
        assert restricted_matrix.binding_cost("سیمی", "250") == 3000

    def test_binding_cost_by_cover_weight(self, restricted_matrix):
        assert restricted_matrix.binding_cost("شومیز", "250") == 5500

    def test_binding_cost_falls_back_to_first_weight(self, restricted_matrix):
        assert restricted_matrix.binding_cost("شومیز") == 5000

    def test_binding_cost_unpriced_cover_weight(self, restricted_matrix):
        assert restricted_matrix.binding_cost("شومیز", "999") is None

    def test_binding_cost_unset(self, restricted_matrix):
        assert restricted_matrix.binding_cost("گالینگور") is None

    def test_cover_weights(self, restricted_matrix):
        assert restricted_matrix.cover_weights("شومیز") == ["200", "250", "300"]
        assert restricted_matrix.cover_weights("سیمی") == []

    def test_priced_modes_ignore_zero(self, restricted_matrix):
        assert restricted_matrix.priced_modes("تحریر", "60") == ["bw", "color"]
        assert restricted_matrix.priced_modes("تحریر", "70") == ["bw"]
        assert restricted_matrix.priced_modes("تحریر", "80") == []


class TestCompleteness:
    def test_complete(self, a5_matrix):
        assert a5_matrix.is_complete()

    def test_zero_prices_only_is_incomplete(self):
        matrix = PricingMatrix.model_validate(
            {
                "page_costs": {"تحریر": {"70": {"bw": 0, "color": 0}}},
                "binding_costs": {"شومیز": 3000},
            }
        )
        assert not matrix.is_complete()

    def test_no_binding_is_incomplete(self):
        matrix = PricingMatrix.model_validate(
            {"page_costs": {"تحریر": {"70": {"bw": 380}}}}
        )
        assert not matrix.is_complete()
