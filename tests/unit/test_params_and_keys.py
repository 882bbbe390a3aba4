"""Tests for parameter sanitizing and matrix storage keys."""

import base64

import pytest

from printshop.pricing.keys import (
    MATRIX_KEY_PREFIX,
    decode_size_key,
    encode_size_key,
    normalize_book_size,
)
from printshop.pricing.params import parse_params


class TestParseParams:
    def test_numbers_are_sanitized(self):
        params = parse_params(
            {"page_count_bw": "-5", "page_count_color": "abc", "quantity": "12.7"}
        )
        assert params.page_count_bw == 0
        assert params.page_count_color == 0
        assert params.quantity == 12

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("100", 100),
            ("1e3", 1000),
            ("999999999999", 999_999_999_999),
            ("1e12", 0),
            ("1e300000", 0),
            ("-1e300000", 0),
        ],
    )
    def test_huge_counts_become_zero(self, raw, expected):
        assert parse_params({"quantity": raw}).quantity == expected

    def test_missing_values_default(self):
        params = parse_params({})
        assert params.book_size == ""
        assert params.quantity == 0
        assert params.extras == ()

    def test_strings_are_trimmed(self):
        params = parse_params({"paper_type": "  تحریر ", "paper_weight": 70})
        assert params.paper_type == "تحریر"
        assert params.paper_weight == "70"

    def test_extras_from_list_or_csv(self):
        assert parse_params({"extras": ["لب گرد", "", None]}).extras == ("لب گرد",)
        assert parse_params({"extras": "لب گرد, خط تا"}).extras == ("لب گرد", "خط تا")
        assert parse_params({"extras": {"a": 1}}).extras == ()

    def test_cover_paper_weight_alias(self):
        assert parse_params({"cover_paper_weight": "250"}).cover_weight == "250"
        assert parse_params({"cover_weight": "300", "cover_paper_weight": "250"}).cover_weight == "300"

    def test_page_total_rounded_up_to_even(self):
        assert parse_params({"page_count_bw": 99, "page_count_color": 0}).page_count_total == 100
        assert parse_params({"page_count_bw": 51, "page_count_color": 50}).page_count_total == 102
        assert parse_params({"page_count_bw": 50, "page_count_color": 50}).page_count_total == 100


class TestMatrixKeys:
    def test_normalize_strips_parenthetical(self):
        assert normalize_book_size("رقعی (14×20)") == "رقعی"
        assert normalize_book_size("  A5 ") == "A5"

    def test_normalize_keeps_label_when_only_parenthetical(self):
        assert normalize_book_size("(A5)") == "(A5)"

    def test_encode_is_base64_of_normalized_label(self):
        assert encode_size_key("A5") == "pricing_matrix_QTU="
        assert encode_size_key("رقعی (14×20)") == encode_size_key("رقعی")

    def test_decode_reverses_encode(self):
        for size in ("A5", "رقعی", "وزیری", "خشتی"):
            assert decode_size_key(encode_size_key(size)) == size

    @pytest.mark.parametrize(
        "key",
        [
            "book_sizes",
            MATRIX_KEY_PREFIX + "!!not-base64!!",
            MATRIX_KEY_PREFIX + base64.b64encode(b"\xff\xfe").decode(),
            MATRIX_KEY_PREFIX + base64.b64encode(b"A5\x00").decode(),
            MATRIX_KEY_PREFIX,
        ],
    )
    def test_undecodable_keys(self, key):
        assert decode_size_key(key) is None
