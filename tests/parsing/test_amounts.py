"""
Unit tests for parse_amount
"""
from decimal import Decimal

import pytest

from portview.parsing.amounts import parse_amount


class TestParseAmount:

    def test_parenthesized_negative_with_grouping(self):
        assert parse_amount("(1,234.56)") == Decimal("-1234.56")

    def test_plain_grouped_number(self):
        assert parse_amount("10,000.00") == Decimal("10000.00")

    def test_number_is_returned_as_is(self):
        assert parse_amount(1000) == 1000
        assert parse_amount(12.5) == Decimal("12.5")

    def test_decimal_passthrough(self):
        assert parse_amount(Decimal("3.14")) == Decimal("3.14")

    @pytest.mark.parametrize("token", [None, "", "   ", "-", " - ", "\u2007-\u202f", "\u2007"])
    def test_blank_sentinels_are_absent(self, token):
        assert parse_amount(token) is None

    def test_figure_spaces_inside_number(self):
        assert parse_amount("1\u2007234.00") == Decimal("1234.00")

    @pytest.mark.parametrize("token", ["abc", "12x", "()", "(,)", "--"])
    def test_garbage_is_absent(self, token):
        assert parse_amount(token) is None

    def test_non_finite_numbers_are_absent(self):
        assert parse_amount(float("nan")) is None
        assert parse_amount(float("inf")) is None
        assert parse_amount("NaN") is None
        assert parse_amount("Infinity") is None

    def test_bool_is_not_an_amount(self):
        assert parse_amount(True) is None

    def test_zero_is_zero_not_absent(self):
        assert parse_amount("0.00") == 0
        assert parse_amount("0.00") is not None
