"""Tests for the derived total."""

import math

import pytest

from conftest import make_expense
from src.models.expense import Expense
from src.queries import compute_total, format_amount, should_show_total


def _expenses(*amounts: float) -> list[Expense]:
    return [
        Expense.model_validate(make_expense(f"e{i}", amount))
        for i, amount in enumerate(amounts)
    ]


class TestComputeTotal:

    def test_empty_list_is_zero(self):
        assert compute_total([]) == 0.0
        assert should_show_total([]) is False

    def test_sums_amounts(self):
        expenses = _expenses(3.5, 10.0, 0.25)
        assert compute_total(expenses) == pytest.approx(13.75)
        assert should_show_total(expenses) is True

    def test_negative_amounts_are_summed_as_is(self):
        assert compute_total(_expenses(10.0, -4.0)) == 6.0

    def test_nan_propagates(self):
        assert math.isnan(compute_total(_expenses(1.0, math.nan)))


class TestFormatAmount:

    def test_two_decimals(self):
        assert format_amount(3.5) == "$3.50"
        assert format_amount(0.0) == "$0.00"
        assert format_amount(1234.5) == "$1234.50"

    def test_exact_half_rounds_up(self):
        assert format_amount(0.125) == "$0.13"

    def test_binary_value_decides_rounding(self):
        # 2.675 is stored as 2.67499999...
        assert format_amount(2.675) == "$2.67"

    def test_negative(self):
        assert format_amount(-3.5) == "$-3.50"

    def test_custom_symbol(self):
        assert format_amount(3.5, "€") == "€3.50"

    def test_not_a_number(self):
        assert format_amount(math.nan) == "$NaN"
