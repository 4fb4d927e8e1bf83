"""
Total Calculation

DESIGN DECISION: The total is derived, never stored.
It is recomputed from the cached list every time the view renders,
so it can never drift from the rows it sums.

Rounding happens only at display time: two decimals, ties away from zero.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable

from src.models.expense import Expense


def compute_total(expenses: Iterable[Expense]) -> float:
    """Sum of amount over the list; 0.0 for an empty list."""
    return sum((expense.amount for expense in expenses), 0.0)


def should_show_total(expenses: list[Expense]) -> bool:
    """The total row is shown only when at least one record is present."""
    return len(expenses) > 0


def format_amount(amount: float, currency_symbol: str = "$") -> str:
    """
    Display an amount with two decimals ("$3.50").

    Quantizes the exact binary value with half-up rounding, so 0.125
    shows as 0.13 rather than banker's-rounding to 0.12.
    """
    if math.isnan(amount):
        return f"{currency_symbol}NaN"
    if math.isinf(amount):
        return f"{currency_symbol}{'-' if amount < 0 else ''}Infinity"

    with localcontext() as ctx:
        # Wide enough for any finite float
        ctx.prec = 400
        quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{currency_symbol}{quantized}"
