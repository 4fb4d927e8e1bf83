"""Derived values over the cached expense list."""

from src.queries.totals import compute_total, format_amount, should_show_total

__all__ = ["compute_total", "format_amount", "should_show_total"]
