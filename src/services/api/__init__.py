"""Expense API services package."""

from src.services.api.client import (
    ExpenseApiClient,
    ExpenseApiError,
    FetchError,
    SubmitError,
)

__all__ = [
    "ExpenseApiClient",
    "ExpenseApiError",
    "FetchError",
    "SubmitError",
]
