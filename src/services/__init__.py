"""Services package."""

from src.services.api import (
    ExpenseApiClient,
    ExpenseApiError,
    FetchError,
    SubmitError,
)
from src.services.storage import (
    AuditStorageInterface,
    ExpenseCacheInterface,
    InMemoryAuditStorage,
    InMemoryExpenseCache,
    StorageError,
)

__all__ = [
    # API services
    "ExpenseApiClient",
    "ExpenseApiError",
    "FetchError",
    "SubmitError",
    # Storage services
    "AuditStorageInterface",
    "ExpenseCacheInterface",
    "InMemoryAuditStorage",
    "InMemoryExpenseCache",
    "StorageError",
]
