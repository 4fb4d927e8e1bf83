"""
Storage Services Package

Provides abstract interfaces and concrete implementations for client-side state.
Currently implements an in-memory cache and audit store, designed to be swappable.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    ExpenseCacheInterface,
    StorageError,
)
from src.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryExpenseCache,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ExpenseCacheInterface",
    # Exceptions
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryExpenseCache",
]
