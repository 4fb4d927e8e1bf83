"""
Abstract Storage Interface

DESIGN DECISION: The cached expense list is an explicitly owned,
injectable state object rather than ambient framework state.
This allows us to:
1. Hand the same cache to the synchronizer and the view
2. Observe every write (version counter + journal) in tests
3. Swap the in-memory cache for a shared one later

Writes go through apply(command) only. Reads return copies.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.cache import AppliedCommand, CacheCommand
from src.models.expense import Expense


class ExpenseCacheInterface(ABC):
    """
    Abstract interface for the client-side expense cache.

    The cache is read-mostly: the server is authoritative and the
    cache is overwritten by every successful load.
    """

    @abstractmethod
    def snapshot(self) -> list[Expense]:
        """
        Current cached list, in insertion/fetch order.

        Returns a copy; mutating it does not affect the cache.
        """
        pass

    @abstractmethod
    def apply(self, command: CacheCommand) -> int:
        """
        Apply a replace/append command.

        Args:
            command: The command to apply

        Returns:
            The cache version after applying
        """
        pass

    @property
    @abstractmethod
    def version(self) -> int:
        """Number of commands applied so far (0 = never written)."""
        pass

    @abstractmethod
    def journal(self) -> list[AppliedCommand]:
        """Applied commands, oldest first."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one submit click).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
        entity_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return
            entity_id: Only events about this entity, if given

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass
