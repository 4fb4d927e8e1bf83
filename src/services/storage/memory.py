"""
In-Memory Storage Implementation

The cache lives for as long as the view does; nothing is persisted.
The audit store keeps a bounded window of recent events.
"""

from collections import deque
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.cache import AppliedCommand, CacheCommand
from src.models.expense import Expense
from src.services.storage.interface import (
    AuditStorageInterface,
    ExpenseCacheInterface,
    StorageError,
)


class InMemoryExpenseCache(ExpenseCacheInterface):
    """
    Expense cache held in process memory.

    Last writer wins: there is no merge, every command fully
    determines the next list from the current one.
    """

    def __init__(self, journal_size: int = 200):
        self._expenses: list[Expense] = []
        self._version = 0
        self._journal: deque[AppliedCommand] = deque(maxlen=journal_size)

    def snapshot(self) -> list[Expense]:
        return list(self._expenses)

    def apply(self, command: CacheCommand) -> int:
        self._expenses = command.apply_to(self._expenses)
        self._version += 1
        self._journal.append(
            AppliedCommand(
                version=self._version,
                kind=command.kind,
                size_after=len(self._expenses),
            )
        )
        return self._version

    @property
    def version(self) -> int:
        return self._version

    def journal(self) -> list[AppliedCommand]:
        return list(self._journal)

    def __len__(self) -> int:
        return len(self._expenses)


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit events kept in memory, oldest evicted first."""

    def __init__(self, max_events: int = 1000):
        if max_events < 1:
            raise StorageError("max_events must be at least 1")
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
        entity_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        events = [
            e for e in reversed(self._events)
            if entity_id is None or e.entity_id == entity_id
        ]
        return events[:limit]
