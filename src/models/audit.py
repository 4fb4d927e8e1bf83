"""
Audit Models for Expense Tracker

Every significant step of the sync/submit cycle is recorded as an event.
This provides:
1. Traceability of what the cache looked like and why
2. Debugging information when the API misbehaves
3. A visible record of the last-writer-wins ordering between
   background refreshes and optimistic appends

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Synchronization
    REFRESH_STARTED = "refresh_started"
    REFRESH_STOPPED = "refresh_stopped"
    EXPENSES_LOADED = "expenses_loaded"
    LOAD_FAILED = "load_failed"
    REFRESH_ERROR = "refresh_error"
    OPTIMISTIC_APPEND = "optimistic_append"

    # Form submission
    EXPENSE_SUBMITTED = "expense_submitted"
    SUBMIT_FAILED = "submit_failed"
    SUBMIT_IGNORED = "submit_ignored"
    DRAFT_INCOMPLETE = "draft_incomplete"
    AMOUNT_NOT_NUMERIC = "amount_not_numeric"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'expense_list')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Server identifier of the entity, when there is one"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one submit click)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expenses_loaded(count=3, version=2)
        event = AuditEventBuilder.expense_submitted(expense_id, amount, correlation_id)
    """

    @staticmethod
    def refresh_started(interval_seconds: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFRESH_STARTED,
            entity_type="expense_list",
            description=f"Background refresh started (every {interval_seconds:g}s)",
            details={"interval_seconds": interval_seconds},
        )

    @staticmethod
    def refresh_stopped() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFRESH_STOPPED,
            entity_type="expense_list",
            description="Background refresh stopped",
        )

    @staticmethod
    def expenses_loaded(count: int, version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="expense_list",
            description=f"Loaded {count} expenses",
            details={"count": count, "cache_version": version},
        )

    @staticmethod
    def load_failed(
        error_message: str,
        status_code: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense_list",
            description="Failed to load expenses",
            error_code=str(status_code) if status_code is not None else None,
            error_message=error_message,
        )

    @staticmethod
    def refresh_error(error_message: str, error_type: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFRESH_ERROR,
            severity=AuditSeverity.CRITICAL,
            entity_type="expense_list",
            description=f"Scheduled refresh crashed: {error_type}",
            error_code=error_type,
            error_message=error_message,
        )

    @staticmethod
    def optimistic_append(expense_id: str, version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPTIMISTIC_APPEND,
            severity=AuditSeverity.DEBUG,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense appended to cache without refetch",
            details={"cache_version": version},
        )

    @staticmethod
    def expense_submitted(
        expense_id: str,
        amount: float,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_SUBMITTED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense created: {amount:.2f}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def submit_failed(
        error_message: str,
        correlation_id: UUID,
        status_code: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBMIT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Failed to add expense",
            error_code=str(status_code) if status_code is not None else None,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def submit_ignored(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBMIT_IGNORED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Submit ignored: a request is already in flight",
            is_user_action=True,
        )

    @staticmethod
    def draft_incomplete(
        missing: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_INCOMPLETE,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Submit blocked, missing: {', '.join(missing)}",
            details={"missing_fields": missing},
            is_user_action=True,
        )

    @staticmethod
    def amount_not_numeric(raw_amount: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_NOT_NUMERIC,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Amount is not a number; sending it anyway",
            details={"raw_amount": raw_amount},
        )
