"""
Audit Logger

DESIGN DECISION: Every significant step of the sync/submit cycle is logged.
This provides:
1. Traceability of every cache write
2. Debugging capability when the API misbehaves
3. Diagnostics for failed submissions

The audit logger:
- Is async to not block main flow
- Gracefully handles storage failures (logging never breaks the view)
- Supports correlation IDs to trace one user action end to end
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("expense_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_refresh_started(self, interval_seconds: float) -> None:
        await self.log(AuditEventBuilder.refresh_started(interval_seconds))

    async def log_refresh_stopped(self) -> None:
        await self.log(AuditEventBuilder.refresh_stopped())

    async def log_expenses_loaded(self, count: int, version: int) -> None:
        """Log a successful full load."""
        await self.log(AuditEventBuilder.expenses_loaded(count=count, version=version))

    async def log_load_failed(
        self,
        error_message: str,
        status_code: Optional[int] = None,
    ) -> None:
        """Log a failed load (initial or scheduled)."""
        await self.log(
            AuditEventBuilder.load_failed(
                error_message=error_message,
                status_code=status_code,
            )
        )

    async def log_refresh_error(self, error_message: str, error_type: str) -> None:
        """Log an unexpected exception inside the scheduled refresh job."""
        await self.log(
            AuditEventBuilder.refresh_error(
                error_message=error_message,
                error_type=error_type,
            )
        )

    async def log_optimistic_append(self, expense_id: str, version: int) -> None:
        await self.log(
            AuditEventBuilder.optimistic_append(expense_id=expense_id, version=version)
        )

    async def log_expense_submitted(
        self,
        expense_id: str,
        amount: float,
        correlation_id: UUID,
    ) -> None:
        """Log a successful create."""
        await self.log(
            AuditEventBuilder.expense_submitted(
                expense_id=expense_id,
                amount=amount,
                correlation_id=correlation_id,
            )
        )

    async def log_submit_failed(
        self,
        error_message: str,
        correlation_id: UUID,
        status_code: Optional[int] = None,
    ) -> None:
        """Log a failed create."""
        await self.log(
            AuditEventBuilder.submit_failed(
                error_message=error_message,
                correlation_id=correlation_id,
                status_code=status_code,
            )
        )

    async def log_submit_ignored(self, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.submit_ignored(correlation_id))

    async def log_draft_incomplete(
        self,
        missing: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.draft_incomplete(missing=missing, correlation_id=correlation_id)
        )

    async def log_amount_not_numeric(self, raw_amount: str, correlation_id: UUID) -> None:
        await self.log(
            AuditEventBuilder.amount_not_numeric(
                raw_amount=raw_amount,
                correlation_id=correlation_id,
            )
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a submit click).
    Pass it through all subsequent operations.
    """
    return uuid4()
