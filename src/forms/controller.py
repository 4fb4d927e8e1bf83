"""
Expense Form Controller

Holds the four-field draft, the show/hide toggle, and the in-flight flag,
and turns a submit click into a create request.

On success: draft cleared, form hidden, created record appended to the cache.
On failure: draft kept, form left open, user alerted. Nothing is retried.
"""

from typing import Optional
from uuid import UUID

from src.audit import AuditLogger, create_correlation_id
from src.models.expense import FORM_FIELDS, Expense, ExpenseDraft
from src.services.api import ExpenseApiClient, SubmitError
from src.sync import DataSynchronizer


class FormController:
    """Form state plus the submit action."""

    SUBMIT_LABEL = "Submit Expense"
    SUBMITTING_LABEL = "Submitting..."
    OPEN_LABEL = "Add Expense"
    CANCEL_LABEL = "Cancel"
    FAILURE_ALERT = "Failed to add expense"

    def __init__(
        self,
        client: ExpenseApiClient,
        synchronizer: DataSynchronizer,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._client = client
        self._synchronizer = synchronizer
        self._audit_logger = audit_logger

        self._draft = ExpenseDraft()
        self._visible = False
        self._in_flight = False
        self._alert: Optional[str] = None

    @property
    def draft(self) -> ExpenseDraft:
        return self._draft.model_copy()

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def alert(self) -> Optional[str]:
        """Pending user notification, if any."""
        return self._alert

    @property
    def submit_label(self) -> str:
        return self.SUBMITTING_LABEL if self._in_flight else self.SUBMIT_LABEL

    @property
    def toggle_label(self) -> str:
        return self.CANCEL_LABEL if self._visible else self.OPEN_LABEL

    def toggle(self) -> bool:
        """Show or hide the form. Returns the new visibility."""
        self._visible = not self._visible
        return self._visible

    def update_field(self, name: str, value: str) -> None:
        if name not in FORM_FIELDS:
            raise ValueError(f"Unknown form field: {name}")
        setattr(self._draft, name, value)

    def dismiss_alert(self) -> Optional[str]:
        """Return the pending alert and clear it."""
        alert, self._alert = self._alert, None
        return alert

    async def submit(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Expense]:
        """
        Send the draft as a create request.

        Returns the created record, or None if nothing was created
        (request already in flight, missing fields, or SubmitError).
        """
        correlation_id = correlation_id or create_correlation_id()

        if self._in_flight:
            if self._audit_logger:
                await self._audit_logger.log_submit_ignored(correlation_id)
            return None

        missing = self._draft.missing_fields()
        if missing:
            labels = [ExpenseDraft.label_for(name) for name in missing]
            self._alert = f"Please fill in: {', '.join(labels)}"
            if self._audit_logger:
                await self._audit_logger.log_draft_incomplete(missing, correlation_id)
            return None

        payload = self._draft.to_create()

        # Known gap: a non-numeric amount still goes out (as null)
        if not payload.amount_is_numeric and self._audit_logger:
            await self._audit_logger.log_amount_not_numeric(
                raw_amount=self._draft.amount,
                correlation_id=correlation_id,
            )

        self._in_flight = True
        try:
            created = await self._client.create_expense(payload)
            await self._synchronizer.append_local(created)
        except SubmitError as e:
            self._alert = self.FAILURE_ALERT
            if self._audit_logger:
                await self._audit_logger.log_submit_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                    status_code=e.status_code,
                )
            return None
        finally:
            self._in_flight = False

        self._draft = ExpenseDraft()
        self._visible = False

        if self._audit_logger:
            await self._audit_logger.log_expense_submitted(
                expense_id=created.id,
                amount=created.amount,
                correlation_id=correlation_id,
            )

        return created
