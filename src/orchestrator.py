"""
Main Orchestrator for Expense Tracker

This module ties together all the components of the expense page:
1. Data Synchronizer (cached list, periodic refresh, optimistic append)
2. Form Controller (draft, toggle, submit)
3. Total Calculator (derived at render time)

DESIGN DECISION: The orchestrator enforces the view rules:
- Any load error blocks the whole view (no form, no table)
- The total row appears only when there is at least one row
- The periodic refresh lives exactly as long as the view is mounted
"""

from typing import Optional

from src.audit import AuditLogger
from src.config import get_settings
from src.forms import FormController
from src.models.expense import FORM_FIELDS, ExpenseDraft
from src.models.view import (
    ExpenseRow,
    FieldView,
    FormView,
    TotalRow,
    ViewModel,
)
from src.queries import compute_total, format_amount, should_show_total
from src.services.api import ExpenseApiClient
from src.services.storage import (
    ExpenseCacheInterface,
    InMemoryAuditStorage,
    InMemoryExpenseCache,
)
from src.sync import DataSynchronizer


class ExpenseView:
    """
    The expense page: mount/unmount lifecycle plus a render model.

    Lifecycle:
    1. mount()   -> initial load, periodic refresh starts
    2. render()  -> any number of times
    3. unmount() -> periodic refresh stops
    """

    ERROR_MESSAGE = "Error loading expenses."

    def __init__(
        self,
        synchronizer: DataSynchronizer,
        form: FormController,
        currency_symbol: Optional[str] = None,
    ):
        self._synchronizer = synchronizer
        self._form = form
        self._currency_symbol = (
            currency_symbol
            if currency_symbol is not None
            else get_settings().app.currency_symbol
        )

    @property
    def synchronizer(self) -> DataSynchronizer:
        return self._synchronizer

    @property
    def form(self) -> FormController:
        return self._form

    async def mount(self) -> None:
        await self._synchronizer.start()

    async def unmount(self) -> None:
        await self._synchronizer.stop()

    async def refresh_if_due(self) -> bool:
        return await self._synchronizer.refresh_if_due()

    def render(self) -> ViewModel:
        if self._synchronizer.error is not None:
            return ViewModel(error_message=self.ERROR_MESSAGE)

        expenses = self._synchronizer.expenses

        rows = [
            ExpenseRow(
                key=expense.id,
                date=expense.date,
                description=expense.description,
                category=expense.category,
                amount_display=format_amount(expense.amount, self._currency_symbol),
            )
            for expense in expenses
        ]

        total = None
        if should_show_total(expenses):
            total = TotalRow(
                amount_display=format_amount(
                    compute_total(expenses),
                    self._currency_symbol,
                ),
            )

        return ViewModel(
            toggle_label=self._form.toggle_label,
            form=self._render_form() if self._form.visible else None,
            rows=rows,
            total=total,
            alert=self._form.alert,
        )

    def _render_form(self) -> FormView:
        draft = self._form.draft
        fields = [
            FieldView(
                name=name,
                label=ExpenseDraft.label_for(name),
                input_type=ExpenseDraft.input_type_for(name),
                value=getattr(draft, name),
                step="0.01" if name == "amount" else None,
            )
            for name in FORM_FIELDS
        ]
        return FormView(
            fields=fields,
            submit_label=self._form.submit_label,
            submit_disabled=self._form.in_flight,
        )


def create_app_components(
    client: Optional[ExpenseApiClient] = None,
    cache: Optional[ExpenseCacheInterface] = None,
    keep_audit_trail: bool = True,
) -> tuple[ExpenseView, Optional[InMemoryAuditStorage]]:
    """
    Factory function to create all application components.

    Args:
        client: API client; built from settings when omitted.
        cache: Cache state object; a fresh in-memory cache when omitted.
        keep_audit_trail: Whether audit events are also kept in memory
                          (for the diagnostics panel) or only logged.

    Returns:
        (expense_view, audit_storage)
    """
    settings = get_settings()

    audit_storage = InMemoryAuditStorage() if keep_audit_trail else None
    audit_logger = AuditLogger(audit_storage)

    client = client or ExpenseApiClient(settings.api)

    synchronizer = DataSynchronizer(
        client=client,
        cache=cache if cache is not None else InMemoryExpenseCache(),
        audit_logger=audit_logger,
        refresh_interval_seconds=settings.sync.refresh_interval_seconds,
    )
    form = FormController(
        client=client,
        synchronizer=synchronizer,
        audit_logger=audit_logger,
    )
    view = ExpenseView(
        synchronizer=synchronizer,
        form=form,
        currency_symbol=settings.app.currency_symbol,
    )

    return view, audit_storage
