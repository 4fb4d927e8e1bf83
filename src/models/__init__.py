"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
Everything sent to or received from the expense API conforms to these schemas.
"""

from src.models.expense import (
    FORM_FIELDS,
    Expense,
    ExpenseCreate,
    ExpenseDraft,
    parse_amount,
    parse_expense_list,
)
from src.models.cache import (
    AppendExpense,
    AppliedCommand,
    CacheCommand,
    ReplaceExpenses,
)
from src.models.view import (
    ExpenseRow,
    FieldView,
    FormView,
    TotalRow,
    ViewModel,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "FORM_FIELDS",
    "Expense",
    "ExpenseCreate",
    "ExpenseDraft",
    "parse_amount",
    "parse_expense_list",
    # Cache commands
    "AppendExpense",
    "AppliedCommand",
    "CacheCommand",
    "ReplaceExpenses",
    # View models
    "ExpenseRow",
    "FieldView",
    "FormView",
    "TotalRow",
    "ViewModel",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
