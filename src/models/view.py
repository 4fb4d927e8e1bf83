"""
View Models

What the expense page shows, independent of the UI toolkit.
The page renders a ViewModel and nothing else.
"""

from typing import Optional

from pydantic import BaseModel, Field


class FieldView(BaseModel):
    """One form input."""

    name: str
    label: str
    input_type: str = Field(description="'date', 'text' or 'number'")
    value: str = ""
    step: Optional[str] = Field(
        default=None,
        description="Input step, set for the amount field only"
    )
    required: bool = True


class FormView(BaseModel):
    fields: list[FieldView]
    submit_label: str
    submit_disabled: bool = False


class ExpenseRow(BaseModel):
    """A table row, keyed by the server identifier."""

    key: str
    date: str
    description: str
    category: str
    amount_display: str


class TotalRow(BaseModel):
    label: str = "Total"
    amount_display: str


class ViewModel(BaseModel):
    """
    Full render state of the expense page.

    When error_message is set nothing else is rendered.
    """

    title: str = "Expenses"
    error_message: Optional[str] = None
    toggle_label: Optional[str] = None
    form: Optional[FormView] = None
    rows: list[ExpenseRow] = Field(default_factory=list)
    total: Optional[TotalRow] = None
    alert: Optional[str] = None

    @property
    def is_blocked(self) -> bool:
        return self.error_message is not None
