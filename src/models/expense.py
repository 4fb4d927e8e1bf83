"""
Core Data Models for Expense Tracker

These models define the schemas for all data exchanged with the
expense API and held in the client-side cache.

DESIGN DECISION: The server is authoritative for expense records.
The client model accepts whatever extra fields the server sends and
never rewrites values it did not produce itself.
"""

import math
import re
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Field order matters: it is the order the form renders in.
FORM_FIELDS: tuple[str, ...] = ("date", "description", "category", "amount")

# Leading numeric prefix, the same prefix a lenient float parser accepts.
_NUMERIC_PREFIX = re.compile(
    r"^[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)


def parse_amount(raw: str) -> float:
    """
    Coerce a form string to a float.

    Parses the longest leading numeric prefix ("12.50" -> 12.5,
    "12abc" -> 12.0). Strings with no numeric prefix become NaN.

    NOTE: NaN is accepted silently and travels to the server.
    Callers that care must check math.isnan() themselves.
    """
    match = _NUMERIC_PREFIX.match(raw.strip())
    if not match:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


class Expense(BaseModel):
    """
    An expense record as returned by the server.

    The identifier is server-assigned and travels as `_id` on the wire.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(
        ...,
        alias="_id",
        description="Server-assigned opaque identifier"
    )
    date: str = Field(
        ...,
        description="Calendar date, string-encoded (usually YYYY-MM-DD)"
    )
    description: str = Field(
        ...,
        description="Free text description"
    )
    category: str = Field(
        ...,
        description="Free text category"
    )
    amount: float = Field(
        ...,
        description="Amount; non-negative expected but not enforced"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def null_amount_is_nan(cls, v: Any) -> Any:
        """A non-numeric amount was sent as null; the server echoes it back."""
        return math.nan if v is None else v

    def to_wire(self) -> dict[str, Any]:
        """Dump back to the server's field names."""
        return self.model_dump(by_alias=True)


class ExpenseCreate(BaseModel):
    """Body of a create request."""

    date: str
    description: str
    category: str
    amount: float

    @property
    def amount_is_numeric(self) -> bool:
        return not math.isnan(self.amount)

    def to_request_body(self) -> dict[str, Any]:
        """
        JSON-safe request body.

        NaN is not representable in JSON; it is sent as null,
        which is what a browser serializer produces for NaN.
        """
        body = self.model_dump()
        if math.isnan(body["amount"]) or math.isinf(body["amount"]):
            body["amount"] = None
        return body


class ExpenseDraft(BaseModel):
    """
    Transient form state: the four field values as typed.

    Never persisted. Reset to empty after a successful submit.
    """
    model_config = ConfigDict(validate_assignment=True)

    date: str = ""
    description: str = ""
    category: str = ""
    amount: str = ""

    def missing_fields(self) -> list[str]:
        """Names of required fields that are still empty, in form order."""
        return [name for name in FORM_FIELDS if not getattr(self, name)]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()

    def to_create(self) -> ExpenseCreate:
        return ExpenseCreate(
            date=self.date,
            description=self.description,
            category=self.category,
            amount=parse_amount(self.amount),
        )

    @staticmethod
    def label_for(field_name: str) -> str:
        """Form label for a field ("amount" -> "Amount")."""
        return field_name[:1].upper() + field_name[1:]

    @staticmethod
    def input_type_for(field_name: str) -> str:
        """HTML-style input type used to pick a widget."""
        if field_name == "amount":
            return "number"
        if field_name == "date":
            return "date"
        return "text"


def parse_expense_list(document: Any) -> Optional[list[Expense]]:
    """
    Extract the `expenses` list from a GET response document.

    Returns None when the document does not have the expected shape.
    Raises pydantic.ValidationError when a record is malformed.
    """
    if not isinstance(document, dict):
        return None
    items = document.get("expenses")
    if not isinstance(items, list):
        return None
    return [Expense.model_validate(item) for item in items]
