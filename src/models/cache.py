"""
Cache Commands

DESIGN DECISION: The cached expense list is never mutated directly.
Every change is a discrete command applied in the order it resolves:
- ReplaceExpenses: a load() finished, the server list wins
- AppendExpense: a create finished, the new record goes on the end

Because commands are applied one at a time on a single event loop,
the race between a background refresh and a submit is deterministic:
whichever resolves last is the last writer.
"""

from datetime import datetime, timezone
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.models.expense import Expense


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReplaceExpenses(BaseModel):
    """Replace the whole cached list with the server's list."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["replace"] = "replace"
    expenses: tuple[Expense, ...]
    issued_at: datetime = Field(default_factory=_utcnow)

    def apply_to(self, current: list[Expense]) -> list[Expense]:
        return list(self.expenses)


class AppendExpense(BaseModel):
    """Append one record to the end of the cached list."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["append"] = "append"
    expense: Expense
    issued_at: datetime = Field(default_factory=_utcnow)

    def apply_to(self, current: list[Expense]) -> list[Expense]:
        return [*current, self.expense]


CacheCommand = Union[ReplaceExpenses, AppendExpense]


class AppliedCommand(BaseModel):
    """Journal entry: which command produced which version."""

    version: int
    kind: str
    size_after: int
    applied_at: datetime = Field(default_factory=_utcnow)
