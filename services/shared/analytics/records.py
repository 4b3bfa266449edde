from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal

BudgetPeriod = Literal["weekly", "monthly"]
ExpenseSource = Literal["manual", "ocr"]


@dataclass(slots=True)
class ExpenseRecord:
    """
    A single spend entry as the aggregation functions see it.

    `timestamp` is the creation instant recorded by the API. Client-side records
    only carry a calendar `date`, so it may be None.
    """

    amount: float
    category: str
    date: date
    timestamp: datetime | None = None
    id: str | None = None
    description: str | None = None
    source: ExpenseSource = "manual"


@dataclass(slots=True)
class BudgetRecord:
    category: str
    limit: float
    period: BudgetPeriod = "monthly"
    id: str | None = None


@dataclass(slots=True)
class SavingGoalRecord:
    id: str
    name: str
    target_amount: float
    current_amount: float
    target_date: date
