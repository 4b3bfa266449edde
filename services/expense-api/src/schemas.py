"""
Request and response models for the expense API.

Payloads are camelCase on the wire (`avgPerTransaction`, `isOverBudget`) while
the Python side keeps snake_case attribute names.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # Rejects Infinity and NaN in JSON bodies; stored amounts must stay finite.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        allow_inf_nan=False,
    )


class RegisterPayload(CamelModel):
    name: str
    email: str
    password: str


class LoginPayload(CamelModel):
    email: str
    password: str


class UserModel(CamelModel):
    id: str
    email: str
    name: str
    currency: str


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserModel


class CurrentUserResponse(CamelModel):
    user: UserModel


class ExpensePayload(CamelModel):
    amount: float
    category: str
    description: str
    date: dt.date
    source: Literal["manual", "ocr"] = "manual"


class BulkExpenseItem(CamelModel):
    amount: float = Field(ge=0)
    category: str
    description: str
    date: dt.date


class BulkExpensesPayload(CamelModel):
    expenses: List[BulkExpenseItem]


class ExpenseUpdatePayload(CamelModel):
    amount: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None


class ExpenseModel(CamelModel):
    id: str
    amount: float
    category: str
    description: str
    date: dt.date
    timestamp: dt.datetime
    source: str


class ExpenseListResponse(CamelModel):
    expenses: List[ExpenseModel]


class ExpenseMutationResponse(CamelModel):
    message: str
    expense: ExpenseModel


class BulkExpensesResponse(CamelModel):
    message: str
    expenses: List[ExpenseModel]


class MessageResponse(CamelModel):
    message: str


class PeriodComparisonModel(CamelModel):
    current: float
    last: float
    change: float
    difference: float


class TrendReportModel(CamelModel):
    week: PeriodComparisonModel
    month: PeriodComparisonModel


class TopExpenseModel(CamelModel):
    amount: float
    description: Optional[str] = None
    date: dt.date


class CategorySummaryModel(CamelModel):
    category: str
    total: float
    count: int
    percentage: float
    avg_per_transaction: float
    top_expenses: List[TopExpenseModel]


class CategoryBreakdownModel(CamelModel):
    categories: List[CategorySummaryModel]
    total_spent: float
    total_transactions: int


class BudgetPayload(CamelModel):
    category: str
    limit: float = Field(ge=0)
    period: Literal["weekly", "monthly"] = "monthly"


class BudgetModel(CamelModel):
    id: str
    category: str
    limit: float
    period: Literal["weekly", "monthly"]


class BudgetListResponse(CamelModel):
    budgets: List[BudgetModel]


class BudgetMutationResponse(CamelModel):
    message: str
    budget: BudgetModel


class BudgetStatusModel(CamelModel):
    budget: BudgetModel
    spent: float
    remaining: float
    percentage: float
    is_over_budget: bool


class BudgetStatusResponse(CamelModel):
    budget_status: List[BudgetStatusModel]
