"""Month grid for the spending calendar view."""

from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from local_store import ClientExpense

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_SUNDAY_FIRST = calendar.Calendar(firstweekday=calendar.SUNDAY)


@dataclass(frozen=True)
class CalendarDay:
    day: dt.date
    total: float
    expenses: List[ClientExpense] = field(default_factory=list)
    is_today: bool = False


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    weeks: List[List[Optional[CalendarDay]]]

    @property
    def title(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"


def shift_month(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def build_month_grid(
    year: int,
    month: int,
    expenses: Iterable[ClientExpense],
    today: Optional[dt.date] = None,
) -> MonthGrid:
    """
    Lay out a month as Sunday-first weeks.

    Cells outside the month are None. A day collects the expenses whose date is
    exactly that day.
    """
    by_day: Dict[dt.date, List[ClientExpense]] = {}
    for expense in expenses:
        if expense.date.year == year and expense.date.month == month:
            by_day.setdefault(expense.date, []).append(expense)

    weeks: List[List[Optional[CalendarDay]]] = []
    for week in _SUNDAY_FIRST.monthdayscalendar(year, month):
        row: List[Optional[CalendarDay]] = []
        for day_number in week:
            if day_number == 0:
                row.append(None)
                continue
            day = dt.date(year, month, day_number)
            day_expenses = by_day.get(day, [])
            row.append(
                CalendarDay(
                    day=day,
                    total=float(sum(expense.amount for expense in day_expenses)),
                    expenses=day_expenses,
                    is_today=day == today,
                )
            )
        weeks.append(row)
    return MonthGrid(year=year, month=month, weeks=weeks)
