"""Onboarding flow data and validation for first-run setup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from local_store import FixedExpense, UserData

MIN_AGE = 18
MAX_AGE = 100
TOTAL_STEPS = 5


@dataclass(frozen=True)
class Country:
    code: str
    name: str
    currency: str
    symbol: str
    flag: str


COUNTRIES: Tuple[Country, ...] = (
    Country("US", "United States", "USD", "$", "🇺🇸"),
    Country("GB", "United Kingdom", "GBP", "£", "🇬🇧"),
    Country("EU", "European Union", "EUR", "€", "🇪🇺"),
    Country("JP", "Japan", "JPY", "¥", "🇯🇵"),
    Country("AU", "Australia", "AUD", "A$", "🇦🇺"),
    Country("CA", "Canada", "CAD", "C$", "🇨🇦"),
    Country("IN", "India", "INR", "₹", "🇮🇳"),
    Country("CN", "China", "CNY", "¥", "🇨🇳"),
    Country("BR", "Brazil", "BRL", "R$", "🇧🇷"),
    Country("MX", "Mexico", "MXN", "$", "🇲🇽"),
    Country("SG", "Singapore", "SGD", "S$", "🇸🇬"),
    Country("ZA", "South Africa", "ZAR", "R", "🇿🇦"),
    Country("CH", "Switzerland", "CHF", "Fr", "🇨🇭"),
    Country("SE", "Sweden", "SEK", "kr", "🇸🇪"),
    Country("KR", "South Korea", "KRW", "₩", "🇰🇷"),
)

HABITS: Tuple[Tuple[str, str], ...] = (
    ("Shopping", "🛍"),
    ("Dining Out", "🍔"),
    ("Coffee", "☕"),
    ("Transport", "🚗"),
    ("Entertainment", "🍿"),
    ("Gaming", "🎮"),
    ("Travel", "✈️"),
    ("Groceries", "🛒"),
)


def find_country(code: str) -> Optional[Country]:
    for country in COUNTRIES:
        if country.code == code:
            return country
    return None


def _parse_number(raw: object, cast) -> Optional[float]:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        return cast(text)
    except ValueError:
        return None


def can_proceed(
    step: int,
    *,
    age: object = None,
    country: Optional[Country] = None,
    income: object = None,
) -> bool:
    """
    Whether the user may leave `step`.

    Steps 1-3 gate on age (18 to 100), a chosen country and a positive income.
    Fixed expenses and habits are optional.
    """
    if step == 1:
        parsed_age = _parse_number(age, int)
        return parsed_age is not None and MIN_AGE <= parsed_age <= MAX_AGE
    if step == 2:
        return country is not None
    if step == 3:
        parsed_income = _parse_number(income, float)
        return parsed_income is not None and parsed_income > 0
    return True


def toggle_habit(selected: Sequence[str], habit: str) -> List[str]:
    if habit in selected:
        return [item for item in selected if item != habit]
    return [*selected, habit]


def build_user_data(
    *,
    age: object,
    country: Country,
    income: object,
    fixed_expenses: Iterable[Mapping[str, object]] = (),
    spending_habits: Sequence[str] = (),
) -> UserData:
    """Assemble the stored profile; fixed-expense rows missing a name or amount are dropped."""
    parsed_age = _parse_number(age, int)
    parsed_income = _parse_number(income, float)
    if parsed_age is None or not MIN_AGE <= parsed_age <= MAX_AGE:
        raise ValueError(f"Age must be between {MIN_AGE} and {MAX_AGE}")
    if parsed_income is None or parsed_income <= 0:
        raise ValueError("Income must be greater than 0")

    rows: List[FixedExpense] = []
    for row in fixed_expenses:
        name = str(row.get("name") or "").strip()
        amount = _parse_number(row.get("amount"), float)
        if not name or amount is None:
            continue
        rows.append(FixedExpense(name=name, amount=amount))

    return UserData(
        age=parsed_age,
        country=country.name,
        currency=country.currency,
        currency_symbol=country.symbol,
        income=parsed_income,
        fixed_expenses=rows,
        spending_habits=list(spending_habits),
    )
