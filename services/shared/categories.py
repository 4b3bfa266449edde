"""
Category vocabulary shared by the expense API and the client.

The API enforces a closed list of categories while the client lets users type
free text (and offers a handful of emoji-tagged presets). Both are modelled as
one sum type: a `KnownCategory` member or a `CustomCategory` carrying the raw
label. `reconcile_category` is the single place where client labels are mapped
onto the server enumeration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class KnownCategory(str, Enum):
    """Categories the expense API accepts."""

    FOOD = "Food"
    TRANSPORT = "Transport"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHER = "Other"


@dataclass(frozen=True, slots=True)
class CustomCategory:
    """Free-text category typed by a user."""

    label: str


Category = Union[KnownCategory, CustomCategory]

TOTAL_BUDGET_CATEGORY = "Total"

# Presets offered by the add-expense form, in display order.
CLIENT_PRESETS: Tuple[Tuple[str, str], ...] = (
    ("Eating Out", "🍔"),
    ("Shopping", "🛍️"),
    ("Subscription", "📱"),
    ("Transport", "🚗"),
    ("Leisure", "🎬"),
)

# Client preset labels that differ from the server enumeration.
PRESET_ALIASES: Dict[str, KnownCategory] = {
    "Eating Out": KnownCategory.FOOD,
    "Leisure": KnownCategory.ENTERTAINMENT,
    "Subscription": KnownCategory.BILLS,
}

_KNOWN_BY_VALUE = {member.value: member for member in KnownCategory}
_PRESET_EMOJI = dict(CLIENT_PRESETS)
DEFAULT_EMOJI = "💸"


def parse_category(label: str) -> Category:
    """
    Interpret a raw label as a known or custom category.

    Matching is exact and case-sensitive after trimming surrounding whitespace;
    "food" is a custom category, not `KnownCategory.FOOD`.
    """
    cleaned = (label or "").strip()
    if not cleaned:
        raise ValueError("Category label must not be empty.")
    known = _KNOWN_BY_VALUE.get(cleaned)
    if known is not None:
        return known
    return CustomCategory(label=cleaned)


def category_label(category: Category) -> str:
    if isinstance(category, KnownCategory):
        return category.value
    return category.label


def reconcile_category(category: Category) -> Optional[KnownCategory]:
    """Map a category onto the server enumeration, or None when it has no counterpart."""
    if isinstance(category, KnownCategory):
        return category
    return PRESET_ALIASES.get(category.label)


def budget_categories() -> Tuple[str, ...]:
    return tuple(member.value for member in KnownCategory) + (TOTAL_BUDGET_CATEGORY,)


def category_emoji(label: str) -> str:
    return _PRESET_EMOJI.get(label, DEFAULT_EMOJI)
