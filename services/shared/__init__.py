"""
Shared code for the SpendWise services.

- analytics: pure aggregation functions over expense and budget records
- categories: the category vocabulary shared by the API and the client
- observability: telemetry, structured logging, and privacy helpers
"""

from .categories import (
    TOTAL_BUDGET_CATEGORY,
    Category,
    CustomCategory,
    KnownCategory,
    parse_category,
    reconcile_category,
)

__all__ = [
    "TOTAL_BUDGET_CATEGORY",
    "Category",
    "CustomCategory",
    "KnownCategory",
    "parse_category",
    "reconcile_category",
]
