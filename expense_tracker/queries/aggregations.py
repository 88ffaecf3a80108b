"""
Expense Aggregations

DESIGN DECISION: Every aggregate is a pure function of an expense sequence.
Nothing here is stored; callers recompute on demand (or go through
AggregationEngine, which caches by store version).

Period filters take an optional year and an optional month. Months are
ZERO-BASED everywhere (0 = January, 11 = December). When both are None
every expense is included.

Money is summed as Decimal so totals stay exact; percentages are floats.
"""

import datetime as dt
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Optional, Union

from expense_tracker.models.expense import (
    CategoryShare,
    CategoryTotal,
    Expense,
    ExpenseCategory,
)


CategoryLike = Union[ExpenseCategory, str]

ZERO = Decimal("0")


def check_month(month: Optional[int]) -> None:
    """Reject month indexes outside 0..11."""
    if month is not None and not 0 <= month <= 11:
        raise ValueError(
            f"Month must be a zero-based index between 0 and 11, got {month}"
        )


def _in_period(expense: Expense, year: Optional[int], month: Optional[int]) -> bool:
    if year is not None and expense.date.year != year:
        return False
    if month is not None and expense.date.month - 1 != month:
        return False
    return True


def filter_period(
    expenses: Iterable[Expense],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> list[Expense]:
    """Expenses inside the period, in their original order."""
    check_month(month)
    return [e for e in expenses if _in_period(e, year, month)]


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    """Running total over the given expenses."""
    return sum((expense.amount for expense in expenses), ZERO)


def category_totals(
    expenses: Iterable[Expense],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> dict[ExpenseCategory, Decimal]:
    """
    Summed amount per category.

    Only categories with at least one matching expense appear; keys are
    in order of first appearance.
    """
    totals: dict[ExpenseCategory, Decimal] = {}
    for expense in filter_period(expenses, year, month):
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def category_totals_ranked(
    expenses: Iterable[Expense],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> list[CategoryTotal]:
    """Category totals sorted by total, highest first. Ties keep encounter order."""
    totals = [
        CategoryTotal(category=category, total=total)
        for category, total in category_totals(expenses, year, month).items()
    ]
    # sorted() is stable, including with reverse=True
    return sorted(totals, key=lambda item: item.total, reverse=True)


def top_category(
    expenses: Iterable[Expense],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> Optional[CategoryTotal]:
    ranked = category_totals_ranked(expenses, year, month)
    return ranked[0] if ranked else None


def category_total(
    expenses: Iterable[Expense],
    category: CategoryLike,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> Decimal:
    """Total for one category; zero when it has no expenses."""
    return category_totals(expenses, year, month).get(ExpenseCategory(category), ZERO)


def category_percentage(
    expenses: Iterable[Expense],
    category: CategoryLike,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> float:
    """
    Share of the grand total spent in one category, in percent.

    Defined as 0.0 when the grand total is zero.
    """
    totals = category_totals(expenses, year, month)
    grand_total = sum(totals.values(), ZERO)
    if grand_total == 0:
        return 0.0
    return float(totals.get(ExpenseCategory(category), ZERO) / grand_total * 100)


def category_breakdown(
    expenses: Iterable[Expense],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> list[CategoryShare]:
    """Ranked category totals together with their percentage of the whole."""
    ranked = category_totals_ranked(expenses, year, month)
    grand_total = sum((item.total for item in ranked), ZERO)
    return [
        CategoryShare(
            category=item.category,
            total=item.total,
            percentage=float(item.total / grand_total * 100) if grand_total else 0.0,
        )
        for item in ranked
    ]


def monthly_total(expenses: Iterable[Expense], year: int, month: int) -> Decimal:
    """Sum of all category totals for one month."""
    return sum(category_totals(expenses, year, month).values(), ZERO)


def current_month_category_totals(
    expenses: Iterable[Expense],
    today: Optional[dt.date] = None,
) -> dict[ExpenseCategory, Decimal]:
    today = today or dt.date.today()
    return category_totals(expenses, today.year, today.month - 1)


def expenses_on(expenses: Iterable[Expense], day: dt.date) -> list[Expense]:
    """Expenses dated exactly on ``day``."""
    if isinstance(day, dt.datetime):
        day = day.date()
    return [e for e in expenses if e.date == day]


def expenses_in(expenses: Iterable[Expense], year: int, month: int) -> list[Expense]:
    """Expenses in one month, in their original order."""
    return filter_period(expenses, year, month)


def expenses_by_category(
    expenses: Iterable[Expense],
    category: CategoryLike,
) -> list[Expense]:
    wanted = ExpenseCategory(category)
    return [e for e in expenses if e.category == wanted]


def days_with_expenses(expenses: Sequence[Expense], year: int, month: int) -> set[int]:
    """Day-of-month numbers that have at least one expense, for calendar markers."""
    return {e.date.day for e in expenses_in(expenses, year, month)}
