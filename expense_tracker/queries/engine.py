"""
Aggregation Engine

Binds the pure aggregation functions to an ExpenseStore.

Results may be cached, keyed by (store version, query, arguments). Any
mutation bumps the store version, so the whole cache is dropped on the
next read. Every call returns fresh containers, so callers can't corrupt
a cached value.
"""

import copy
import datetime as dt
from collections.abc import Callable, Hashable
from decimal import Decimal
from typing import Any, Optional

from expense_tracker.models.expense import (
    CategoryShare,
    CategoryTotal,
    Expense,
    ExpenseCategory,
)
from expense_tracker.queries import aggregations
from expense_tracker.queries.aggregations import CategoryLike
from expense_tracker.store import ExpenseStore


class AggregationEngine:
    """Derived views over the current contents of an ExpenseStore."""

    def __init__(self, store: ExpenseStore, use_cache: bool = True):
        self._store = store
        self._use_cache = use_cache
        self._cache_version: Optional[int] = None
        self._cache: dict[tuple[Hashable, ...], Any] = {}

    def _compute(self, name: str, func: Callable[..., Any], *args: Hashable) -> Any:
        if not self._use_cache:
            return func(self._store.snapshot(), *args)

        if self._cache_version != self._store.version:
            self._cache.clear()
            self._cache_version = self._store.version

        key = (name, *args)
        if key not in self._cache:
            self._cache[key] = func(self._store.snapshot(), *args)
        return copy.copy(self._cache[key])

    def cache_size(self) -> int:
        if self._cache_version != self._store.version:
            return 0
        return len(self._cache)

    # Totals

    def total(self) -> Decimal:
        return self._compute("total", aggregations.total_amount)

    def count(self) -> int:
        return self._store.count()

    def category_totals(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> dict[ExpenseCategory, Decimal]:
        return self._compute("category_totals", aggregations.category_totals, year, month)

    def category_totals_ranked(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> list[CategoryTotal]:
        return self._compute(
            "category_totals_ranked", aggregations.category_totals_ranked, year, month
        )

    def top_category(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> Optional[CategoryTotal]:
        return self._compute("top_category", aggregations.top_category, year, month)

    def category_total(
        self,
        category: CategoryLike,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> Decimal:
        return self._compute(
            "category_total",
            aggregations.category_total,
            ExpenseCategory(category),
            year,
            month,
        )

    def category_percentage(
        self,
        category: CategoryLike,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> float:
        return self._compute(
            "category_percentage",
            aggregations.category_percentage,
            ExpenseCategory(category),
            year,
            month,
        )

    def category_breakdown(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> list[CategoryShare]:
        return self._compute(
            "category_breakdown", aggregations.category_breakdown, year, month
        )

    def monthly_total(self, year: int, month: int) -> Decimal:
        return self._compute("monthly_total", aggregations.monthly_total, year, month)

    # Subsets

    def expenses_on(self, day: dt.date) -> list[Expense]:
        if isinstance(day, dt.datetime):
            day = day.date()
        return self._compute("expenses_on", aggregations.expenses_on, day)

    def expenses_in(self, year: int, month: int) -> list[Expense]:
        return self._compute("expenses_in", aggregations.expenses_in, year, month)

    def expenses_by_category(self, category: CategoryLike) -> list[Expense]:
        return self._compute(
            "expenses_by_category",
            aggregations.expenses_by_category,
            ExpenseCategory(category),
        )

    def days_with_expenses(self, year: int, month: int) -> set[int]:
        return self._compute(
            "days_with_expenses", aggregations.days_with_expenses, year, month
        )
