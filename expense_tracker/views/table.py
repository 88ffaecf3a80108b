"""
Expense Table Model

DESIGN DECISION: The table receives its delete and update callbacks as
constructor arguments. Row actions call exactly those functions; nothing
is looked up from shared or global state.
"""

from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel

from expense_tracker.models.expense import Expense


DeleteCallback = Callable[[str], Any]
UpdateCallback = Callable[[str, Mapping[str, Any]], Any]


class TableColumn(BaseModel):
    key: str
    header: str
    align: str = "left"
    sortable: bool = False


COLUMNS: tuple[TableColumn, ...] = (
    TableColumn(key="date", header="Date", sortable=True),
    TableColumn(key="category", header="Category"),
    TableColumn(key="amount", header="Amount", align="right", sortable=True),
    TableColumn(key="description", header="Description"),
    TableColumn(key="actions", header=""),
)


def format_currency(amount: Union[Decimal, float], currency: str = "USD") -> str:
    """Format an amount the way the table shows it, e.g. ``$1,234.50``."""
    symbols = {"USD": "$", "EUR": "€", "GBP": "£", "INR": "₹"}
    symbol = symbols.get(currency.upper())
    if symbol is None:
        return f"{amount:,.2f} {currency.upper()}"
    return f"{symbol}{amount:,.2f}"


class ExpenseTable:
    """
    Rows and row actions for a list of expenses.

    Ordering is a display concern; the expenses passed in are never
    reordered in place.
    """

    def __init__(
        self,
        on_delete: DeleteCallback,
        on_update: UpdateCallback,
        currency: str = "USD",
    ):
        self._on_delete = on_delete
        self._on_update = on_update
        self._currency = currency

    @property
    def columns(self) -> tuple[TableColumn, ...]:
        return COLUMNS

    def rows(
        self,
        expenses: Iterable[Expense],
        sort_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Display rows, optionally sorted by a sortable column.

        Each row keeps its ``id`` so the row actions can refer back to it.
        """
        items = list(expenses)
        if sort_by is not None:
            column = next((c for c in COLUMNS if c.key == sort_by), None)
            if column is None or not column.sortable:
                raise ValueError(f"Column '{sort_by}' cannot be sorted")
            items = sorted(items, key=lambda e: getattr(e, sort_by), reverse=descending)

        return [
            {
                "id": expense.id,
                "date": expense.date.strftime("%m/%d/%Y"),
                "category": expense.category.label,
                "amount": format_currency(expense.amount, self._currency),
                "description": expense.description,
            }
            for expense in items
        ]

    def delete(self, expense_id: str) -> Any:
        """Row action: delete."""
        return self._on_delete(expense_id)

    def edit(self, expense_id: str, changes: Mapping[str, Any]) -> Any:
        """Row action: edit with partial field changes."""
        return self._on_update(expense_id, changes)
