"""Presentation helpers used by the Streamlit app."""

from expense_tracker.views.calendar import CalendarState
from expense_tracker.views.chart import build_donut_chart
from expense_tracker.views.table import COLUMNS, ExpenseTable, format_currency

__all__ = [
    "COLUMNS",
    "CalendarState",
    "ExpenseTable",
    "build_donut_chart",
    "format_currency",
]
