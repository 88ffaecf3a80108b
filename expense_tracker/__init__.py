"""
Expense Tracker - Source Package

A personal expense tracker: log dated, categorized expenses, browse them
on a calendar, and see where the money went each month.

DESIGN PRINCIPLES:
1. One owner for the expense list: the ExpenseStore
2. Validate at the form, not in the store
3. Durability is best effort; memory is the source of truth
4. Every aggregate is derived, never stored
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
