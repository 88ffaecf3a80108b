"""Form validation package."""

from expense_tracker.validation.validator import FORM_FIELDS, ExpenseFormValidator

__all__ = ["FORM_FIELDS", "ExpenseFormValidator"]
