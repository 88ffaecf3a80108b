"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    CategoryShare,
    CategoryTotal,
    Expense,
    ExpenseCategory,
    ExpenseUpdate,
    FormValidationResult,
    ValidationIssue,
    new_expense_id,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CategoryShare",
    "CategoryTotal",
    "Expense",
    "ExpenseCategory",
    "ExpenseUpdate",
    "FormValidationResult",
    "ValidationIssue",
    "new_expense_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
