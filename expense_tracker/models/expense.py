"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the record invariants (positive amount, bounded description)
2. Provide clear validation error messages
3. Round-trip through the durable storage slot without losing date semantics

DESIGN DECISION: Expense records are frozen.
The store hands out snapshots, and immutable records mean a snapshot can
never be used to reach back into the store's list and change it.
"""

import datetime as dt
import math
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    The set is closed: aggregation and the chart legend depend on it.
    """
    FOOD = "food"
    DAILY = "daily"
    TRANSPORTATION = "transportation"
    RECREATION = "recreation"

    @property
    def label(self) -> str:
        return self.value.title()


def new_expense_id() -> str:
    """Mint a fresh opaque expense identifier."""
    return str(uuid4())


def coerce_calendar_date(value: Any) -> Any:
    """
    Reduce datetime-ish input to a calendar date.

    Older saved data stored full timestamps such as
    ``2024-01-15T08:00:00.000Z``; only the date part is meaningful here.
    Anything else is passed through for pydantic to validate.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return dt.datetime.fromisoformat(text).date()
        except ValueError:
            return value
    return value


def coerce_money(value: Any) -> Any:
    """
    Turn float input into a Decimal through its shortest text form.

    JSON numbers and form widgets hand over floats; ``Decimal(0.1)`` would
    keep the binary error where ``Decimal("0.1")`` does not.
    """
    if isinstance(value, float) and math.isfinite(value):
        return Decimal(str(value))
    return value


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A single dated, categorized expense.

    The id is minted at construction and never changes. Updates produce a
    new instance via ExpenseStore.update.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        default_factory=new_expense_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Expense category"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount spent, strictly positive"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="What the money was spent on"
    )

    @field_validator('date', mode='before')
    @classmethod
    def reduce_to_date(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    @field_validator('amount', mode='before')
    @classmethod
    def exact_amount(cls, v: Any) -> Any:
        return coerce_money(v)

    def to_storage_dict(self) -> dict:
        """Convert to the JSON-ready shape kept in the storage slot."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "category": self.category.value,
            # Stored as a JSON number; two decimal places survive the float
            "amount": float(self.amount),
            "description": self.description,
        }


class ExpenseUpdate(BaseModel):
    """
    Partial field update for an existing expense.

    Only fields that were explicitly set are merged. The id cannot be
    changed, and unknown fields are rejected.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    date: Optional[dt.date] = None
    category: Optional[ExpenseCategory] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    description: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=100,
    )

    @field_validator('date', 'category', 'amount', 'description', mode='before')
    @classmethod
    def reject_explicit_none(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("cannot be null; leave the field out to keep it unchanged")
        return v

    @field_validator('date', mode='before')
    @classmethod
    def reduce_to_date(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    @field_validator('amount', mode='before')
    @classmethod
    def exact_amount(cls, v: Any) -> Any:
        return coerce_money(v)

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually provided."""
        return self.model_dump(exclude_unset=True)

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


# =============================================================================
# AGGREGATE MODELS
# =============================================================================

class CategoryTotal(BaseModel):
    """Summed amount for one category."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    total: Decimal


class CategoryShare(BaseModel):
    """Category total with its share of the grand total, in percent."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    total: Decimal
    percentage: float = Field(ge=0.0)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single field-level validation issue."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'too_long')"
    )
    message: str = Field(
        ...,
        description="Message shown next to the field"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class FormValidationResult(BaseModel):
    """
    Result of the two-stage form validation.

    Stage 1: Schema validation (types, required fields, bounds)
    Stage 2: Semantic validation (suspicious but allowed values)
    """

    schema_valid: bool
    semantic_valid: bool = True

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Errors block submission; warnings do not."""
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]

    def messages_for(self, field: str) -> list[str]:
        """All messages attached to one form field."""
        return [issue.message for issue in self.issues if issue.field == field]
