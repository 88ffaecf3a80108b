"""
Two-Stage Form Validation

DESIGN DECISION: Validation happens at the form boundary, before the store
is touched. It runs in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Amount present, numeric and greater than zero, in whole cents
- Date present and parseable
- Category from the fixed set
- Description non-empty and within the length limit

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Unusually large amount detection
These produce warnings only; they never block a submission.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them per field so the form can show them.
"""

import datetime as dt
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from expense_tracker.config import get_settings
from expense_tracker.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseUpdate,
    FormValidationResult,
    ValidationIssue,
    coerce_calendar_date,
    coerce_money,
)


FORM_FIELDS = ("date", "amount", "category", "description")


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = coerce_money(value)
    elif isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return amount if amount.is_finite() else None


def _parse_date(value: Any) -> Optional[dt.date]:
    value = coerce_calendar_date(value)
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _parse_category(value: Any) -> Optional[ExpenseCategory]:
    if isinstance(value, ExpenseCategory):
        return value
    if isinstance(value, str):
        try:
            return ExpenseCategory(value.strip().lower())
        except ValueError:
            return None
    return None


class ExpenseFormValidator:
    """
    Validates raw expense form input.

    Input is a mapping with any of the keys date, amount, category and
    description. Values may be typed (date, float, ExpenseCategory) or the
    strings an HTML-ish form would submit.
    """

    def __init__(self):
        self._settings = get_settings().app

    @property
    def description_max_length(self) -> int:
        return min(self._settings.description_max_length, 100)

    def _validate_schema(
        self,
        form: Mapping[str, Any],
        partial: bool,
    ) -> list[ValidationIssue]:
        """
        Stage 1: Schema validation.

        With partial=True only the keys present in the form are checked.
        """
        issues = []

        def wanted(field: str) -> bool:
            return not partial or field in form

        if wanted("amount"):
            amount = _parse_amount(form.get("amount"))
            if amount is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Please enter an amount.",
                    severity="error",
                ))
            elif amount <= 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Expense amount must be greater than $0",
                    severity="error",
                ))
            elif amount.normalize().as_tuple().exponent < -2:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount can have at most 2 decimal places",
                    severity="error",
                ))

        if wanted("date") and _parse_date(form.get("date")) is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Please select a date.",
                severity="error",
            ))

        if wanted("category") and _parse_category(form.get("category")) is None:
            issues.append(ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message="Please choose a category.",
                severity="error",
            ))

        if wanted("description"):
            description = form.get("description")
            text = description.strip() if isinstance(description, str) else ""
            if not text:
                issues.append(ValidationIssue(
                    field="description",
                    issue_type="missing",
                    message="Please provide some description",
                    severity="error",
                ))
            elif len(text) > self.description_max_length:
                issues.append(ValidationIssue(
                    field="description",
                    issue_type="too_long",
                    message=(
                        f"Description must be less than "
                        f"{self.description_max_length} letters"
                    ),
                    severity="error",
                ))

        return issues

    def _validate_semantic(self, form: Mapping[str, Any]) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Only runs on values that already passed stage 1.
        """
        issues = []

        expense_date = _parse_date(form.get("date"))
        if expense_date is not None:
            latest = dt.date.today() + dt.timedelta(
                days=self._settings.future_date_tolerance_days
            )
            if expense_date > latest:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Expense date ({expense_date}) is in the future",
                    severity="warning",
                ))

        amount = _parse_amount(form.get("amount"))
        if amount is not None and amount > self._settings.max_expense_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount {amount:,.2f} is unusually large",
                severity="warning",
            ))

        return issues

    def validate(
        self,
        form: Mapping[str, Any],
        partial: bool = False,
    ) -> FormValidationResult:
        """Run both stages. Stage 2 is skipped when stage 1 finds errors."""
        schema_issues = self._validate_schema(form, partial)
        schema_valid = not any(i.severity == "error" for i in schema_issues)

        if not schema_valid:
            return FormValidationResult(
                schema_valid=False,
                semantic_valid=False,
                issues=schema_issues,
            )

        semantic_issues = self._validate_semantic(form)
        return FormValidationResult(
            schema_valid=True,
            semantic_valid=not any(i.severity == "error" for i in semantic_issues),
            issues=schema_issues + semantic_issues,
        )

    def build_expense(self, form: Mapping[str, Any]) -> Expense:
        """
        Build a new Expense from validated form input, minting its id.

        Raises:
            ValueError: If the form does not pass stage 1
        """
        result = self.validate(form)
        if not result.is_valid:
            raise ValueError(
                "Cannot build expense from invalid form: "
                + "; ".join(i.message for i in result.issues if i.severity == "error")
            )
        return Expense(
            date=_parse_date(form.get("date")),
            category=_parse_category(form.get("category")),
            amount=_parse_amount(form.get("amount")),
            description=form["description"],
        )

    def build_update(self, form: Mapping[str, Any]) -> ExpenseUpdate:
        """
        Build a partial update from the form fields that are present.

        Raises:
            ValueError: If any present field fails stage 1
        """
        result = self.validate(form, partial=True)
        if not result.is_valid:
            raise ValueError(
                "Cannot build update from invalid form: "
                + "; ".join(i.message for i in result.issues if i.severity == "error")
            )

        changes: dict[str, Any] = {}
        if "date" in form:
            changes["date"] = _parse_date(form["date"])
        if "amount" in form:
            changes["amount"] = _parse_amount(form["amount"])
        if "category" in form:
            changes["category"] = _parse_category(form["category"])
        if "description" in form:
            changes["description"] = form["description"]
        return ExpenseUpdate(**changes)
