"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the flows for:
1. Expense entry (form → validate → build → store → persist)
2. Dashboard (calendar selection → derived views)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing form validation
- Every mutation is audited
- The UI only ever sees snapshots and derived views
"""

import datetime as dt
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, NamedTuple, Optional

import structlog
from pydantic import BaseModel, Field

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.expense import (
    CategoryTotal,
    Expense,
    FormValidationResult,
)
from expense_tracker.queries import AggregationEngine
from expense_tracker.services.storage import (
    ExpensePersistenceAdapter,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
    StorageError,
)
from expense_tracker.store import ExpenseStore
from expense_tracker.validation import ExpenseFormValidator
from expense_tracker.views.calendar import CalendarState


logger = structlog.get_logger(__name__)


class DashboardData(BaseModel):
    """Everything the dashboard page renders for one calendar state."""

    period: dt.date
    period_label: str
    selected_date: dt.date
    category_totals: list[CategoryTotal] = Field(default_factory=list)
    monthly_total: Decimal = Decimal("0")
    daily_expenses: list[Expense] = Field(default_factory=list)
    marked_days: set[int] = Field(default_factory=set)


class ExpenseFlow:
    """
    Orchestrates expense entry and editing.

    Flow:
    1. Form input → two-stage validation
    2. Errors → returned to the form, audited, nothing stored
    3. Valid → Expense built (id minted) → store mutator → persisted
    """

    def __init__(
        self,
        store: ExpenseStore,
        validator: Optional[ExpenseFormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or ExpenseFormValidator()
        self._audit_logger = audit_logger

    def _reject(self, operation: str, result: FormValidationResult) -> None:
        if self._audit_logger:
            self._audit_logger.log_validation_failed(
                operation,
                [issue.model_dump() for issue in result.issues if issue.severity == "error"],
            )

    def submit(
        self,
        form: Mapping[str, Any],
    ) -> tuple[Optional[Expense], FormValidationResult]:
        """
        Validate a new-expense form and add it to the store.

        Returns:
            (expense, validation_result). expense is None when the form
            has errors.
        """
        result = self._validator.validate(form)
        if not result.is_valid:
            self._reject("add", result)
            return None, result

        expense = self._validator.build_expense(form)
        self._store.add(expense)
        return expense, result

    def edit(
        self,
        expense_id: str,
        form: Mapping[str, Any],
    ) -> tuple[Optional[Expense], FormValidationResult]:
        """
        Validate the provided fields and merge them into an expense.

        Returns:
            (updated_expense, validation_result). updated_expense is None
            when the form has errors or the id is unknown.
        """
        result = self._validator.validate(form, partial=True)
        if not result.is_valid:
            self._reject("update", result)
            return None, result

        changes = self._validator.build_update(form)
        return self._store.update(expense_id, changes), result

    def remove(self, expense_id: str) -> bool:
        return self._store.delete(expense_id)

    def remove_many(self, expense_ids: Iterable[str]) -> int:
        return self._store.delete_many(expense_ids)

    def clear_all(self) -> None:
        self._store.clear()


class DashboardFlow:
    """Turns a calendar state into the views the dashboard shows."""

    def __init__(self, engine: AggregationEngine):
        self._engine = engine

    def build(self, calendar: CalendarState) -> DashboardData:
        year, month = calendar.month_filter
        return DashboardData(
            period=calendar.displayed_month,
            period_label=calendar.period_label,
            selected_date=calendar.selected_date,
            category_totals=self._engine.category_totals_ranked(year, month),
            monthly_total=self._engine.monthly_total(year, month),
            daily_expenses=self._engine.expenses_on(calendar.selected_date),
            marked_days=self._engine.days_with_expenses(year, month),
        )


class AppComponents(NamedTuple):
    store: ExpenseStore
    engine: AggregationEngine
    expense_flow: ExpenseFlow
    dashboard_flow: DashboardFlow
    audit_logger: AuditLogger


def _create_storage(use_file_storage: bool) -> KeyValueStorageInterface:
    storage_settings = get_settings().storage

    if not use_file_storage or storage_settings.backend == "memory":
        return InMemoryKeyValueStorage(quota_bytes=storage_settings.quota_bytes)

    storage = JsonFileKeyValueStorage(
        storage_settings.data_path,
        quota_bytes=storage_settings.quota_bytes,
    )
    try:
        storage.keys()
    except StorageError as e:
        # An unreadable container is rewritten on the first save
        logger.warning("storage_file_unreadable", path=str(storage.path), error=str(e))
    return storage


def create_app_components(
    use_file_storage: bool = True,
    storage: Optional[KeyValueStorageInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_file_storage: Whether to keep expenses in the configured JSON
                    file. Set to False for an in-memory session.
        storage: Explicit storage backend; overrides use_file_storage.

    Returns:
        AppComponents(store, engine, expense_flow, dashboard_flow, audit_logger)
    """
    settings = get_settings()
    audit_logger = AuditLogger(history_size=settings.app.audit_history_size)

    if storage is None:
        try:
            storage = _create_storage(use_file_storage)
        except Exception as e:
            logger.warning("storage_not_configured", error=str(e))
            audit_logger.log_error("storage_not_configured", str(e))
            storage = InMemoryKeyValueStorage()

    adapter = ExpensePersistenceAdapter(storage)
    store = ExpenseStore(
        adapter,
        slot_name=settings.storage.slot_name,
        audit_logger=audit_logger,
    )
    engine = AggregationEngine(store)

    return AppComponents(
        store=store,
        engine=engine,
        expense_flow=ExpenseFlow(store, audit_logger=audit_logger),
        dashboard_flow=DashboardFlow(engine),
        audit_logger=audit_logger,
    )
