"""Shared fixtures: in-memory storage and a few known expenses."""

from datetime import date

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.expense import Expense, ExpenseCategory
from expense_tracker.services.storage import (
    ExpensePersistenceAdapter,
    InMemoryKeyValueStorage,
)
from expense_tracker.store import ExpenseStore


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point storage at a temp file and drop cached settings around each test."""
    monkeypatch.setenv("EXPENSE_STORAGE_DATA_PATH", str(tmp_path / "local_storage.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def adapter(storage):
    return ExpensePersistenceAdapter(storage)


@pytest.fixture
def audit_logger():
    return AuditLogger(history_size=50)


@pytest.fixture
def store(adapter, audit_logger):
    return ExpenseStore(adapter, slot_name="expenses", audit_logger=audit_logger)


def make_expense(
    category: ExpenseCategory = ExpenseCategory.FOOD,
    amount: float = 10.0,
    day: date = date(2024, 1, 15),
    description: str = "Lunch",
    expense_id: str | None = None,
) -> Expense:
    fields = dict(date=day, category=category, amount=amount, description=description)
    if expense_id is not None:
        fields["id"] = expense_id
    return Expense(**fields)


@pytest.fixture
def expense_factory():
    return make_expense


@pytest.fixture
def sample_expenses():
    """food 10, food 5, daily 3 spread over January and February 2024."""
    return [
        make_expense(ExpenseCategory.FOOD, 10.0, date(2024, 1, 15), "Lunch", "e1"),
        make_expense(ExpenseCategory.FOOD, 5.0, date(2024, 2, 3), "Coffee", "e2"),
        make_expense(ExpenseCategory.DAILY, 3.0, date(2024, 1, 15), "Soap", "e3"),
    ]
