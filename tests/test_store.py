"""Tests for the ExpenseStore CRUD operations and their persistence."""

import json
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from expense_tracker.models.audit import AuditEventType
from expense_tracker.models.expense import ExpenseCategory, ExpenseUpdate
from expense_tracker.services.storage import (
    ExpensePersistenceAdapter,
    InMemoryKeyValueStorage,
)
from expense_tracker.store import ExpenseStore


class CountingAdapter(ExpensePersistenceAdapter):
    """Adapter that records how many times save was called."""

    def __init__(self, storage):
        super().__init__(storage)
        self.saves = 0

    def save(self, slot_name, expenses):
        self.saves += 1
        return super().save(slot_name, expenses)


@pytest.fixture
def counting_store(storage):
    adapter = CountingAdapter(storage)
    return ExpenseStore(adapter, slot_name="expenses"), adapter


class TestStoreLoading:
    def test_starts_empty_without_data(self, store):
        assert store.count() == 0
        assert store.total() == 0

    def test_loads_existing_slot(self, adapter, sample_expenses):
        adapter.save("expenses", sample_expenses)
        store = ExpenseStore(adapter, slot_name="expenses")
        assert store.snapshot() == sample_expenses

    def test_corrupt_slot_is_audited(self, storage, audit_logger):
        storage.set_item("expenses", "not json")
        store = ExpenseStore(
            ExpensePersistenceAdapter(storage), audit_logger=audit_logger
        )
        assert store.count() == 0
        [event] = audit_logger.recent_events()
        assert event.event_type == AuditEventType.STORAGE_LOAD_RECOVERED


class TestStoreCrud:
    """Tests for add/get/update/delete/delete_many/clear."""

    def test_add_then_get(self, store, expense_factory):
        expense = expense_factory()
        store.add(expense)
        assert store.get(expense.id) == expense

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None

    def test_add_does_not_check_duplicates(self, store, expense_factory):
        expense = expense_factory(expense_id="dup")
        store.add(expense)
        store.add(expense)
        assert store.count() == 2

    def test_delete_then_get(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        assert store.delete("e2") is True
        assert store.get("e2") is None
        assert store.count() == 2

    def test_delete_unknown_leaves_count(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        assert store.delete("missing") is False
        assert store.count() == 3

    def test_update_changes_only_given_field(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        before = store.get("e1")
        updated = store.update("e1", {"amount": 99})

        assert updated.amount == 99
        assert updated.id == before.id
        assert updated.date == before.date
        assert updated.category == before.category
        assert updated.description == before.description
        assert store.get("e1") == updated

    def test_update_keeps_position(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        store.update("e2", ExpenseUpdate(description="Espresso"))
        assert [e.id for e in store.snapshot()] == ["e1", "e2", "e3"]

    def test_update_unknown_is_noop(self, store, sample_expenses, audit_logger):
        for e in sample_expenses:
            store.add(e)
        before = store.snapshot()
        assert store.update("missing", {"amount": 1}) is None
        assert store.snapshot() == before
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.MUTATION_IGNORED

    def test_update_rejects_invalid_changes(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        with pytest.raises(ValidationError):
            store.update("e1", {"amount": -1})
        with pytest.raises(ValidationError):
            store.update("e1", {"id": "hijack"})
        assert store.get("e1").amount == 10.0

    def test_update_rejects_null_fields(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        version = store.version
        with pytest.raises(ValidationError):
            store.update("e1", {"amount": None})
        with pytest.raises(ValidationError):
            store.update("missing", {"amount": None})
        assert store.version == version
        assert store.get("e1").amount == Decimal("10")

    def test_total_is_exact(self, store, expense_factory):
        store.add(expense_factory(amount=0.1))
        store.add(expense_factory(amount=0.2))
        assert store.total() == Decimal("0.3")

    def test_update_accepts_date_string(self, store, sample_expenses):
        store.add(sample_expenses[0])
        updated = store.update("e1", {"date": "2024-05-01"})
        assert updated.date == date(2024, 5, 1)

    def test_delete_many(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        assert store.delete_many(["e1", "e3", "unknown"]) == 2
        assert [e.id for e in store.snapshot()] == ["e2"]

    def test_delete_many_empty_is_idempotent(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        before = store.snapshot()
        assert store.delete_many([]) == 0
        assert store.snapshot() == before

    def test_clear(self, store, storage, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        store.clear()
        assert store.count() == 0
        assert json.loads(storage.get_item("expenses")) == []

    def test_count_and_total(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        assert store.count() == 3
        assert store.total() == 18.0


class TestStorePersistence:
    """Every mutator call persists exactly once."""

    def test_each_mutator_saves_once(self, counting_store, expense_factory):
        store, adapter = counting_store
        expense = expense_factory(expense_id="a")

        store.add(expense)
        assert adapter.saves == 1
        store.update("a", {"amount": 2})
        assert adapter.saves == 2
        store.update("missing", {"amount": 2})
        assert adapter.saves == 3
        store.delete("missing")
        assert adapter.saves == 4
        store.delete_many([])
        assert adapter.saves == 5
        store.delete("a")
        assert adapter.saves == 6
        store.clear()
        assert adapter.saves == 7

    def test_reads_do_not_save(self, counting_store):
        store, adapter = counting_store
        store.get("x")
        store.snapshot()
        store.count()
        store.total()
        assert adapter.saves == 0

    def test_slot_reflects_latest_mutation(self, store, adapter, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        store.delete("e1")
        assert adapter.load("expenses") == store.snapshot()

    def test_version_increments(self, store, expense_factory):
        start = store.version
        store.add(expense_factory())
        store.delete("missing")
        assert store.version == start + 2

    def test_write_failure_keeps_memory_authoritative(self, audit_logger, sample_expenses):
        """Test that a failed save does not roll back the in-memory change."""
        adapter = ExpensePersistenceAdapter(InMemoryKeyValueStorage(quota_bytes=150))
        store = ExpenseStore(adapter, audit_logger=audit_logger)

        store.add(sample_expenses[0])
        assert store.last_save_succeeded is True

        store.add(sample_expenses[1])
        assert store.last_save_succeeded is False
        assert store.count() == 2
        assert [e.id for e in adapter.load("expenses")] == ["e1"]

        types = [e.event_type for e in audit_logger.recent_events()]
        assert AuditEventType.STORAGE_SAVE_FAILED in types


class TestStoreSnapshots:
    def test_snapshot_is_a_copy(self, store, sample_expenses):
        for e in sample_expenses:
            store.add(e)
        snapshot = store.snapshot()
        snapshot.clear()
        assert store.count() == 3

    def test_records_cannot_be_mutated_through_get(self, store, sample_expenses):
        store.add(sample_expenses[0])
        with pytest.raises(ValidationError):
            store.get("e1").category = ExpenseCategory.DAILY
