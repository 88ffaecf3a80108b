"""Tests for key-value storage backends and the expense persistence adapter."""

import json
from datetime import date

import pytest

from expense_tracker.models.expense import Expense, ExpenseCategory
from expense_tracker.services.storage import (
    ExpensePersistenceAdapter,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    QuotaExceededError,
    StorageUnavailableError,
)
from expense_tracker.store import ExpenseStore


class TestInMemoryStorage:
    def test_set_get_remove(self):
        storage = InMemoryKeyValueStorage()
        assert storage.get_item("k") is None
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"
        assert storage.keys() == ["k"]
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_remove_missing_is_noop(self):
        InMemoryKeyValueStorage().remove_item("missing")

    def test_quota_exceeded_leaves_previous_value(self):
        """Test that a rejected write does not partially apply."""
        storage = InMemoryKeyValueStorage(quota_bytes=40)
        storage.set_item("k", "small")
        with pytest.raises(QuotaExceededError):
            storage.set_item("k", "x" * 100)
        assert storage.get_item("k") == "small"


class TestJsonFileStorage:
    def test_round_trip_through_disk(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        storage = JsonFileKeyValueStorage(path)
        storage.set_item("expenses", "[]")

        reopened = JsonFileKeyValueStorage(path)
        assert reopened.get_item("expenses") == "[]"
        assert json.loads(path.read_text(encoding="utf-8")) == {"expenses": "[]"}

    def test_missing_file_reads_as_empty(self, tmp_path):
        storage = JsonFileKeyValueStorage(tmp_path / "absent.json")
        assert storage.get_item("expenses") is None
        assert storage.keys() == []

    def test_corrupt_container_raises_on_read(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageUnavailableError):
            JsonFileKeyValueStorage(path).get_item("expenses")

    def test_corrupt_container_is_replaced_on_write(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        storage = JsonFileKeyValueStorage(path)
        storage.set_item("expenses", "[]")
        assert storage.get_item("expenses") == "[]"

    def test_undecodable_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b"\xff\xfe garbage")
        with pytest.raises(StorageUnavailableError):
            JsonFileKeyValueStorage(path).get_item("expenses")

    def test_remove_on_corrupt_container_resets_it(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b"\xff\xfe garbage")
        storage = JsonFileKeyValueStorage(path)
        storage.remove_item("expenses")
        assert storage.keys() == []

    def test_other_slots_survive_writes(self, tmp_path):
        storage = JsonFileKeyValueStorage(tmp_path / "store.json")
        storage.set_item("theme", "dark")
        storage.set_item("expenses", "[]")
        assert storage.get_item("theme") == "dark"

    def test_quota_exceeded_keeps_file(self, tmp_path):
        path = tmp_path / "store.json"
        storage = JsonFileKeyValueStorage(path, quota_bytes=1024)
        storage.set_item("expenses", "[]")
        with pytest.raises(QuotaExceededError):
            storage.set_item("expenses", "x" * 2048)
        assert storage.get_item("expenses") == "[]"
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


class TestPersistenceAdapter:
    """Tests for ExpensePersistenceAdapter load/save."""

    def test_round_trip_preserves_dates(self, adapter, sample_expenses):
        """Test save then load yields equal records with real dates."""
        assert adapter.save("expenses", sample_expenses) is True
        loaded = adapter.load("expenses")
        assert loaded == sample_expenses
        assert all(isinstance(e.date, date) for e in loaded)

    def test_slot_format(self, adapter, storage, sample_expenses):
        adapter.save("expenses", sample_expenses[:1])
        assert json.loads(storage.get_item("expenses")) == [
            {
                "id": "e1",
                "date": "2024-01-15",
                "category": "food",
                "amount": 10.0,
                "description": "Lunch",
            }
        ]

    def test_missing_slot_loads_empty(self, adapter):
        result = adapter.load_with_status("expenses")
        assert result.expenses == []
        assert result.recovered is False

    def test_invalid_json_loads_empty(self, adapter, storage):
        storage.set_item("expenses", "{oops")
        result = adapter.load_with_status("expenses")
        assert result.expenses == []
        assert result.recovered is True
        assert "invalid JSON" in result.recovered_reason

    def test_non_list_loads_empty(self, adapter, storage):
        storage.set_item("expenses", '{"id": "e1"}')
        assert adapter.load("expenses") == []

    def test_malformed_record_loads_empty(self, adapter, storage):
        storage.set_item(
            "expenses",
            json.dumps([
                {"id": "e1", "date": "2024-01-15", "category": "food",
                 "amount": 10, "description": "Lunch"},
                {"id": "e2", "date": "not a date", "category": "food",
                 "amount": 10, "description": "Lunch"},
            ]),
        )
        assert adapter.load("expenses") == []

    def test_legacy_timestamps_become_dates(self, adapter, storage):
        """Test that older saved data with full timestamps still loads as dates."""
        storage.set_item(
            "expenses",
            json.dumps([
                {"id": "e1", "date": "2024-01-15T00:00:00.000Z", "category": "daily",
                 "amount": 3, "description": "Soap"},
            ]),
        )
        [expense] = adapter.load("expenses")
        assert expense.date == date(2024, 1, 15)
        assert expense.category == ExpenseCategory.DAILY

    def test_unreadable_storage_loads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("garbage", encoding="utf-8")
        adapter = ExpensePersistenceAdapter(JsonFileKeyValueStorage(path))
        assert adapter.load("expenses") == []

    def test_non_utf8_file_loads_empty_then_heals(self, tmp_path, sample_expenses):
        """Test that a file with undecodable bytes is recovered, then replaced on save."""
        path = tmp_path / "store.json"
        path.write_bytes(b'{"expenses": "\xff\xfe"}')
        adapter = ExpensePersistenceAdapter(JsonFileKeyValueStorage(path))

        result = adapter.load_with_status("expenses")
        assert result.expenses == []
        assert result.recovered is True

        assert adapter.save("expenses", sample_expenses) is True
        assert adapter.load("expenses") == sample_expenses

    def test_store_opens_over_non_utf8_file(self, tmp_path, expense_factory):
        path = tmp_path / "store.json"
        path.write_bytes(b"\xff\xfe garbage")
        adapter = ExpensePersistenceAdapter(JsonFileKeyValueStorage(path))
        store = ExpenseStore(adapter)
        assert store.count() == 0

        store.add(expense_factory(expense_id="a"))
        assert store.last_save_succeeded is True
        adapter.clear_slot("expenses")
        assert adapter.load("expenses") == []

    def test_save_failure_returns_false(self, sample_expenses):
        adapter = ExpensePersistenceAdapter(InMemoryKeyValueStorage(quota_bytes=64))
        assert adapter.save("expenses", sample_expenses) is False

    def test_save_overwrites_whole_slot(self, adapter, sample_expenses):
        adapter.save("expenses", sample_expenses)
        adapter.save("expenses", sample_expenses[:1])
        assert [e.id for e in adapter.load("expenses")] == ["e1"]

    def test_clear_slot(self, adapter, storage, sample_expenses):
        adapter.save("expenses", sample_expenses)
        adapter.clear_slot("expenses")
        assert storage.get_item("expenses") is None

    def test_round_trip_on_disk(self, tmp_path):
        adapter = ExpensePersistenceAdapter(JsonFileKeyValueStorage(tmp_path / "s.json"))
        expense = Expense(date=date(2023, 12, 31), category="recreation",
                          amount=49.99, description="Concert")
        adapter.save("expenses", [expense])
        assert adapter.load("expenses") == [expense]
