"""
Expense Persistence Adapter

Reads and writes the serialized expense list in a single named slot.

The slot holds a JSON array of objects with the fields id, date
(ISO-8601 calendar date), category, amount and description.

Loading is forgiving: a missing, unparsable or malformed slot yields an
empty list and a logged warning. Dates are always rebuilt as
datetime.date values, never left as strings.
"""

import json
from typing import Iterable, Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from expense_tracker.models.expense import Expense
from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class SlotLoadResult(BaseModel):
    """Outcome of reading a slot: the expenses plus why it was empty, if it was recovered."""

    expenses: list[Expense] = Field(default_factory=list)
    recovered_reason: Optional[str] = None

    @property
    def recovered(self) -> bool:
        return self.recovered_reason is not None


class ExpensePersistenceAdapter:
    """Serializes expense lists into a key-value storage slot."""

    def __init__(self, storage: KeyValueStorageInterface):
        self._storage = storage

    @property
    def storage(self) -> KeyValueStorageInterface:
        return self._storage

    def load(self, slot_name: str) -> list[Expense]:
        """
        Read the expense list from a slot.

        Never raises for absent or corrupt data; returns an empty list.
        """
        return self.load_with_status(slot_name).expenses

    def load_with_status(self, slot_name: str) -> SlotLoadResult:
        """Like load, but also reports whether corrupt data was discarded."""
        try:
            raw = self._storage.get_item(slot_name)
        except StorageError as e:
            return self._recover(slot_name, f"storage unreadable: {e}")

        if raw is None:
            logger.info("expense_slot_empty", slot=slot_name)
            return SlotLoadResult()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            return self._recover(slot_name, f"invalid JSON: {e}")

        if not isinstance(data, list):
            return self._recover(
                slot_name, f"expected a list, found {type(data).__name__}"
            )

        try:
            expenses = [Expense.model_validate(item) for item in data]
        except ValidationError as e:
            return self._recover(
                slot_name, f"malformed expense record: {e.error_count()} errors"
            )

        logger.debug("expense_slot_loaded", slot=slot_name, count=len(expenses))
        return SlotLoadResult(expenses=expenses)

    def save(self, slot_name: str, expenses: Iterable[Expense]) -> bool:
        """
        Overwrite a slot with the full expense list.

        Returns False (and logs) when the storage rejects the write.
        """
        records = [expense.to_storage_dict() for expense in expenses]
        text = json.dumps(records, ensure_ascii=False)

        try:
            self._storage.set_item(slot_name, text)
        except StorageError as e:
            logger.error(
                "expense_slot_save_failed",
                slot=slot_name,
                count=len(records),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        logger.debug("expense_slot_saved", slot=slot_name, count=len(records))
        return True

    def clear_slot(self, slot_name: str) -> None:
        """Remove the slot entirely."""
        self._storage.remove_item(slot_name)

    def _recover(self, slot_name: str, reason: str) -> SlotLoadResult:
        logger.warning("expense_slot_recovered", slot=slot_name, reason=reason)
        return SlotLoadResult(recovered_reason=reason)
