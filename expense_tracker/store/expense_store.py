"""
Expense Store

The single owner of the canonical expense list.

GUARANTEES:
- The list only changes through the mutators below
- Every mutator call issues exactly one save before it returns
- A failed save never rolls back memory: the in-memory list stays
  authoritative for the rest of the session
- Readers get snapshots (new lists of frozen records), never the list itself
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional, Union

import structlog

from expense_tracker.audit import AuditLogger
from expense_tracker.models.expense import Expense, ExpenseUpdate
from expense_tracker.services.storage import ExpensePersistenceAdapter


logger = structlog.get_logger(__name__)


class ExpenseStore:
    """
    In-memory expense list mirrored into a durable storage slot.

    Unknown ids are not errors: update, delete and delete_many simply
    leave the list as it is.
    """

    def __init__(
        self,
        adapter: ExpensePersistenceAdapter,
        slot_name: str = "expenses",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._adapter = adapter
        self._slot_name = slot_name
        self._audit_logger = audit_logger
        self._version = 0
        self._last_save_succeeded = True

        loaded = adapter.load_with_status(slot_name)
        self._expenses: list[Expense] = list(loaded.expenses)

        if self._audit_logger:
            if loaded.recovered:
                self._audit_logger.log_storage_load_recovered(
                    slot_name, loaded.recovered_reason or "unknown"
                )
            else:
                self._audit_logger.log_storage_loaded(slot_name, len(self._expenses))

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def slot_name(self) -> str:
        return self._slot_name

    @property
    def version(self) -> int:
        """Monotonic counter bumped by every mutator call."""
        return self._version

    @property
    def last_save_succeeded(self) -> bool:
        return self._last_save_succeeded

    def snapshot(self) -> list[Expense]:
        """The current list in canonical order, as a new list."""
        return list(self._expenses)

    def get(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    def count(self) -> int:
        return len(self._expenses)

    def total(self) -> Decimal:
        return sum((expense.amount for expense in self._expenses), Decimal("0"))

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add(self, expense: Expense) -> None:
        """
        Append a fully formed expense.

        The id was minted when the Expense was built; it is not checked
        for duplicates here.
        """
        self._expenses = [*self._expenses, expense]
        self._commit()

        if self._audit_logger:
            self._audit_logger.log_expense_added(
                expense.id, expense.category.value, str(expense.amount)
            )

    def update(
        self,
        expense_id: str,
        changes: Union[ExpenseUpdate, Mapping[str, Any]],
    ) -> Optional[Expense]:
        """
        Merge the provided fields into the matching expense.

        Fields not present in ``changes`` are left untouched. Returns the
        updated expense, or None when no expense has that id.

        Raises:
            pydantic.ValidationError: If ``changes`` is a mapping that does
                not describe a valid partial update
        """
        if not isinstance(changes, ExpenseUpdate):
            changes = ExpenseUpdate.model_validate(dict(changes))

        fields = changes.changes()
        updated: Optional[Expense] = None
        new_list = []
        for expense in self._expenses:
            if expense.id == expense_id and updated is None:
                updated = Expense.model_validate({**expense.model_dump(), **fields})
                new_list.append(updated)
            else:
                new_list.append(expense)

        self._expenses = new_list
        self._commit()

        if self._audit_logger:
            if updated is None:
                self._audit_logger.log_mutation_ignored("update", expense_id)
            else:
                self._audit_logger.log_expense_updated(expense_id, sorted(fields))
        return updated

    def delete(self, expense_id: str) -> bool:
        """Remove the matching expense. Returns whether anything was removed."""
        before = len(self._expenses)
        self._expenses = [e for e in self._expenses if e.id != expense_id]
        removed = len(self._expenses) < before
        self._commit()

        if self._audit_logger:
            if removed:
                self._audit_logger.log_expense_deleted(expense_id)
            else:
                self._audit_logger.log_mutation_ignored("delete", expense_id)
        return removed

    def delete_many(self, expense_ids: Iterable[str]) -> int:
        """Remove every expense whose id is given. Returns how many were removed."""
        targets = set(expense_ids)
        before = len(self._expenses)
        self._expenses = [e for e in self._expenses if e.id not in targets]
        removed = before - len(self._expenses)
        self._commit()

        if self._audit_logger:
            self._audit_logger.log_expenses_deleted(len(targets), removed)
        return removed

    def clear(self) -> None:
        """Remove every expense."""
        removed = len(self._expenses)
        self._expenses = []
        self._commit()

        if self._audit_logger:
            self._audit_logger.log_expenses_cleared(removed)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _commit(self) -> None:
        self._version += 1
        self._last_save_succeeded = self._adapter.save(self._slot_name, self._expenses)

        if not self._last_save_succeeded:
            logger.warning(
                "store_diverged_from_storage",
                slot=self._slot_name,
                version=self._version,
                count=len(self._expenses),
            )
            if self._audit_logger:
                self._audit_logger.log_storage_save_failed(
                    self._slot_name, len(self._expenses)
                )
