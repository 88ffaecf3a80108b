"""
Storage Services Package

Provides the key-value storage interface, its local backends, and the
adapter that keeps the expense list in a named slot.
"""

from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    QuotaExceededError,
    StorageError,
    StorageUnavailableError,
)
from expense_tracker.services.storage.local_file import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
)
from expense_tracker.services.storage.persistence import (
    ExpensePersistenceAdapter,
    SlotLoadResult,
)

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "QuotaExceededError",
    "StorageError",
    "StorageUnavailableError",
    # Local implementations
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    # Expense slot adapter
    "ExpensePersistenceAdapter",
    "SlotLoadResult",
]
