"""Services package."""

from expense_tracker.services.storage import (
    ExpensePersistenceAdapter,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
    QuotaExceededError,
    SlotLoadResult,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    "ExpensePersistenceAdapter",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueStorageInterface",
    "QuotaExceededError",
    "SlotLoadResult",
    "StorageError",
    "StorageUnavailableError",
]
