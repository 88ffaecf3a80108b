"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract key-value interface for durable storage.
It mirrors the shape of browser local storage: named slots holding text.
This allows us to:
1. Keep expenses in a JSON file on disk for the app
2. Use in-memory storage for testing
3. Keep the expense store decoupled from where bytes end up

The interface is intentionally simple - we're not building a database.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for slot-based text storage.

    Any storage implementation (JSON file, memory, ...) must implement
    these methods.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the text stored under a key.

        Args:
            key: Slot name

        Returns:
            The stored text, or None if the slot is absent

        Raises:
            StorageUnavailableError: If the backing medium cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Replace the text stored under a key.

        The write is all-or-nothing from the caller's point of view.

        Raises:
            QuotaExceededError: If the write would exceed the storage quota
            StorageError: If the write fails for any other reason
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a slot. Removing an absent slot is not an error."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """Names of all slots currently stored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class QuotaExceededError(StorageError):
    """The write would grow storage beyond its quota."""
    pass


class StorageUnavailableError(StorageError):
    """The storage medium could not be read or written."""
    pass
