"""
Local Key-Value Storage Backends

Two implementations of KeyValueStorageInterface:

- JsonFileKeyValueStorage: all slots live in one JSON object on disk,
  rewritten atomically on every set/remove.
- InMemoryKeyValueStorage: a dict, for tests and for running without a
  writable disk.

Both enforce an optional byte quota over the whole encoded store, the way
browser local storage limits the total size of an origin's data.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog

from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    QuotaExceededError,
    StorageUnavailableError,
)


logger = structlog.get_logger(__name__)


def _encoded_size(items: dict[str, str]) -> int:
    return len(json.dumps(items, ensure_ascii=False).encode("utf-8"))


class InMemoryKeyValueStorage(KeyValueStorageInterface):
    """Dict-backed storage. Contents vanish with the process."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        candidate = dict(self._items)
        candidate[key] = value
        if self._quota_bytes is not None and _encoded_size(candidate) > self._quota_bytes:
            raise QuotaExceededError(
                f"Writing slot '{key}' would exceed the {self._quota_bytes} byte quota"
            )
        self._items = candidate

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileKeyValueStorage(KeyValueStorageInterface):
    """
    File-backed storage.

    The file holds a single JSON object mapping slot names to text.
    Every write goes to a temporary file in the same directory that then
    replaces the target with os.replace, so readers never see a partial
    file.
    """

    def __init__(
        self,
        path: str | Path,
        quota_bytes: Optional[int] = None,
    ):
        self._path = Path(path).expanduser()
        self._quota_bytes = quota_bytes

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """
        Load every slot from disk.

        Raises:
            StorageUnavailableError: If the file is unreadable or not a
                JSON object of strings
        """
        if not self._path.exists():
            return {}

        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Cannot read {self._path}: {e}") from e

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageUnavailableError(f"{self._path} is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise StorageUnavailableError(
                f"{self._path} does not hold a mapping of slot names to text"
            )
        return data

    def _write_all(self, items: dict[str, str]) -> None:
        text = json.dumps(items, ensure_ascii=False, indent=2)
        size = len(text.encode("utf-8"))
        if self._quota_bytes is not None and size > self._quota_bytes:
            raise QuotaExceededError(
                f"Storage file would be {size} bytes, quota is {self._quota_bytes}"
            )

        temp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                suffix=".tmp",
                prefix=self._path.name + "-",
                dir=self._path.parent,
                delete=False,
            ) as tf:
                temp_name = tf.name
                tf.write(text)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(temp_name, self._path)
        except OSError as e:
            if temp_name and os.path.exists(temp_name):
                try:
                    os.unlink(temp_name)
                except OSError:
                    logger.warning("temp_file_cleanup_failed", temp_file=temp_name)
            raise StorageUnavailableError(f"Cannot write {self._path}: {e}") from e

        logger.debug("storage_file_written", path=str(self._path), size_bytes=size)

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read_all()
        except StorageUnavailableError as e:
            # An unreadable container is replaced wholesale
            logger.warning("storage_file_reset", path=str(self._path), error=str(e))
            items = {}
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        try:
            items = self._read_all()
        except StorageUnavailableError as e:
            logger.warning("storage_file_reset", path=str(self._path), error=str(e))
            self._write_all({})
            return
        if key in items:
            del items[key]
            self._write_all(items)

    def keys(self) -> list[str]:
        return list(self._read_all())
