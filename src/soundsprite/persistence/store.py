"""Durable string key-value store backed by one JSON file."""

import json
import logging
import shutil
from pathlib import Path
from threading import Lock
from typing import Optional

from ..utils.persistence import atomic_write_text

logger = logging.getLogger(__name__)


class StoreCorruptedError(ValueError):
    """The store file exists but does not hold a JSON object of strings."""


class KeyValueStore:
    """
    A JSON object of string keys to string values, kept in one file.

    Every write replaces the file atomically and keeps the previous
    version as ``<file>.bak``. A file that cannot be read is copied to
    ``<file>.corrupt`` before the first write replaces it; later writes
    never touch that copy.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = Lock()

    @property
    def corrupt_path(self) -> Path:
        """Where an unreadable store file is kept when a write replaces it."""
        return self.path.with_suffix(self.path.suffix + ".corrupt")

    def _set_aside_corrupt(self) -> None:
        shutil.copy2(self.path, self.corrupt_path)

    def _read_all(self) -> dict[str, str]:
        """
        Raises:
            StoreCorruptedError: If the file is not a JSON object of strings
            OSError: If the file cannot be read
        """
        if not self.path.exists():
            return {}

        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StoreCorruptedError(f"{self.path} is not UTF-8 text: {e}") from e
        if not text.strip():
            return {}

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreCorruptedError(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise StoreCorruptedError(f"{self.path} does not hold a string-keyed object")
        return data

    def get(self, key: str) -> Optional[str]:
        """
        Get the value stored under `key`, or None.

        Raises:
            StoreCorruptedError: If the store file is malformed
            OSError: If the file cannot be read
        """
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        """
        Store `value` under `key`, overwriting any previous value.

        Raises:
            OSError: If the file cannot be written
        """
        with self._lock:
            backup = True
            try:
                data = self._read_all()
            except StoreCorruptedError as e:
                self._set_aside_corrupt()
                logger.warning(f"Replacing unreadable store (kept as {self.corrupt_path.name}): {e}")
                data = {}
                backup = False
            data[key] = value
            atomic_write_text(self.path, json.dumps(data), backup=backup)
        logger.debug(f"Stored '{key}' ({len(value)} chars) in {self.path}")

    def remove(self, key: str) -> bool:
        """
        Delete `key`.

        Returns:
            True if the key existed

        Raises:
            StoreCorruptedError: If the store file is malformed
            OSError: If the file cannot be read or written
        """
        with self._lock:
            data = self._read_all()
            if key not in data:
                return False
            del data[key]
            atomic_write_text(self.path, json.dumps(data))
        logger.debug(f"Removed '{key}' from {self.path}")
        return True

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._read_all())
