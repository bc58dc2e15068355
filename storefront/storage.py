"""
Key/value backing stores.

The engine only ever sees a flat mapping of string keys to text blobs, the
same contract a browser's localStorage offers. Two implementations:

- InMemoryStorage: a dict, for tests and the demo
- FileStorage: one file per key under a data directory

Design decisions:
- Reads and writes are synchronous and complete before returning
- FileStorage replaces each file atomically (temp file + rename), so a single
  key is never half-written. Several keys are NOT written as a transaction.
- No locking. Two processes sharing a data directory get last-write-wins
  per key.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from storefront.config import Settings, get_settings

logger = logging.getLogger("storage")


class KeyValueStorage(ABC):
    """Minimal localStorage-style interface."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text, or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""

    @abstractmethod
    def keys(self) -> list[str]:
        ...

    def clear(self) -> None:
        for key in self.keys():
            self.remove_item(key)


class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileStorage(KeyValueStorage):
    """
    Directory-backed storage: key "abc" lives in "<data_dir>/abc.json".

    The directory is created on first write.
    """

    SUFFIX = ".json"

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}{self.SUFFIX}"

    def get_item(self, key: str) -> Optional[str]:
        """Raises UnicodeDecodeError when the file holds bytes that are not UTF-8."""
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(value)} chars to {path}")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if not self.data_dir.exists():
            return []
        return sorted(
            p.name[: -len(self.SUFFIX)]
            for p in self.data_dir.iterdir()
            if p.is_file() and p.name.endswith(self.SUFFIX) and not p.name.startswith(".")
        )


def create_storage(settings: Optional[Settings] = None) -> KeyValueStorage:
    """Build the backing store named by the settings."""
    settings = settings or get_settings()
    if settings.storage_backend == "memory":
        return InMemoryStorage()
    return FileStorage(settings.data_dir)
