"""Persistence store -- durable key/value slots holding opaque text.

The store knows nothing about GeoJSON; the codec is the only component
that interprets the values. Two backends:

    MemoryStore   -- dict-backed, for tests and throwaway sessions
    JsonFileStore -- one JSON object on disk, rewritten on every change
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from loguru import logger


class StorageKey(str, Enum):
    """The two logical slots used by a drawing session."""
    DRAW_ITEMS = "drawItems"
    COORDS_MARKERS = "coordsMarkers"


class PersistenceStore(ABC):
    """Key/value store of text values."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored text, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is a no-op."""

    @abstractmethod
    def clear(self) -> None:
        ...


def _key(key) -> str:
    return key.value if isinstance(key, StorageKey) else str(key)


class MemoryStore(PersistenceStore):
    """In-process store. Contents vanish with the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(_key(key))

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"store values must be str, got {type(value).__name__}")
        self._data[_key(key)] = value

    def remove(self, key: str) -> None:
        self._data.pop(_key(key), None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore(MemoryStore):
    """File-backed store.

    The whole key space lives in one JSON object. Every mutation rewrites
    the file through a temp file + rename, so a crash mid-write leaves the
    previous contents intact. An unreadable file loads as empty.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        super().__init__(self._load())

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            logger.warning(f"Storage file unreadable, starting empty: {self.path} ({e})")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file is not a JSON object, starting empty: {self.path}")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._flush()

    def remove(self, key: str) -> None:
        super().remove(key)
        self._flush()

    def clear(self) -> None:
        super().clear()
        self._flush()
