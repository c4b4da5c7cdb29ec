"""
Key-Value Backends

Two implementations of KeyValueBackend:

- MemoryBackend: a dict. Used by tests and when no storage path is set.
- JsonFileBackend: one JSON object on disk mapping key -> text, the
  durable equivalent of browser local storage.

TRADEOFFS:
- The whole file is rewritten on every write (fine for personal data)
- No locking; one process owns the file at a time
- A corrupted file is treated as empty rather than fatal
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Iterator, Optional, Union

import structlog

from finova.services.storage.interface import KeyValueBackend, StorageError


logger = structlog.get_logger(__name__)


class MemoryBackend(KeyValueBackend):
    """Volatile dict-backed storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))


class JsonFileBackend(KeyValueBackend):
    """
    Durable storage in a single JSON file.

    The file is read once, lazily, and rewritten atomically (temp file +
    rename) after every mutation.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._items: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        self._items = {}
        if not self._path.exists():
            return self._items

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(
                "storage_file_unreadable",
                path=str(self._path),
                error=str(e),
            )
            return self._items

        if not isinstance(raw, dict):
            logger.warning("storage_file_malformed", path=str(self._path))
            return self._items

        self._items = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        return self._items

    def _flush(self) -> None:
        items = self._load()
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                dir=str(self._path.parent),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(items, tmp, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StorageError(f"Failed to write {self._path}: {e}")

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._flush()

    def keys(self) -> Iterator[str]:
        return iter(list(self._load()))


def create_backend(storage_path: Optional[str] = None) -> KeyValueBackend:
    """Pick a backend from configuration."""
    if storage_path:
        return JsonFileBackend(storage_path)
    return MemoryBackend()
