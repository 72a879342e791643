"""Persistence utilities for the expense ledger."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .exceptions import PersistenceError
from .models import Expense

DEFAULT_STORAGE_KEY = "expenseTracker.expenses"

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class JSONStorage:
    """File-per-key text storage with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise PersistenceError(f"Invalid storage key {key!r}")
        return self._base_path / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            # Atomic on POSIX.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc


class MemoryStorage:
    """In-process key-value storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value


class SnapshotStorage:
    """Full-snapshot persistence of the ledger under one fixed key."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    def save(self, records: Iterable[Expense]) -> None:
        """Overwrite the stored value with the whole record sequence."""
        payload = [record.to_dict() for record in records]
        try:
            text = json.dumps(payload, indent=2)
        except (TypeError, ValueError) as exc:
            raise PersistenceError("Unable to serialise ledger snapshot") from exc
        self._storage.write(self._key, text)

    def load_or_raise(self) -> List[Expense]:
        """Return the stored records, raising PersistenceError on a corrupt payload."""
        text = self._storage.read(self._key)
        if text is None or not text.strip():
            return []
        try:
            payload: Any = json.loads(text, parse_float=Decimal)
        except ValueError as exc:
            raise PersistenceError(f"Corrupted JSON data under {self._key!r}") from exc
        if not isinstance(payload, list):
            raise PersistenceError(f"Expected list payload under {self._key!r}")
        try:
            return [Expense.from_dict(item) for item in payload]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise PersistenceError(f"Malformed expense record under {self._key!r}") from exc

    def load(self) -> List[Expense]:
        """Return the stored records, or an empty list when absent or unreadable."""
        try:
            return self.load_or_raise()
        except PersistenceError as exc:
            logger.warning("Discarding unreadable ledger snapshot: %s", exc)
            return []
