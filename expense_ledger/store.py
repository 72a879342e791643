"""Authoritative in-memory ledger with full-snapshot persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .config import Settings
from .exceptions import PersistenceError, RecordNotFoundError
from .identifiers import IdGenerator
from .models import Expense
from .storage import JSONStorage, SnapshotStorage
from .validators import validate_expense

logger = logging.getLogger(__name__)

ADDED = "add"
UPDATED = "update"
REMOVED = "remove"


@dataclass(frozen=True)
class LedgerChange:
    action: str
    expense_id: str


ChangeListener = Callable[[LedgerChange], None]
ErrorListener = Callable[[PersistenceError], None]


class LedgerStore:
    """Owns the ordered expense collection and mediates persistence.

    Records are kept newest-first. Every effective mutation replaces the
    snapshot tuple, saves the whole snapshot and then notifies subscribers.
    Save failures never undo the in-memory change: by default they are
    logged and reported through ``on_persistence_error``; with
    ``strict=True`` they are re-raised after being reported.
    """

    def __init__(
        self,
        snapshot_storage: SnapshotStorage,
        *,
        id_factory: Optional[Callable[[], str]] = None,
        strict: bool = False,
    ) -> None:
        self._snapshot_storage = snapshot_storage
        self._id_factory = id_factory or IdGenerator()
        self._strict = strict
        self._records: Tuple[Expense, ...] = ()
        self._change_listeners: List[ChangeListener] = []
        self._error_listeners: List[ErrorListener] = []
        self.last_persistence_error: Optional[PersistenceError] = None
        self.restore()  # Hydrate from persistence on construction.

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: object) -> "LedgerStore":
        storage = SnapshotStorage(JSONStorage(settings.data_dir), settings.storage_key)
        kwargs.setdefault("strict", settings.strict_persistence)
        return cls(storage, **kwargs)  # type: ignore[arg-type]

    # Public API -----------------------------------------------------------
    def add(self, record: Mapping[str, object]) -> Expense:
        """Validate ``record`` and insert it under a freshly minted id."""
        data = validate_expense(record)
        expense = Expense(id=self._mint_id(), **data)  # type: ignore[arg-type]
        self._records = (expense,) + self._records
        self._after_mutation(LedgerChange(ADDED, expense.id))
        return expense

    def update(self, expense_id: str, record: Mapping[str, object]) -> Optional[Expense]:
        """Replace the record with ``expense_id`` in place; no-op when absent."""
        position = self._position_of(expense_id)
        if position is None:
            logger.debug("Ignoring update of unknown expense %s", expense_id)
            return None
        data = validate_expense(record)
        updated = Expense(id=expense_id, **data)  # type: ignore[arg-type]
        records = list(self._records)
        records[position] = updated
        self._records = tuple(records)
        self._after_mutation(LedgerChange(UPDATED, expense_id))
        return updated

    def remove(self, expense_id: str) -> bool:
        """Delete the record with ``expense_id``; returns False when absent."""
        remaining = tuple(record for record in self._records if record.id != expense_id)
        if len(remaining) == len(self._records):
            return False
        self._records = remaining
        self._after_mutation(LedgerChange(REMOVED, expense_id))
        return True

    def get(self, expense_id: str) -> Expense:
        """Return an expense or raise if it does not exist."""
        position = self._position_of(expense_id)
        if position is None:
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return self._records[position]

    def list(self) -> Tuple[Expense, ...]:
        """Return the current immutable snapshot in ledger order."""
        return self._records

    def __contains__(self, expense_id: object) -> bool:
        return any(record.id == expense_id for record in self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def ids_degraded(self) -> bool:
        """True once id minting has fallen back to timestamp ids."""
        return bool(getattr(self._id_factory, "degraded", False))

    # Subscriptions --------------------------------------------------------
    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener`` after every effective mutation; returns an unsubscribe hook."""
        self._change_listeners.append(listener)
        return lambda: self._discard(self._change_listeners, listener)

    def on_persistence_error(self, listener: ErrorListener) -> Callable[[], None]:
        self._error_listeners.append(listener)
        return lambda: self._discard(self._error_listeners, listener)

    # Persistence hooks ----------------------------------------------------
    def persist(self) -> None:
        """Save the whole current snapshot."""
        try:
            self._snapshot_storage.save(self._records)
        except PersistenceError as exc:
            self._report(exc, "save")
            if self._strict:
                raise
        else:
            self.last_persistence_error = None

    def restore(self) -> None:
        """Replace the in-memory ledger with the stored snapshot.

        An absent snapshot gives an empty ledger. A corrupt one also gives
        an empty ledger unless the store is strict.
        """
        try:
            records = self._snapshot_storage.load_or_raise()
        except PersistenceError as exc:
            self._records = ()
            self._report(exc, "load")
            if self._strict:
                raise
            return
        self._records = tuple(records)
        logger.debug("Restored %d expenses", len(self._records))

    # Internal helpers -----------------------------------------------------
    def _after_mutation(self, change: LedgerChange) -> None:
        try:
            self.persist()
        finally:
            for listener in list(self._change_listeners):
                listener(change)

    def _report(self, exc: PersistenceError, operation: str) -> None:
        logger.warning("Ledger %s failed: %s", operation, exc)
        self.last_persistence_error = exc
        for listener in list(self._error_listeners):
            listener(exc)

    def _mint_id(self) -> str:
        existing: Dict[str, Expense] = {record.id: record for record in self._records}
        new_id = self._id_factory()
        while new_id in existing:
            new_id = self._id_factory()
        return new_id

    def _position_of(self, expense_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == expense_id:
                return index
        return None

    @staticmethod
    def _discard(listeners: List, listener: object) -> None:
        if listener in listeners:
            listeners.remove(listener)
