"""Form state for composing new expenses and editing existing ones."""

from __future__ import annotations

import logging
from dataclasses import fields
from datetime import date
from enum import Enum
from typing import Callable, Optional

from .exceptions import ValidationError
from .models import Draft, Expense
from .store import REMOVED, LedgerChange, LedgerStore
from .validators import validate_expense

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {f.name for f in fields(Draft)} - {"id"}


class FormMode(str, Enum):
    COMPOSING = "composing"
    EDITING = "editing"


class FormController:
    """Holds one draft and turns a valid submission into a ledger mutation.

    The controller subscribes to its store so that deleting the record being
    edited, from anywhere, drops the form back to a blank composing draft.
    """

    def __init__(self, store: LedgerStore, today: Callable[[], date] = date.today) -> None:
        self._store = store
        self._today = today
        self._draft = Draft.blank(today())
        self._mode = FormMode.COMPOSING
        self._error: Optional[str] = None
        self._unsubscribe = store.subscribe(self._on_ledger_change)

    @property
    def draft(self) -> Draft:
        return self._draft

    @property
    def mode(self) -> FormMode:
        return self._mode

    @property
    def is_editing(self) -> bool:
        return self._mode is FormMode.EDITING

    @property
    def editing_id(self) -> Optional[str]:
        return self._draft.id if self.is_editing else None

    @property
    def error(self) -> Optional[str]:
        return self._error

    def set_field(self, name: str, value: object) -> None:
        if name not in EDITABLE_FIELDS:
            raise TypeError(f"Unknown draft field: {name}")
        setattr(self._draft, name, value)

    def update(self, **changes: object) -> None:
        for name, value in changes.items():
            self.set_field(name, value)

    def start_edit(self, expense: Expense) -> None:
        self._draft = Draft.from_expense(expense)
        self._mode = FormMode.EDITING
        self._error = None

    def cancel(self) -> None:
        self._draft = Draft.blank(self._today())
        self._mode = FormMode.COMPOSING
        self._error = None

    reset = cancel

    def submit(self) -> Optional[Expense]:
        """Validate the draft and add or update; returns None when rejected."""
        try:
            normalized = validate_expense(self._draft.to_payload())
        except ValidationError as exc:
            self._error = str(exc)
            return None

        try:
            if self.is_editing and self._draft.id is not None:
                return self._store.update(self._draft.id, normalized)
            return self._store.add(normalized)
        finally:
            self.cancel()

    def close(self) -> None:
        self._unsubscribe()

    def _on_ledger_change(self, change: LedgerChange) -> None:
        target = self.editing_id
        if target is None or target in self._store:
            return
        if change.action == REMOVED:
            logger.info("Expense %s was removed while being edited", target)
        self.cancel()
