"""Core expense ledger engine."""

import logging

from .aggregation import LedgerSummary, format_amount, summarize, total
from .config import Settings
from .controller import FormController, FormMode
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .filters import categories, visible
from .identifiers import IdGenerator
from .models import Draft, Expense, FilterSpec
from .storage import JSONStorage, MemoryStorage, SnapshotStorage
from .store import LedgerChange, LedgerStore
from .validators import validate_expense

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Draft",
    "Expense",
    "FilterSpec",
    "FormController",
    "FormMode",
    "IdGenerator",
    "JSONStorage",
    "LedgerChange",
    "LedgerStore",
    "LedgerSummary",
    "MemoryStorage",
    "PersistenceError",
    "RecordNotFoundError",
    "Settings",
    "SnapshotStorage",
    "ValidationError",
    "categories",
    "format_amount",
    "summarize",
    "total",
    "validate_expense",
    "visible",
]
