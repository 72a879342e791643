"""Running totals over expense sequences."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Mapping, Sequence, Union

from .filters import visible
from .models import Expense, FilterSpec, coerce_amount

RecordLike = Union[Expense, Mapping[str, object]]


def _amount_of(record: RecordLike) -> object:
    if isinstance(record, Mapping):
        return record.get("amount")
    return getattr(record, "amount", None)


def total(records: Iterable[RecordLike]) -> Decimal:
    """Sum of amounts; non-numeric amounts count as zero."""
    return sum((coerce_amount(_amount_of(record)) for record in records), start=Decimal("0"))


def format_amount(value: object) -> str:
    return f"{coerce_amount(value):,.2f}"


@dataclass(frozen=True)
class LedgerSummary:
    items: List[Expense]
    total_all: Decimal
    total_visible: Decimal

    @property
    def count(self) -> int:
        return len(self.items)


def summarize(records: Sequence[Expense], spec: FilterSpec) -> LedgerSummary:
    """Visible subset plus the totals for the full ledger and for that subset."""
    items = visible(records, spec)
    return LedgerSummary(items=items, total_all=total(records), total_visible=total(items))
