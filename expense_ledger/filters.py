"""Filter predicates and display ordering for ledger snapshots."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import ALL_CATEGORIES, Expense, FilterSpec


def _matches(expense: Expense, spec: FilterSpec, query: str) -> bool:
    if query and query not in f"{expense.description} {expense.category}".casefold():
        return False
    if spec.category != ALL_CATEGORIES and expense.category != spec.category:
        return False
    if spec.date_from and expense.date < spec.date_from:
        return False
    # Dates are whole days, so ``to`` is inclusive through its entire day.
    if spec.date_to and expense.date > spec.date_to:
        return False
    return True


def visible(records: Sequence[Expense], spec: FilterSpec) -> List[Expense]:
    """Return the records passing every predicate, most recent date first.

    Records sharing a date keep their ledger order, which is newest-added
    first.
    """
    query = spec.query.strip().casefold()
    survivors = [
        (position, expense)
        for position, expense in enumerate(records)
        if _matches(expense, spec, query)
    ]
    survivors.sort(key=lambda item: (-item[1].date.toordinal(), item[0]))
    return [expense for _, expense in survivors]


def categories(records: Iterable[Expense]) -> List[str]:
    """Distinct non-empty categories, sorted case-insensitively."""
    names = {expense.category for expense in records if expense.category}
    return sorted(names, key=lambda name: (name.casefold(), name))
