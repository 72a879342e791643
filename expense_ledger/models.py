"""Data models for the expense ledger domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import ValidationError

__all__ = [
    "ALL_CATEGORIES",
    "DEFAULT_CATEGORY",
    "Draft",
    "Expense",
    "FilterSpec",
    "amount_to_json",
    "coerce_amount",
    "parse_date",
]

DEFAULT_CATEGORY = "Uncategorized"
ALL_CATEGORIES = "All"

INVALID_DATE_MESSAGE = "Enter a valid date (YYYY-MM-DD)."


def parse_date(value: Union[str, date]) -> date:
    """Parse a ``YYYY-MM-DD`` string (or a date/datetime) into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        # Full ISO timestamps reduce to their calendar date.
        return datetime.fromisoformat(text).date()


def coerce_amount(value: object) -> Decimal:
    """Return ``value`` as a finite Decimal, or zero when it is not numeric."""
    if isinstance(value, bool) or value is None:
        return Decimal("0")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def amount_to_json(amount: Decimal) -> Union[int, float]:
    """Render a Decimal as a JSON number.

    Exact for validated amounts, which carry at most 15 significant digits.
    """
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


@dataclass(frozen=True)
class Expense:
    id: str
    description: str
    amount: Decimal
    category: str
    date: date

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to its wire shape."""
        return {
            "id": self.id,
            "description": self.description,
            "amount": amount_to_json(self.amount),
            "category": self.category,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Expense":
        """Hydrate an Expense from wire data.

        Stored amounts are coerced leniently so that a legacy record with a
        malformed amount still loads and counts as zero in totals.
        """
        return cls(
            id=str(data["id"]),
            description=str(data.get("description", "")),
            amount=coerce_amount(data.get("amount")),
            category=str(data.get("category", "")),
            date=parse_date(data["date"]),
        )


@dataclass
class Draft:
    """Transient form state; amount and date may still be raw text."""

    id: Optional[str] = None
    description: str = ""
    amount: object = ""
    category: str = ""
    date: object = ""

    @classmethod
    def blank(cls, today: date) -> "Draft":
        return cls(date=today.isoformat())

    @classmethod
    def from_expense(cls, expense: Expense) -> "Draft":
        return cls(
            id=expense.id,
            description=expense.description,
            amount=str(expense.amount),
            category=expense.category,
            date=expense.date.isoformat(),
        )

    def to_payload(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "date": self.date,
        }


def _optional_bound(raw: object) -> Optional[date]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        return parse_date(raw)  # type: ignore[arg-type]
    except ValueError as exc:
        raise ValidationError(INVALID_DATE_MESSAGE) from exc


@dataclass(frozen=True)
class FilterSpec:
    query: str = ""
    category: str = ALL_CATEGORIES
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "FilterSpec":
        """Build filters from wire names (``query``, ``category``, ``from``, ``to``)."""
        category = raw.get("category")
        return cls(
            query=str(raw.get("query") or ""),
            category=str(category) if category not in (None, "") else ALL_CATEGORIES,
            date_from=_optional_bound(raw.get("from")),
            date_to=_optional_bound(raw.get("to")),
        )
