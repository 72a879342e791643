"""Validation helpers for expense drafts."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Mapping

from .exceptions import ValidationError
from .models import DEFAULT_CATEGORY, INVALID_DATE_MESSAGE, parse_date

DESCRIPTION_REQUIRED = "Description is required."
INVALID_AMOUNT = "Enter a valid amount greater than 0."
DATE_REQUIRED = "Date is required."

# Cents keep at most 15 significant digits, which a JSON number holds exactly.
MAX_AMOUNT = Decimal("1e13")


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def validate_description(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(DESCRIPTION_REQUIRED)
    return value.strip()


def parse_amount(raw: object) -> Decimal:
    """Convert raw input to a positive Decimal with exactly two fraction digits."""
    if isinstance(raw, bool) or _is_blank(raw):
        raise ValidationError(INVALID_AMOUNT)
    try:
        amount = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(INVALID_AMOUNT) from exc

    if not amount.is_finite() or amount <= 0 or amount >= MAX_AMOUNT:
        raise ValidationError(INVALID_AMOUNT)
    amount = _quantize_two_decimals(amount)
    if amount <= 0 or amount >= MAX_AMOUNT:
        raise ValidationError(INVALID_AMOUNT)
    return amount


def validate_date(value: object) -> date:
    if _is_blank(value):
        raise ValidationError(DATE_REQUIRED)
    try:
        return parse_date(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValidationError(INVALID_DATE_MESSAGE) from exc


def normalize_category(value: object) -> str:
    if not isinstance(value, str):
        return DEFAULT_CATEGORY
    return value.strip() or DEFAULT_CATEGORY


def validate_expense(payload: Mapping[str, object]) -> Dict[str, object]:
    """Validate a draft-shaped payload and return its normalised fields.

    Rules run in a fixed order and the first failure wins: description,
    then amount, then date. The returned mapping has no ``id``; minting or
    carrying one over is the ledger store's job.
    """
    description = validate_description(payload.get("description"))
    amount = parse_amount(payload.get("amount"))
    incurred_on = validate_date(payload.get("date"))
    return {
        "description": description,
        "amount": amount,
        "category": normalize_category(payload.get("category")),
        "date": incurred_on,
    }
