"""Console interface for the expense ledger."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from expense_ledger.aggregation import format_amount, summarize
from expense_ledger.config import Settings
from expense_ledger.controller import FormController
from expense_ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from expense_ledger.filters import categories
from expense_ledger.logging_setup import configure_logging
from expense_ledger.models import Expense, FilterSpec
from expense_ledger.store import LedgerStore


def _format_expense(expense: Expense) -> str:
    return (
        f"[{expense.id}] {expense.date.isoformat()}  {format_amount(expense.amount):>12}  "
        f"{expense.description} ({expense.category})"
    )


def _filters(args: argparse.Namespace) -> FilterSpec:
    return FilterSpec.from_mapping({
        "query": args.query,
        "category": args.category,
        "from": args.date_from,
        "to": args.date_to,
    })


def _draft_changes(args: argparse.Namespace) -> Dict[str, Any]:
    changes = {
        "description": args.description,
        "amount": args.amount,
        "category": args.category,
        "date": args.date,
    }
    return {k: v for k, v in changes.items() if v is not None}


def _submit(form: FormController) -> Expense:
    expense = form.submit()
    if expense is None:
        raise ValidationError(form.error or "Invalid expense")
    return expense


def handle_add(args: argparse.Namespace, store: LedgerStore) -> None:
    form = FormController(store)
    try:
        form.update(**_draft_changes(args))
        expense = _submit(form)
    finally:
        form.close()
    print("Expense added:\n" + _format_expense(expense))


def handle_edit(args: argparse.Namespace, store: LedgerStore) -> None:
    form = FormController(store)
    try:
        form.start_edit(store.get(args.id))
        form.update(**_draft_changes(args))
        expense = _submit(form)
    finally:
        form.close()
    print("Expense updated:\n" + _format_expense(expense))


def handle_delete(args: argparse.Namespace, store: LedgerStore) -> None:
    if store.remove(args.id):
        print(f"Expense {args.id} deleted.")
    else:
        print(f"Expense {args.id} not found; nothing deleted.")


def handle_list(args: argparse.Namespace, store: LedgerStore) -> None:
    result = summarize(store.list(), _filters(args))
    if not result.items:
        print("No expenses found.")
    else:
        print(f"Found {result.count} expenses (total {format_amount(result.total_visible)}):")
        for expense in result.items:
            print(_format_expense(expense))
    print(f"Total (all): {format_amount(result.total_all)}")


def handle_summary(args: argparse.Namespace, store: LedgerStore) -> None:
    result = summarize(store.list(), _filters(args))
    print(f"Total (all): {format_amount(result.total_all)}")
    print(f"Total (visible): {format_amount(result.total_visible)}")
    print(f"Items: {result.count}")


def handle_categories(args: argparse.Namespace, store: LedgerStore) -> None:
    names = categories(store.list())
    if not names:
        print("No categories yet.")
        return
    for name in names:
        print(name)


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--query", help="Search description and category")
    parser.add_argument("--category", help="Exact category (default: All)")
    parser.add_argument("--from", dest="date_from", help="Earliest date, YYYY-MM-DD")
    parser.add_argument("--to", dest="date_to", help="Latest date (inclusive), YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Tracker CLI")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory to store JSON data (default: $EXPENSE_TRACKER_DATA_DIR or ./data)",
    )
    parser.add_argument("--log-level", help="Logging level (default: $EXPENSE_TRACKER_LOG_LEVEL or INFO)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of continuing when the data file cannot be read or written",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add a new expense")
    add.add_argument("description")
    add.add_argument("amount")
    add.add_argument("--category", default="")
    add.add_argument("--date", help="YYYY-MM-DD (default: today)")

    edit = subparsers.add_parser("edit", help="Edit an existing expense")
    edit.add_argument("id")
    edit.add_argument("--description")
    edit.add_argument("--amount")
    edit.add_argument("--category")
    edit.add_argument("--date")

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("id")

    list_parser = subparsers.add_parser("list", help="List expenses, most recent first")
    _add_filter_arguments(list_parser)

    summary = subparsers.add_parser("summary", help="Show running totals")
    _add_filter_arguments(summary)

    subparsers.add_parser("categories", help="List known categories")

    return parser


HANDLERS = {
    "add": handle_add,
    "edit": handle_edit,
    "delete": handle_delete,
    "list": handle_list,
    "summary": handle_summary,
    "categories": handle_categories,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.data_dir is not None:
        settings = replace(settings, data_dir=args.data_dir)
    if args.strict:
        settings = replace(settings, strict_persistence=True)
    configure_logging(args.log_level or settings.log_level)

    try:
        store = LedgerStore.from_settings(settings)
        HANDLERS[args.command](args, store)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
