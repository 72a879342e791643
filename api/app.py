"""Flask JSON API exposing the expense ledger to a local front end."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from expense_ledger.aggregation import summarize
from expense_ledger.config import Settings
from expense_ledger.controller import EDITABLE_FIELDS, FormController
from expense_ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from expense_ledger.filters import categories
from expense_ledger.logging_setup import configure_logging
from expense_ledger.models import FilterSpec
from expense_ledger.store import LedgerStore


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[LedgerStore] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": list(settings.allowed_origins)}}, supports_credentials=True)
    else:
        CORS(app)

    ledger = store if store is not None else LedgerStore.from_settings(settings)
    app.extensions["expense_ledger"] = ledger

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _draft_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in payload.items() if k in EDITABLE_FIELDS}

    def _submit(form: FormController):
        try:
            expense = form.submit()
        finally:
            form.close()
        if expense is None:
            raise ValidationError(form.error or "Invalid expense")
        return expense

    def _filters() -> FilterSpec:
        return FilterSpec.from_mapping({
            "query": request.args.get("query"),
            "category": request.args.get("category"),
            "from": request.args.get("from"),
            "to": request.args.get("to"),
        })

    @app.get("/expenses")
    def list_expenses():
        snapshot = ledger.list()
        result = summarize(snapshot, _filters())
        return _success({
            "items": [expense.to_dict() for expense in result.items],
            "count": result.count,
            "total": f"{result.total_visible:.2f}",
            "total_all": f"{result.total_all:.2f}",
            "categories": categories(snapshot),
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        form = FormController(ledger)
        form.update(**_draft_fields(payload))
        expense = _submit(form)
        return _success(expense.to_dict(), 201)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        return _success(ledger.get(expense_id).to_dict())

    @app.put("/expenses/<expense_id>")
    def update_expense(expense_id: str):
        existing = ledger.get(expense_id)
        payload = _json_body()
        form = FormController(ledger)
        form.start_edit(existing)
        form.update(**_draft_fields(payload))
        expense = _submit(form)
        return _success(expense.to_dict())

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        ledger.remove(expense_id)
        return _success({}, 204)

    @app.get("/categories")
    def list_categories():
        return _success({"items": categories(ledger.list())})

    @app.get("/summary")
    def summary():
        result = summarize(ledger.list(), _filters())
        return _success({
            "count": result.count,
            "total": f"{result.total_visible:.2f}",
            "total_all": f"{result.total_all:.2f}",
        })

    @app.get("/status")
    def status():
        error = ledger.last_persistence_error
        return _success({
            "records": len(ledger),
            "persistence_error": str(error) if error else None,
            "degraded_ids": ledger.ids_degraded,
        })

    return app
