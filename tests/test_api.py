"""Tests for the Flask JSON adapter."""

import pytest

from api.app import create_app
from expense_ledger.config import Settings
from expense_ledger.storage import DEFAULT_STORAGE_KEY, MemoryStorage, SnapshotStorage
from expense_ledger.store import LedgerStore


@pytest.fixture
def ledger(sequential_ids):
    return LedgerStore(SnapshotStorage(MemoryStorage()), id_factory=sequential_ids)


@pytest.fixture
def client(ledger):
    app = create_app(Settings(env="dev"), store=ledger)
    app.config["TESTING"] = True
    return app.test_client()


def _create(client, **fields):
    body = {"description": "Coffee", "amount": 3.5, "category": "Food", "date": "2024-01-05"}
    body.update(fields)
    return client.post("/expenses", json=body)


class TestExpenseEndpoints:
    def test_create(self, client):
        response = _create(client, category="")
        assert response.status_code == 201
        assert response.get_json() == {
            "id": "exp-1",
            "description": "Coffee",
            "amount": 3.5,
            "category": "Uncategorized",
            "date": "2024-01-05",
        }

    def test_create_validation_error(self, client, ledger):
        response = _create(client, amount=0)
        assert response.status_code == 400
        assert response.get_json()["details"] == "Enter a valid amount greater than 0."
        assert len(ledger) == 0

    def test_create_requires_json(self, client):
        response = client.post("/expenses", data="description=x")
        assert response.status_code == 400

    def test_list_filters_and_totals(self, client):
        _create(client, description="Groceries", amount=20, category="Food", date="2024-01-01")
        _create(client, description="Flight", amount=150.25, category="Travel", date="2024-02-01")
        body = client.get("/expenses").get_json()
        assert [item["description"] for item in body["items"]] == ["Flight", "Groceries"]
        assert body["total"] == "170.25"
        assert body["total_all"] == "170.25"
        assert body["categories"] == ["Food", "Travel"]

        body = client.get("/expenses?category=Food&from=2024-01-15").get_json()
        assert body["items"] == []
        assert body["count"] == 0
        assert body["total"] == "0.00"
        assert body["total_all"] == "170.25"

        body = client.get("/expenses?query=fli&to=2024-02-01").get_json()
        assert [item["description"] for item in body["items"]] == ["Flight"]

    def test_list_rejects_bad_date(self, client):
        assert client.get("/expenses?from=soon").status_code == 400

    def test_get_and_missing(self, client):
        _create(client)
        assert client.get("/expenses/exp-1").get_json()["description"] == "Coffee"
        assert client.get("/expenses/nope").status_code == 404

    def test_partial_update(self, client):
        _create(client)
        response = client.put("/expenses/exp-1", json={"amount": "4.75"})
        assert response.status_code == 200
        body = response.get_json()
        assert body["id"] == "exp-1"
        assert body["amount"] == 4.75
        assert body["description"] == "Coffee"

    def test_update_missing(self, client):
        assert client.put("/expenses/nope", json={"amount": 1}).status_code == 404

    def test_update_validation_error(self, client):
        _create(client)
        response = client.put("/expenses/exp-1", json={"description": "  "})
        assert response.status_code == 400
        assert response.get_json()["details"] == "Description is required."

    def test_delete_is_idempotent(self, client, ledger):
        _create(client)
        assert client.delete("/expenses/exp-1").status_code == 204
        assert client.delete("/expenses/exp-1").status_code == 204
        assert len(ledger) == 0


class TestSummaryEndpoints:
    def test_categories(self, client):
        _create(client, category="Travel")
        _create(client, category="food")
        assert client.get("/categories").get_json() == {"items": ["food", "Travel"]}

    def test_summary(self, client):
        _create(client, amount=3.5)
        _create(client, amount=4, category="Travel")
        body = client.get("/summary?category=Travel").get_json()
        assert body == {"count": 1, "total": "4.00", "total_all": "7.50"}

    def test_status_reports_persistence_errors(self, sequential_ids):
        memory = MemoryStorage({DEFAULT_STORAGE_KEY: "not json"})
        store = LedgerStore(SnapshotStorage(memory), id_factory=sequential_ids)
        client = create_app(Settings(), store=store).test_client()
        body = client.get("/status").get_json()
        assert body["records"] == 0
        assert body["persistence_error"]
        assert body["degraded_ids"] is False


class TestFileBackedApp:
    def test_data_survives_restart(self, tmp_path):
        settings = Settings(data_dir=tmp_path)
        first = create_app(settings).test_client()
        first.post("/expenses", json={"description": "Rent", "amount": 800, "date": "2024-03-01"})
        second = create_app(settings).test_client()
        items = second.get("/expenses").get_json()["items"]
        assert [item["description"] for item in items] == ["Rent"]
