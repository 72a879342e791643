"""Tests for key-value storage and snapshot persistence."""

from datetime import date
from decimal import Decimal

import pytest

from expense_ledger.exceptions import PersistenceError
from expense_ledger.models import Expense
from expense_ledger.storage import DEFAULT_STORAGE_KEY, JSONStorage, MemoryStorage, SnapshotStorage
from expense_ledger.validators import validate_expense

RECORDS = [
    Expense("b", "Train", Decimal("12.40"), "Travel", date(2024, 2, 1)),
    Expense("a", "Coffee", Decimal("3.5"), "Food", date(2024, 1, 1)),
    Expense("c", "Rent", Decimal("800"), "Home", date(2024, 1, 1)),
]


class TestJSONStorage:
    def test_write_then_read(self, tmp_path):
        storage = JSONStorage(tmp_path / "data")
        storage.write(DEFAULT_STORAGE_KEY, "[]")
        assert storage.read(DEFAULT_STORAGE_KEY) == "[]"
        assert (tmp_path / "data" / f"{DEFAULT_STORAGE_KEY}.json").exists()
        assert not list((tmp_path / "data").glob("*.tmp"))

    def test_missing_key_reads_none(self, tmp_path):
        assert JSONStorage(tmp_path).read("absent") is None

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", ".hidden"])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        with pytest.raises(PersistenceError):
            JSONStorage(tmp_path).read(key)

    def test_write_failure_raises_persistence_error(self, tmp_path):
        storage = JSONStorage(tmp_path)
        (tmp_path / "blocked.json.tmp").mkdir()
        with pytest.raises(PersistenceError):
            storage.write("blocked", "[]")


class TestSnapshotStorage:
    """The save/load contract for the whole ledger."""

    def test_round_trip_preserves_order_and_values(self, tmp_path):
        snapshot = SnapshotStorage(JSONStorage(tmp_path))
        snapshot.save(RECORDS)
        assert snapshot.load() == RECORDS

    def test_round_trip_keeps_decimal_precision(self):
        snapshot = SnapshotStorage(MemoryStorage())
        record = Expense("p", "Fee", Decimal("0.1"), "Bank", date(2024, 5, 5))
        snapshot.save([record])
        (loaded,) = snapshot.load()
        assert loaded.amount == Decimal("0.1")

    @pytest.mark.parametrize("raw", ["9999999999999.99", "0.01", "0.12345678901234567891", "1234567.895"])
    def test_validated_amounts_survive_round_trip(self, raw):
        fields = validate_expense({"description": "Fee", "amount": raw, "date": "2024-05-05"})
        record = Expense(id="p", **fields)
        snapshot = SnapshotStorage(MemoryStorage())
        snapshot.save([record])
        (loaded,) = snapshot.load()
        assert loaded == record
        assert loaded.amount > 0

    def test_empty_store_loads_empty(self):
        assert SnapshotStorage(MemoryStorage()).load() == []

    def test_blank_value_loads_empty(self):
        memory = MemoryStorage({DEFAULT_STORAGE_KEY: "  "})
        assert SnapshotStorage(memory).load() == []

    @pytest.mark.parametrize("raw", ["{oops", '"text"', '{"a": 1}', '[{"description": "no id"}]'])
    def test_corrupt_store_loads_empty(self, raw):
        memory = MemoryStorage({DEFAULT_STORAGE_KEY: raw})
        snapshot = SnapshotStorage(memory)
        assert snapshot.load() == []
        with pytest.raises(PersistenceError):
            snapshot.load_or_raise()

    def test_save_overwrites_previous_value(self):
        memory = MemoryStorage()
        snapshot = SnapshotStorage(memory, key="custom")
        snapshot.save(RECORDS)
        snapshot.save(RECORDS[:1])
        assert snapshot.load() == RECORDS[:1]
        assert list(memory.values) == ["custom"]

    def test_reads_snapshots_written_by_other_clients(self):
        raw = '[{"id":"1700000000000","description":"Lunch","amount":12.5,"category":"Food","date":"2024-01-02"}]'
        memory = MemoryStorage({DEFAULT_STORAGE_KEY: raw})
        (expense,) = SnapshotStorage(memory).load()
        assert expense.id == "1700000000000"
        assert expense.amount == Decimal("12.5")
        assert expense.date == date(2024, 1, 2)
