"""Shared fixtures for the expense ledger tests."""

from datetime import date
from itertools import count

import pytest

from expense_ledger.controller import FormController
from expense_ledger.storage import MemoryStorage, SnapshotStorage
from expense_ledger.store import LedgerStore

TODAY = date(2024, 3, 15)


@pytest.fixture
def memory():
    return MemoryStorage()


@pytest.fixture
def snapshot(memory):
    return SnapshotStorage(memory)


@pytest.fixture
def sequential_ids():
    counter = count(1)
    return lambda: f"exp-{next(counter)}"


@pytest.fixture
def store(snapshot, sequential_ids):
    return LedgerStore(snapshot, id_factory=sequential_ids)


@pytest.fixture
def form(store):
    controller = FormController(store, today=lambda: TODAY)
    yield controller
    controller.close()


def expense_payload(description="Coffee", amount="3.50", category="Food", day="2024-01-05"):
    return {"description": description, "amount": amount, "category": category, "date": day}
