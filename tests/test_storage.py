import json

import pytest

from engine import config
from engine.domain import EXPENSE, INCOME, Budget, Transaction
from engine.storage import JsonStore, StorageError


def test_missing_store_loads_empty(tmp_path):
    store = JsonStore(tmp_path / "store.json")

    assert store.load_transactions() == ()
    assert store.load_budgets() == ()


def test_save_and_load_round_trip(tmp_path):
    store = JsonStore(tmp_path / "nested" / "store.json")
    trans = (
        Transaction("t1", 12.5, "Lunch", "2024-01-05", EXPENSE, "Food & Dining"),
        Transaction("t2", 3000, "Pay", "2024-01-01", INCOME, "Salary"),
    )
    budgets = (Budget("b1", "Food & Dining", 400, "2024-01"),)

    store.save_transactions(trans)
    store.save_budgets(budgets)

    assert store.load_transactions() == trans
    assert store.load_budgets() == budgets


def test_budgets_are_stored_with_camel_case_limit(tmp_path):
    path = tmp_path / "store.json"
    JsonStore(path).save_budgets((Budget("b1", "Travel", 250, "2024-03"),))

    data = json.loads(path.read_text(encoding="utf-8"))

    assert data[config.BUDGETS_KEY] == [{"id": "b1", "category": "Travel", "monthlyLimit": 250, "month": "2024-03"}]


def test_legacy_transaction_without_category(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({
        config.TRANSACTIONS_KEY: [
            {"id": 1700000000000, "amount": 20, "description": "Old", "date": "2023-11-02", "type": "expense"}
        ]
    }), encoding="utf-8")

    (t,) = JsonStore(path).load_transactions()

    assert t.id == "1700000000000"
    assert t.category == ""


def test_saving_one_key_keeps_the_other(tmp_path):
    store = JsonStore(tmp_path / "store.json")
    store.save_budgets((Budget("b1", "Travel", 250, "2024-03"),))
    store.save_transactions(())

    assert len(store.load_budgets()) == 1


def test_corrupt_store_raises(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        JsonStore(path).load_transactions()


def test_malformed_record_raises(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({config.BUDGETS_KEY: [{"id": "b1", "category": "Travel"}]}), encoding="utf-8")

    with pytest.raises(StorageError):
        JsonStore(path).load_budgets()
