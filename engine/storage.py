"""JSON key-value store holding the transaction and budget collections.

Each collection is kept under its own key as a plain array of records, in the
same shape the records have in memory except that ``monthly_limit`` is stored
as ``monthlyLimit``.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from engine import config
from engine.domain import Budget, FinanceError, Transaction

logger = logging.getLogger(__name__)


class StorageError(FinanceError):
    pass


def transaction_from_dict(d: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(d["id"]),
        amount=d["amount"],
        description=d.get("description", ""),
        date=d["date"],
        type=d["type"],
        category=d.get("category") or "",
    )


def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    return {
        "id": t.id,
        "amount": t.amount,
        "description": t.description,
        "date": t.date,
        "type": t.type,
        "category": t.category,
    }


def budget_from_dict(d: Dict[str, Any]) -> Budget:
    return Budget(
        id=str(d["id"]),
        category=d["category"],
        monthly_limit=d["monthlyLimit"],
        month=d["month"],
    )


def budget_to_dict(b: Budget) -> Dict[str, Any]:
    return {
        "id": b.id,
        "category": b.category,
        "monthlyLimit": b.monthly_limit,
        "month": b.month,
    }


class JsonStore:
    """A single JSON file mapping keys to arrays of records."""

    def __init__(self, path: Union[str, Path] = config.STORE_PATH):
        self.path = Path(path)

    def _read(self) -> Dict[str, List[dict]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Store {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Store {self.path} must hold a JSON object")
        return data

    def _write(self, data: Dict[str, List[dict]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise

    def get(self, key: str) -> List[dict]:
        records = self._read().get(key, [])
        if not isinstance(records, list):
            raise StorageError(f"Key {key!r} in {self.path} must hold a JSON array")
        return records

    def put(self, key: str, records: List[dict]) -> None:
        data = self._read()
        data[key] = records
        self._write(data)
        logger.debug("Saved %d records under %s", len(records), key)

    def load_transactions(self) -> Tuple[Transaction, ...]:
        try:
            trans = tuple(transaction_from_dict(d) for d in self.get(config.TRANSACTIONS_KEY))
        except (KeyError, TypeError, AttributeError) as e:
            raise StorageError(f"Malformed transaction record in {self.path}: {e!r}") from e
        logger.info("Loaded %d transactions from %s", len(trans), self.path)
        return trans

    def save_transactions(self, trans: Tuple[Transaction, ...]) -> None:
        self.put(config.TRANSACTIONS_KEY, [transaction_to_dict(t) for t in trans])

    def load_budgets(self) -> Tuple[Budget, ...]:
        try:
            budgets = tuple(budget_from_dict(d) for d in self.get(config.BUDGETS_KEY))
        except (KeyError, TypeError, AttributeError) as e:
            raise StorageError(f"Malformed budget record in {self.path}: {e!r}") from e
        logger.info("Loaded %d budgets from %s", len(budgets), self.path)
        return budgets

    def save_budgets(self, budgets: Tuple[Budget, ...]) -> None:
        self.put(config.BUDGETS_KEY, [budget_to_dict(b) for b in budgets])
