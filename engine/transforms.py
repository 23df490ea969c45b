import math
import numbers
from dataclasses import replace
from functools import reduce
from typing import Optional, Tuple

from engine.domain import EXPENSE, INCOME, Budget, MalformedTransaction, Transaction

AMOUNT_ERROR = "amount {!r} is not a finite non-negative real number"


def is_valid_amount(amount) -> bool:
    """Real numbers only: int, float, Fraction. Decimal does not mix with float sums."""
    if isinstance(amount, bool) or not isinstance(amount, numbers.Real):
        return False
    return math.isfinite(amount) and amount >= 0


def checked_amount(t: Transaction) -> float:
    """Return the transaction amount, refusing values that would poison a sum."""
    if not is_valid_amount(t.amount):
        raise MalformedTransaction(t.id, AMOUNT_ERROR.format(t.amount))
    return t.amount


def checked_date(t: Transaction) -> str:
    if not isinstance(t.date, str):
        raise MalformedTransaction(t.id, f"date {t.date!r} is not a string")
    return t.date


def in_month(month_prefix: Optional[str]):
    """Literal YYYY-MM prefix match on the date string; None matches everything."""
    def _filter(t: Transaction) -> bool:
        return month_prefix is None or checked_date(t).startswith(month_prefix)

    return _filter


def of_type(tx_type: str):
    def _filter(t: Transaction) -> bool:
        return t.type == tx_type

    return _filter


def expense_transactions(trans: Tuple[Transaction, ...]) -> Tuple[Transaction, ...]:
    return tuple(filter(of_type(EXPENSE), trans))


def total_by_type(
    trans: Tuple[Transaction, ...], tx_type: str, month_prefix: Optional[str] = None
) -> float:
    is_type = of_type(tx_type)
    is_month = in_month(month_prefix)
    return reduce(
        lambda acc, t: acc + checked_amount(t) if is_type(t) and is_month(t) else acc,
        trans,
        0.0,
    )


def net_balance(trans: Tuple[Transaction, ...]) -> float:
    return total_by_type(trans, INCOME) - total_by_type(trans, EXPENSE)


def search_transactions(trans: Tuple[Transaction, ...], term: str) -> Tuple[Transaction, ...]:
    needle = term.strip().lower()
    if not needle:
        return tuple(trans)
    return tuple(t for t in trans if needle in t.description.lower())


# Newest records go first, matching the list view order
def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return (t,) + tuple(trans)


def update_transaction(
    trans: Tuple[Transaction, ...], tid: str, updated: Transaction
) -> Tuple[Transaction, ...]:
    return tuple(replace(updated, id=tid) if t.id == tid else t for t in trans)


def delete_transaction(trans: Tuple[Transaction, ...], tid: str) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tid)


def add_budget(budgets: Tuple[Budget, ...], b: Budget) -> Tuple[Budget, ...]:
    return tuple(budgets) + (b,)


def delete_budget(budgets: Tuple[Budget, ...], bid: str) -> Tuple[Budget, ...]:
    return tuple(b for b in budgets if b.id != bid)
