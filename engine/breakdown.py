from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from engine.domain import CategoryShare, CategoryTotal, Transaction
from engine.transforms import checked_amount, in_month, of_type


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def breakdown_by_category(
    trans: Iterable[Transaction], tx_type: str, month_prefix: Optional[str] = None
) -> Tuple[CategoryTotal, ...]:
    """Group one transaction type by category, largest amount first.

    Categories with equal amounts keep the order in which they were first seen,
    since ``sorted`` is stable.
    """
    is_type = of_type(tx_type)
    is_month = in_month(month_prefix)
    totals: Dict[str, List] = {}

    for t in iter_transactions(trans, lambda t: is_type(t) and is_month(t)):
        acc = totals.setdefault(t.category, [0.0, 0])
        acc[0] += checked_amount(t)
        acc[1] += 1

    ordered = sorted(totals.items(), key=lambda item: item[1][0], reverse=True)
    return tuple(CategoryTotal(category=c, amount=a, count=n) for c, (a, n) in ordered)


def top_categories(
    trans: Iterable[Transaction], tx_type: str, month_prefix: Optional[str], limit: int
) -> Tuple[CategoryTotal, ...]:
    return breakdown_by_category(trans, tx_type, month_prefix)[: max(0, limit)]


def category_shares(
    trans: Iterable[Transaction],
    tx_type: str,
    month_prefix: Optional[str] = None,
    limit: Optional[int] = None,
) -> Tuple[CategoryShare, ...]:
    """Breakdown entries with their percentage of the type total (0 when the total is 0)."""
    breakdown = breakdown_by_category(trans, tx_type, month_prefix)
    total = sum(entry.amount for entry in breakdown)
    if limit is not None:
        breakdown = breakdown[: max(0, limit)]

    return tuple(
        CategoryShare(
            category=entry.category,
            amount=entry.amount,
            count=entry.count,
            percentage=(entry.amount / total * 100) if total > 0 else 0.0,
        )
        for entry in breakdown
    )
