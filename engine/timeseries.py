from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Tuple

from engine.domain import EXPENSE, MalformedTransaction, MonthBucket, MonthKey, Transaction
from engine.transforms import checked_amount, of_type

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"


def parse_date(t: Transaction) -> date:
    try:
        return datetime.strptime(t.date, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise MalformedTransaction(t.id, f"date {t.date!r} is not a YYYY-MM-DD calendar date") from None


def month_key_of(t: Transaction) -> MonthKey:
    d = parse_date(t)
    return MonthKey(year=d.year, month=d.month)


def parse_month(month: str) -> MonthKey:
    """Turn a ``YYYY-MM`` string into a MonthKey; raises ValueError when malformed."""
    d = datetime.strptime(month, MONTH_FORMAT)
    return MonthKey(year=d.year, month=d.month)


def previous_month(month: str) -> str:
    mk = parse_month(month)
    if mk.month == 1:
        return MonthKey(year=mk.year - 1, month=12).key
    return MonthKey(year=mk.year, month=mk.month - 1).key


def monthly_series(trans: Iterable[Transaction], window_size: int = 6) -> Tuple[MonthBucket, ...]:
    """Expense totals per calendar month, oldest first, limited to the last ``window_size`` months."""
    if window_size <= 0:
        return ()

    totals: Dict[MonthKey, List] = defaultdict(lambda: [0.0, 0])
    is_expense = of_type(EXPENSE)

    for t in trans:
        if is_expense(t):
            acc = totals[month_key_of(t)]
            acc[0] += checked_amount(t)
            acc[1] += 1

    # MonthKey orders by (year, month), so this is chronological across years
    recent = sorted(totals)[-window_size:]
    return tuple(MonthBucket(month_key=mk, total=totals[mk][0], count=totals[mk][1]) for mk in recent)
