"""Month-over-month trends and the insight signals shown on the dashboard.

The thresholds below are quoted by the insight texts, so they are constants
rather than settings.
"""
import enum
from datetime import date
from typing import Iterable, Tuple

from engine.breakdown import breakdown_by_category
from engine.budgets import warnings_and_overages
from engine.domain import EXPENSE, Budget, CategoryTotal, SpendingInsights, Transaction
from engine.functional import Maybe, Nothing, Some
from engine.timeseries import MONTH_FORMAT, month_key_of, parse_date, parse_month, previous_month
from engine.transforms import checked_amount, expense_transactions

SPENDING_RISE_THRESHOLD = 20        # percent month over month
CATEGORY_CONCENTRATION_THRESHOLD = 40  # percent of the month's spending
HIGH_AVERAGE_THRESHOLD = 100        # currency units per expense


class InsightFlag(enum.Enum):
    SPENDING_ROSE = "spending_rose"
    CATEGORY_CONCENTRATION = "category_concentration"
    WITHIN_BUDGETS = "within_budgets"
    HIGH_AVERAGE = "high_average"


def expenses_in_month(trans: Iterable[Transaction], month: str) -> Tuple[Transaction, ...]:
    """Expenses whose parsed date falls in the ``YYYY-MM`` month."""
    target = parse_month(month)
    return tuple(t for t in expense_transactions(tuple(trans)) if month_key_of(t) == target)


def monthly_expense_total(trans: Iterable[Transaction], month: str) -> float:
    return sum(checked_amount(t) for t in expenses_in_month(trans, month))


def month_over_month_change(
    trans: Iterable[Transaction], current_month: str, prior_month: str
) -> float:
    trans = tuple(trans)
    current = monthly_expense_total(trans, current_month)
    previous = monthly_expense_total(trans, prior_month)
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def top_category_this_month(trans: Iterable[Transaction], current_month: str) -> Maybe[CategoryTotal]:
    breakdown = breakdown_by_category(expenses_in_month(trans, current_month), EXPENSE)
    if not breakdown:
        return Nothing()
    return Some(breakdown[0])


def average_expense_amount(trans: Iterable[Transaction]) -> float:
    expenses = expense_transactions(tuple(trans))
    if not expenses:
        return 0.0
    return sum(checked_amount(t) for t in expenses) / len(expenses)


def days_since(reference_date: date, trans: Iterable[Transaction]) -> Maybe[int]:
    """Whole days from the latest transaction date to ``reference_date``."""
    dates = [parse_date(t) for t in trans]
    if not dates:
        return Nothing()
    return Some((reference_date - max(dates)).days)


def insight_flags(
    trans: Iterable[Transaction],
    budgets: Iterable[Budget],
    current_month: str,
    prior_month: str,
) -> frozenset:
    trans = tuple(trans)
    budgets = tuple(budgets)
    flags = set()

    if month_over_month_change(trans, current_month, prior_month) > SPENDING_RISE_THRESHOLD:
        flags.add(InsightFlag.SPENDING_ROSE)

    month_total = monthly_expense_total(trans, current_month)
    top = top_category_this_month(trans, current_month)
    if top.is_some() and top.get_or_else(None).amount > month_total * CATEGORY_CONCENTRATION_THRESHOLD / 100:
        flags.add(InsightFlag.CATEGORY_CONCENTRATION)

    if budgets and not warnings_and_overages(budgets, trans):
        flags.add(InsightFlag.WITHIN_BUDGETS)

    if average_expense_amount(trans) > HIGH_AVERAGE_THRESHOLD:
        flags.add(InsightFlag.HIGH_AVERAGE)

    return frozenset(flags)


def spending_insights(
    trans: Iterable[Transaction], budgets: Iterable[Budget], reference_date: date
) -> SpendingInsights:
    trans = tuple(trans)
    budgets = tuple(budgets)
    current_month = reference_date.strftime(MONTH_FORMAT)
    prior_month = previous_month(current_month)

    return SpendingInsights(
        current_month=current_month,
        previous_month=prior_month,
        current_month_expenses=monthly_expense_total(trans, current_month),
        previous_month_expenses=monthly_expense_total(trans, prior_month),
        monthly_change=month_over_month_change(trans, current_month, prior_month),
        top_category=top_category_this_month(trans, current_month).get_or_else(None),
        average_expense=average_expense_amount(trans),
        days_since_last=days_since(reference_date, trans).get_or_else(None),
        budget_warnings=warnings_and_overages(budgets, trans),
        flags=insight_flags(trans, budgets, current_month, prior_month),
    )
