"""Budget evaluation: spent, remaining and status of each monthly cap.

Status thresholds are fixed policy and shared with the insight texts:
``over`` at 100% or more, ``warning`` from 80% up to 100%, ``good`` below 80%.
"""
import logging
from typing import Iterable, Tuple

from engine.domain import (
    EXPENSE,
    Budget,
    BudgetComparison,
    BudgetEvaluation,
    InvalidBudget,
    Transaction,
)
from engine.functional import Either, Left, Right
from engine.transforms import checked_amount, in_month

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = 80
OVER_THRESHOLD = 100

STATUS_GOOD = "good"
STATUS_WARNING = "warning"
STATUS_OVER = "over"


def budget_status(percentage: float) -> str:
    if percentage >= OVER_THRESHOLD:
        return STATUS_OVER
    if percentage >= WARNING_THRESHOLD:
        return STATUS_WARNING
    return STATUS_GOOD


def budget_spent(budget: Budget, trans: Iterable[Transaction]) -> float:
    is_month = in_month(budget.month)
    return sum(
        checked_amount(t) for t in trans
        if t.type == EXPENSE
        and t.category == budget.category
        and is_month(t)
    )


def evaluate(budget: Budget, trans: Iterable[Transaction]) -> BudgetEvaluation:
    if not budget.monthly_limit > 0:
        raise InvalidBudget(budget)

    spent = budget_spent(budget, trans)
    percentage = spent / budget.monthly_limit * 100
    return BudgetEvaluation(
        budget=budget,
        spent=spent,
        remaining=max(0.0, budget.monthly_limit - spent),
        percentage=percentage,
        status=budget_status(percentage),
    )


def evaluate_all(
    budgets: Iterable[Budget], trans: Iterable[Transaction]
) -> Tuple[BudgetEvaluation, ...]:
    trans = tuple(trans)
    return tuple(evaluate(b, trans) for b in budgets)


def warnings_and_overages(
    budgets: Iterable[Budget], trans: Iterable[Transaction]
) -> Tuple[BudgetEvaluation, ...]:
    return tuple(e for e in evaluate_all(budgets, trans) if e.percentage >= WARNING_THRESHOLD)


def safe_evaluate(budget: Budget, trans: Iterable[Transaction]) -> Either[dict, BudgetEvaluation]:
    try:
        return Right(evaluate(budget, trans))
    except InvalidBudget as e:
        logger.warning("Skipping budget %s: %s", budget.id, e)
        return Left({
            "error": "invalid_budget",
            "message": str(e),
            "budget_id": budget.id,
            "limit": budget.monthly_limit,
        })


def progress_percentage(evaluation: BudgetEvaluation) -> float:
    """Percentage used, capped at 100 for progress bars."""
    return min(evaluation.percentage, float(OVER_THRESHOLD))


def budget_comparison(
    budgets: Iterable[Budget], trans: Iterable[Transaction]
) -> Tuple[BudgetComparison, ...]:
    return tuple(
        BudgetComparison(
            category=e.budget.category,
            budget=e.budget.monthly_limit,
            spent=e.spent,
            remaining=e.remaining,
        )
        for e in evaluate_all(budgets, trans)
    )
