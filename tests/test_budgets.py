import math

import pytest

from engine.budgets import (
    STATUS_GOOD,
    STATUS_OVER,
    STATUS_WARNING,
    budget_comparison,
    budget_status,
    evaluate,
    evaluate_all,
    progress_percentage,
    safe_evaluate,
    warnings_and_overages,
)
from engine.domain import EXPENSE, INCOME, Budget, BudgetComparison, InvalidBudget, MalformedTransaction, Transaction


def make_tx(id, amount, category, date, tx_type=EXPENSE):
    return Transaction(id=id, amount=amount, description="item", date=date, type=tx_type, category=category)


def scenario():
    return (
        make_tx("t1", 100, "Food", "2024-01-05"),
        make_tx("t2", 50, "Food", "2024-01-20"),
        make_tx("t3", 200, "Salary", "2024-01-01", INCOME),
    )


def test_evaluate_scenario_over_budget():
    result = evaluate(Budget("b1", "Food", 100, "2024-01"), scenario())

    assert result.spent == 150
    assert result.remaining == 0
    assert result.percentage == 150
    assert result.status == STATUS_OVER


def test_evaluate_only_counts_matching_month_and_category():
    trans = scenario() + (
        make_tx("t4", 40, "Food", "2024-02-01"),
        make_tx("t5", 40, "Travel", "2024-01-02"),
        make_tx("t6", 40, "Food", "2024-01-03", INCOME),
    )

    result = evaluate(Budget("b1", "Food", 300, "2024-01"), trans)

    assert result.spent == 150
    assert result.remaining == 150
    assert result.percentage == 50
    assert result.status == STATUS_GOOD


@pytest.mark.parametrize("spent,status", [
    (79.99, STATUS_GOOD),
    (80, STATUS_WARNING),
    (99.99, STATUS_WARNING),
    (100, STATUS_OVER),
    (250, STATUS_OVER),
])
def test_status_boundaries(spent, status):
    result = evaluate(Budget("b1", "Food", 100, "2024-01"), (make_tx("t1", spent, "Food", "2024-01-01"),))
    assert result.status == status


def test_budget_status_thresholds_directly():
    assert budget_status(79.999) == STATUS_GOOD
    assert budget_status(80) == STATUS_WARNING
    assert budget_status(100) == STATUS_OVER


def test_remaining_never_negative():
    result = evaluate(Budget("b1", "Food", 10, "2024-01"), scenario())
    assert result.remaining == 0


@pytest.mark.parametrize("limit", [0, -5])
def test_non_positive_limit_is_rejected(limit):
    with pytest.raises(InvalidBudget):
        evaluate(Budget("b1", "Food", limit, "2024-01"), scenario())


def test_safe_evaluate_returns_left_for_invalid_budget():
    result = safe_evaluate(Budget("b0", "Food", 0, "2024-01"), scenario())

    assert result.is_left()
    assert result.get_error()["error"] == "invalid_budget"
    assert result.get_error()["budget_id"] == "b0"

    ok = safe_evaluate(Budget("b1", "Food", 300, "2024-01"), scenario())
    assert ok.is_right()
    assert ok.get_or_else(None).spent == 150


def test_evaluate_all_preserves_order_and_duplicates():
    budgets = (
        Budget("b2", "Food", 1000, "2024-01"),
        Budget("b1", "Food", 100, "2024-01"),
        Budget("b3", "Food", 1000, "2024-01"),
    )

    results = evaluate_all(budgets, scenario())

    assert [r.budget.id for r in results] == ["b2", "b1", "b3"]
    assert results[0].spent == results[2].spent == 150


def test_warnings_and_overages():
    trans = scenario() + (make_tx("t4", 85, "Travel", "2024-01-09"),)
    budgets = (
        Budget("b1", "Food", 100, "2024-01"),
        Budget("b2", "Travel", 100, "2024-01"),
        Budget("b3", "Shopping", 100, "2024-01"),
    )

    assert [r.budget.id for r in warnings_and_overages(budgets, trans)] == ["b1", "b2"]
    assert warnings_and_overages((), trans) == ()


def test_budget_comparison_and_progress():
    budgets = (Budget("b1", "Food", 100, "2024-01"), Budget("b2", "Travel", 200, "2024-01"))

    assert budget_comparison(budgets, scenario()) == (
        BudgetComparison("Food", 100, 150, 0),
        BudgetComparison("Travel", 200, 0, 200),
    )
    assert progress_percentage(evaluate(budgets[0], scenario())) == 100


def test_empty_transactions():
    result = evaluate(Budget("b1", "Food", 100, "2024-01"), ())
    assert (result.spent, result.remaining, result.percentage, result.status) == (0, 100, 0, STATUS_GOOD)


def test_evaluation_is_idempotent():
    trans = scenario()
    budget = Budget("b1", "Food", 100, "2024-01")

    assert evaluate(budget, trans) == evaluate(budget, trans)
    assert trans == scenario()


def test_nan_amount_fails_loudly():
    trans = scenario() + (make_tx("bad", math.nan, "Food", "2024-01-09"),)

    with pytest.raises(MalformedTransaction) as exc:
        evaluate(Budget("b1", "Food", 100, "2024-01"), trans)
    assert exc.value.transaction_id == "bad"


def test_missing_date_fails_loudly():
    trans = (make_tx("nodate", 5, "Food", None),)

    with pytest.raises(MalformedTransaction) as exc:
        evaluate(Budget("b1", "Food", 10, "2024-01"), trans)
    assert "date" in exc.value.reason
