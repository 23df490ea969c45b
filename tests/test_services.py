import json
from datetime import date

from engine.domain import EXPENSE, INCOME, Budget, Transaction
from engine.insights import InsightFlag
from engine.services import DashboardService, build_dashboard, insights_as_dict, summary_panel


def make_tx(id, amount, category, date, tx_type=EXPENSE):
    return Transaction(id=id, amount=amount, description="item", date=date, type=tx_type, category=category)


def sample():
    return (
        make_tx("t1", 100, "Food", "2024-01-05"),
        make_tx("t2", 50, "Food", "2024-01-20"),
        make_tx("t3", 200, "Salary", "2024-01-01", INCOME),
    )


def test_dashboard_service_runs_panels_in_order():
    seen = []

    def first(transactions, budgets, reference_date, acc):
        seen.append(dict(acc))
        return {"count": len(transactions)}

    def second(transactions, budgets, reference_date, acc):
        seen.append(dict(acc))
        return {"double": acc["count"] * 2}

    report = DashboardService([first, second]).build(sample(), (), date(2024, 1, 31))

    assert report["reference_date"] == "2024-01-31"
    assert [s["panel"] for s in report["steps"]] == ["first", "second"]
    assert seen == [{}, {"count": 3}]
    assert report["result"] == {"count": 3, "double": 6}


def test_build_dashboard_default_panels():
    budgets = (Budget("b1", "Food", 100, "2024-01"), Budget("bad", "Travel", 0, "2024-01"))

    result = build_dashboard(sample(), budgets, date(2024, 1, 31))["result"]

    assert result["net_balance"] == 50
    assert result["transaction_count"] == 3
    assert [b.month_key.key for b in result["monthly_series"]] == ["2024-01"]
    assert result["expense_categories"][0].percentage == 100
    assert [e.budget.id for e in result["budget_evaluations"]] == ["b1"]
    assert result["budget_errors"][0]["budget_id"] == "bad"
    assert result["budget_comparison"][0].spent == 150
    assert result["insights"].top_category.category == "Food"
    assert InsightFlag.CATEGORY_CONCENTRATION in result["insights"].flags


def test_build_dashboard_empty():
    result = build_dashboard((), (), date(2024, 1, 31))["result"]

    assert result["total_income"] == 0
    assert result["monthly_series"] == ()
    assert result["budget_evaluations"] == ()
    assert result["insights"].flags == frozenset()


def test_summary_panel_does_not_mutate_inputs():
    trans = sample()
    assert summary_panel(trans, (), date(2024, 1, 31)) == summary_panel(trans, (), date(2024, 1, 31))
    assert trans == sample()


def test_insights_as_dict_is_json_ready():
    ins = build_dashboard(sample(), (Budget("b1", "Food", 100, "2024-01"),), date(2024, 1, 31))["result"]["insights"]

    d = insights_as_dict(ins)

    assert "category_concentration" in d["flags"]
    assert d["budget_warnings"][0]["status"] == "over"
    json.dumps(d)
