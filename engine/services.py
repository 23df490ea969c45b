import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Callable, Dict, Iterable, Sequence

from engine import config
from engine.breakdown import category_shares, top_categories
from engine.budgets import budget_comparison, safe_evaluate
from engine.domain import EXPENSE, INCOME
from engine.insights import spending_insights
from engine.timeseries import monthly_series
from engine.transforms import net_balance, total_by_type

logger = logging.getLogger(__name__)


class DashboardService:
    """Facade that builds every dashboard panel from the two collections.

    panels: sequence of functions taking (transactions, budgets, reference_date, acc) -> dict
    Each panel sees the merged output of the panels before it through ``acc``.
    """

    def __init__(self, panels: Sequence[Callable[..., Dict[str, Any]]]):
        self.panels = panels

    def build(self, transactions: Iterable, budgets: Iterable, reference_date: date) -> Dict[str, Any]:
        transactions = tuple(transactions)
        budgets = tuple(budgets)
        report = {"reference_date": reference_date.isoformat(), "steps": [], "result": {}}

        acc: Dict[str, Any] = {}
        for panel in self.panels:
            name = getattr(panel, "__name__", str(panel))
            out = panel(transactions, budgets, reference_date, acc)
            logger.debug("Panel %s produced %s", name, sorted(out) if isinstance(out, dict) else type(out))
            report["steps"].append({"panel": name, "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report


def summary_panel(transactions, budgets, reference_date, acc=None) -> Dict[str, Any]:
    return {
        "total_income": total_by_type(transactions, INCOME),
        "total_expenses": total_by_type(transactions, EXPENSE),
        "net_balance": net_balance(transactions),
        "transaction_count": len(transactions),
    }


def monthly_chart_panel(transactions, budgets, reference_date, acc=None) -> Dict[str, Any]:
    return {"monthly_series": monthly_series(transactions, config.MONTHLY_CHART_WINDOW)}


def category_panel(transactions, budgets, reference_date, acc=None) -> Dict[str, Any]:
    return {
        "expense_categories": category_shares(transactions, EXPENSE, limit=config.CATEGORY_PIE_LIMIT),
        "income_categories": category_shares(transactions, INCOME, limit=config.CATEGORY_PIE_LIMIT),
        "top_expense_categories": top_categories(
            transactions, EXPENSE, reference_date.strftime("%Y-%m"), config.TOP_CATEGORY_LIMIT
        ),
    }


def budget_panel(transactions, budgets, reference_date, acc=None) -> Dict[str, Any]:
    results = [safe_evaluate(b, transactions) for b in budgets]
    valid = tuple(r.get_or_else(None) for r in results if r.is_right())
    errors = [r.get_error() for r in results if r.is_left()]
    valid_budgets = tuple(e.budget for e in valid)
    return {
        "budget_evaluations": valid,
        "budget_errors": errors,
        "budget_comparison": budget_comparison(valid_budgets, transactions),
    }


def insights_panel(transactions, budgets, reference_date, acc=None) -> Dict[str, Any]:
    # invalid budgets are reported by budget_panel, insights only see the valid ones
    valid_budgets = tuple(b for b in budgets if b.monthly_limit > 0)
    return {"insights": spending_insights(transactions, valid_budgets, reference_date)}


def default_panels():
    return [summary_panel, monthly_chart_panel, category_panel, budget_panel, insights_panel]


def build_dashboard(transactions, budgets, reference_date: date) -> Dict[str, Any]:
    return DashboardService(default_panels()).build(transactions, budgets, reference_date)


def insights_as_dict(insights) -> Dict[str, Any]:
    """Plain-dict view of SpendingInsights with flag names, handy for tables and exports."""
    d = asdict(insights)
    d["flags"] = sorted(f.value for f in insights.flags)
    return d
