import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import logging
from datetime import date
from uuid import uuid4

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from engine import config
from engine.budgets import STATUS_OVER, STATUS_WARNING, progress_percentage
from engine.domain import (
    EXPENSE,
    EXPENSE_CATEGORIES,
    INCOME,
    INCOME_CATEGORIES,
    Budget,
    FinanceError,
    Transaction,
)
from engine.functional import validate_transaction
from engine.insights import (
    CATEGORY_CONCENTRATION_THRESHOLD,
    HIGH_AVERAGE_THRESHOLD,
    SPENDING_RISE_THRESHOLD,
    InsightFlag,
)
from engine.services import build_dashboard, insights_as_dict
from engine.storage import JsonStore
from engine.timeseries import parse_month
from engine.transforms import (
    add_budget,
    add_transaction,
    delete_budget,
    delete_transaction,
    search_transactions,
    update_transaction,
)

config.configure_logging()
logger = logging.getLogger("finance_app")

st.set_page_config(page_title="Personal Finance Tracker", layout="wide")

store = JsonStore(config.STORE_PATH)

try:
    if "transactions" not in st.session_state:
        st.session_state.transactions = store.load_transactions()
    if "budgets" not in st.session_state:
        st.session_state.budgets = store.load_budgets()
except FinanceError as e:
    logger.error("Could not load %s: %s", store.path, e)
    st.error(f"Could not load saved data: {e}")
    st.stop()

if "editing_id" not in st.session_state:
    st.session_state.editing_id = None


def set_transactions(trans):
    st.session_state.transactions = trans
    store.save_transactions(trans)


def set_budgets(budgets):
    st.session_state.budgets = budgets
    store.save_budgets(budgets)


def valid_month(month: str) -> bool:
    try:
        parse_month(month)
    except ValueError:
        return False
    return True


def money(value: float) -> str:
    return f"${value:,.2f}"


today = st.sidebar.date_input("Reference date", value=date.today())

try:
    dashboard = build_dashboard(st.session_state.transactions, st.session_state.budgets, today)
except FinanceError as e:
    logger.error("Dashboard failed: %s", e)
    st.error(f"Stored data is malformed: {e}")
    st.stop()

result = dashboard["result"]

menu = st.sidebar.radio("Menu", ["🏠 Overview", "🧾 Transactions", "💰 Budgets", "💡 Insights"])

if menu == "🏠 Overview":
    st.title("Personal Finance Tracker")
    st.caption("Take control of your finances with smart tracking and insights")

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Income", money(result["total_income"]))
    with k2:
        st.metric("Total Expenses", money(result["total_expenses"]))
    with k3:
        st.metric("Net Balance", money(result["net_balance"]))

    st.subheader("Monthly Expenses Overview")
    series = result["monthly_series"]
    if series:
        df_month = pd.DataFrame(
            [{"Month": b.month_key.label, "Expenses": b.total, "Transactions": b.count} for b in series]
        )
        fig_month = px.bar(df_month, x="Month", y="Expenses", hover_data=["Transactions"])
        fig_month.update_traces(marker_color="#ef4444")
        st.plotly_chart(fig_month, use_container_width=True)
    else:
        st.info("No expense data to chart yet.")

    c1, c2 = st.columns(2)
    for col, key, title in (
        (c1, "expense_categories", "Expenses by Category"),
        (c2, "income_categories", "Income by Category"),
    ):
        with col:
            st.subheader(title)
            shares = result[key]
            if shares:
                df_cat = pd.DataFrame([{"Category": s.category, "Amount": s.amount, "Count": s.count} for s in shares])
                st.plotly_chart(px.pie(df_cat, values="Amount", names="Category", hover_data=["Count"]),
                                use_container_width=True)
            else:
                st.info("No data yet.")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    editing = next((t for t in st.session_state.transactions if t.id == st.session_state.editing_id), None)
    st.subheader("Edit Transaction" if editing else "New Transaction")

    tx_type = st.radio("Type", [EXPENSE, INCOME], horizontal=True,
                       index=1 if editing and editing.type == INCOME else 0)
    categories = EXPENSE_CATEGORIES if tx_type == EXPENSE else INCOME_CATEGORIES
    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount ($)", min_value=0.0, step=0.01, format="%.2f",
                                     value=float(editing.amount) if editing else 0.0)
            tx_date = st.date_input("Date", value=date.fromisoformat(editing.date) if editing else today)
        with col2:
            category = st.selectbox(
                "Category", categories,
                index=categories.index(editing.category) if editing and editing.category in categories else 0,
            )
            description = st.text_input("Description", value=editing.description if editing else "")
        submitted = st.form_submit_button("Update Transaction" if editing else "Add Transaction")

    if submitted:
        draft = Transaction(
            id=editing.id if editing else str(uuid4()),
            amount=float(amount),
            description=description.strip(),
            date=tx_date.isoformat(),
            type=tx_type,
            category=category,
        )
        checked = validate_transaction(draft)
        if checked.is_left():
            st.error(checked.get_error()["message"])
        elif amount <= 0:
            st.error("Amount must be greater than zero")
        else:
            if editing:
                set_transactions(update_transaction(st.session_state.transactions, editing.id, draft))
                st.session_state.editing_id = None
            else:
                set_transactions(add_transaction(st.session_state.transactions, draft))
            logger.info("Saved transaction %s", draft.id)
            st.rerun()

    if editing and st.button("Cancel edit"):
        st.session_state.editing_id = None
        st.rerun()

    st.divider()
    term = st.text_input("🔍 Search descriptions")
    shown = search_transactions(st.session_state.transactions, term)
    if not shown:
        st.info("No transactions match your search." if term else "No transactions yet.")
    for t in shown:
        c_desc, c_amt, c_edit, c_del = st.columns([5, 2, 1, 1])
        with c_desc:
            st.markdown(f"**{t.description}**  \n{t.date} · {t.category or 'Uncategorized'}")
        with c_amt:
            sign = "+" if t.type == INCOME else "-"
            st.markdown(f"{sign}{money(t.amount)}")
        with c_edit:
            if st.button("✏️", key=f"edit_{t.id}"):
                st.session_state.editing_id = t.id
                st.rerun()
        with c_del:
            if st.button("🗑", key=f"del_{t.id}"):
                set_transactions(delete_transaction(st.session_state.transactions, t.id))
                logger.info("Deleted transaction %s", t.id)
                st.rerun()

    if shown:
        df_tx = pd.DataFrame([
            {"date": t.date, "description": t.description, "type": t.type,
             "category": t.category, "amount": t.amount}
            for t in shown
        ])
        st.download_button("⬇ Download CSV", df_tx.to_csv(index=False), file_name="transactions.csv")

elif menu == "💰 Budgets":
    st.title("💰 Budget Management")
    st.caption("Set and track monthly spending limits")

    with st.form("budget_form", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            category = st.selectbox("Category", EXPENSE_CATEGORIES)
        with col2:
            limit = st.number_input("Monthly Limit ($)", min_value=0.0, step=0.01, format="%.2f")
        with col3:
            month = st.text_input("Month (YYYY-MM)", value=today.strftime("%Y-%m"))
        if st.form_submit_button("Add Budget"):
            if limit <= 0:
                st.error("Monthly limit must be greater than zero")
            elif not valid_month(month.strip()):
                st.error("Month must look like 2024-01")
            else:
                set_budgets(add_budget(
                    st.session_state.budgets,
                    Budget(id=str(uuid4()), category=category, monthly_limit=float(limit), month=parse_month(month.strip()).key),
                ))
                st.rerun()

    for err in result["budget_errors"]:
        c_warn, c_del = st.columns([8, 1])
        with c_warn:
            st.warning(err["message"])
        with c_del:
            if st.button("🗑", key=f"del_bad_budget_{err['budget_id']}"):
                set_budgets(delete_budget(st.session_state.budgets, err["budget_id"]))
                logger.info("Deleted invalid budget %s", err["budget_id"])
                st.rerun()

    evaluations = result["budget_evaluations"]
    if not evaluations and not result["budget_errors"]:
        st.info("No budgets set yet. Add your first budget to start tracking!")

    for ev in evaluations:
        label = {STATUS_OVER: "Over Budget", STATUS_WARNING: "Near Limit"}.get(ev.status, "On Track")
        c_head, c_del = st.columns([8, 1])
        with c_head:
            st.markdown(f"**{ev.budget.category}** · {ev.budget.month} · _{label}_")
        with c_del:
            if st.button("🗑", key=f"del_budget_{ev.budget.id}"):
                set_budgets(delete_budget(st.session_state.budgets, ev.budget.id))
                st.rerun()
        st.progress(progress_percentage(ev) / 100)
        st.caption(
            f"Spent {money(ev.spent)} of {money(ev.budget.monthly_limit)} · "
            f"{ev.percentage:.1f}% used · {money(ev.remaining)} remaining"
        )

    comparison = result["budget_comparison"]
    if comparison:
        fig_cmp = go.Figure()
        fig_cmp.add_trace(go.Bar(x=[c.category for c in comparison], y=[c.budget for c in comparison],
                                 name="Budget", marker_color="#3b82f6"))
        fig_cmp.add_trace(go.Bar(x=[c.category for c in comparison], y=[c.spent for c in comparison],
                                 name="Spent", marker_color="#ef4444"))
        fig_cmp.update_layout(barmode="group", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_cmp, use_container_width=True)

elif menu == "💡 Insights":
    st.title("💡 Spending Insights")
    ins = result["insights"]

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Monthly Trend", f"{ins.monthly_change:+.1f}%",
                  help=f"vs last month ({money(ins.previous_month_expenses)})")
    with k2:
        top = ins.top_category
        st.metric("Top Category", top.category if top else "N/A",
                  delta=f"{money(top.amount)} this month" if top else None, delta_color="off")
    with k3:
        days = ins.days_since_last
        st.metric("Avg Transaction", money(ins.average_expense),
                  delta=f"{days} days since last" if days is not None else "no transactions",
                  delta_color="off")

    if ins.budget_warnings:
        st.subheader("Budget Alerts")
        for ev in ins.budget_warnings:
            st.warning(
                f"{ev.budget.category}: {money(ev.spent)} of {money(ev.budget.monthly_limit)} "
                f"({ev.percentage:.0f}%)"
            )

    st.subheader("Smart Insights")
    if InsightFlag.SPENDING_ROSE in ins.flags:
        st.markdown(f"• Your spending increased by more than {SPENDING_RISE_THRESHOLD}% this month. "
                    "Consider reviewing your expenses.")
    if InsightFlag.CATEGORY_CONCENTRATION in ins.flags:
        st.markdown(f"• {ins.top_category.category} represents over {CATEGORY_CONCENTRATION_THRESHOLD}% "
                    "of your spending. Look for optimization opportunities.")
    if InsightFlag.WITHIN_BUDGETS in ins.flags:
        st.markdown("• Great job staying within your budgets!")
    if InsightFlag.HIGH_AVERAGE in ins.flags:
        st.markdown(f"• Your average transaction is {money(ins.average_expense)}, above "
                    f"{money(HIGH_AVERAGE_THRESHOLD)}. Consider if this aligns with your goals.")

    st.download_button("⬇ Download insights (JSON)", json.dumps(insights_as_dict(ins), indent=2),
                       file_name="insights.json")
