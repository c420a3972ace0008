import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from finflow.aggregation import category_ranking, goal_progress, monthly_series
from finflow.codec import backup_filename, dumps_snapshot
from finflow.config import Config
from finflow.domain import EXPENSE_CATEGORIES, INCOME_CATEGORIES, TransactionType, categories_for
from finflow.events import (
    BUDGET_EXCEEDED,
    DATA_IMPORTED,
    GOAL_COMPLETED,
    PERSISTENCE_FAILED,
    RECORD_DELETED,
    RECORD_SAVED,
    EventBus,
    notification_for,
)
from finflow.filters import filter_transactions, recent_transactions
from finflow.logger import setup_logger
from finflow.persistence import FileBlobStore, PersistenceGateway
from finflow.services import FinanceTracker, result_message

st.set_page_config(page_title="FinanceFlow", layout="wide")

logger = setup_logger("finflow.app", Config.LOG_LEVEL)
Config.validate()


def money(amount: float) -> str:
    return f"{amount:,.2f} {Config.CURRENCY}"


def queue_notification(event, payload):
    st.session_state.notifications.append(notification_for(event))


def open_tracker() -> FinanceTracker:
    bus = EventBus()
    for name in (RECORD_SAVED, RECORD_DELETED, BUDGET_EXCEEDED, GOAL_COMPLETED, PERSISTENCE_FAILED, DATA_IMPORTED):
        bus.subscribe(name, queue_notification)
    gateway = PersistenceGateway(FileBlobStore(Config.DATA_DIR), Config.STORAGE_PREFIX)
    tracker = FinanceTracker.open(gateway, bus)
    for error in tracker.load_errors:
        st.session_state.notifications.append(("error", "Error loading data"))
        logger.warning(error.message)
    return tracker


if "notifications" not in st.session_state:
    st.session_state.notifications = []
if "tracker" not in st.session_state:
    st.session_state.tracker = open_tracker()

tracker: FinanceTracker = st.session_state.tracker
today = date.today()


def show_notifications():
    for level, message in st.session_state.notifications:
        getattr(st, level, st.info)(message)
    st.session_state.notifications = []


def show_result(result):
    if not result.ok:
        st.session_state.notifications.append(("error", result_message(result)))
    st.rerun()


def tx_to_df(tx_list):
    rows = [
        {
            "id": t.id,
            "date": pd.to_datetime(t.date),
            "description": t.description,
            "category": t.category,
            "type": t.type.value,
            "amount": t.amount if t.is_income else -t.amount,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["id", "date", "description", "category", "type", "amount"])


def budget_bar(usage):
    label = f"{usage.budget.category}: {money(usage.spent)} / {money(usage.budget.amount)}"
    if usage.over_budget:
        st.error(f"{label} (over budget)")
    else:
        st.write(label)
    st.progress(min(usage.percentage, 100) / 100)
    st.caption(f"{usage.percentage:.1f}% used · {money(usage.remaining)} remaining")


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "💰 Budgets", "🎯 Goals", "📊 Analytics", "💾 Data"]
)

show_notifications()

if menu == "🏠 Dashboard":
    summary = tracker.summary(today)
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Current Balance", money(summary.balance))
    with k2:
        st.metric("Monthly Income", money(summary.month.income))
    with k3:
        st.metric("Monthly Expenses", money(summary.month.expense))
    with k4:
        st.metric("Savings", money(summary.savings))

    col_recent, col_budgets = st.columns(2)
    with col_recent:
        st.subheader("Recent Transactions")
        recent = recent_transactions(tracker.store.transactions.list(), Config.RECENT_LIMIT)
        if recent:
            disp = tx_to_df(recent).drop(columns=["id"])
            disp["date"] = disp["date"].dt.strftime("%d %b %Y")
            disp["amount"] = disp["amount"].map(money)
            st.table(disp.reset_index(drop=True))
        else:
            st.info("No transactions yet")
    with col_budgets:
        st.subheader("Budget Overview")
        usages = tracker.budget_overview(today, Config.DASHBOARD_BUDGETS)
        if usages:
            for usage in usages:
                budget_bar(usage)
        else:
            st.info("No budgets set")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    editing = st.session_state.get("editing_tx")
    current = tracker.store.transactions.get(editing).get_or_else(None) if editing else None

    tx_type = st.radio(
        "Type",
        [t.value for t in TransactionType],
        index=1 if current is None or not current.is_income else 0,
        horizontal=True,
    )
    options = list(categories_for(tx_type))
    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f",
                                     value=current.amount if current else 0.0)
            description = st.text_input("Description", value=current.description if current else "")
        with col2:
            idx = options.index(current.category) if current and current.category in options else 0
            category = st.selectbox("Category", options, index=idx)
            tx_date = st.date_input("Date", value=current.date if current else today)
        submitted = st.form_submit_button("Update Transaction" if current else "Add Transaction")

    if submitted:
        draft = {"amount": amount, "description": description, "category": category,
                 "type": tx_type, "date": tx_date}
        st.session_state.editing_tx = None
        if current:
            show_result(tracker.edit_transaction(current.id, draft))
        else:
            show_result(tracker.add_transaction(draft))

    col1, col2, col3 = st.columns(3)
    with col1:
        search = st.text_input("Search")
    with col2:
        category_filter = st.selectbox("Category", [""] + list(INCOME_CATEGORIES + EXPENSE_CATEGORIES),
                                       key="filter_category")
    with col3:
        type_filter = st.selectbox("Type", ["", "income", "expense"], key="filter_type")

    rows = filter_transactions(tracker.store.transactions.list(), search, category_filter, type_filter)
    if not rows:
        st.info("No transactions found")
    for t in rows:
        c1, c2, c3, c4 = st.columns([4, 2, 1, 1])
        sign = "+" if t.is_income else "-"
        c1.write(f"**{t.description}** · {t.category} · {t.date:%d %b %Y}")
        c2.write(f"{sign}{money(t.amount)}")
        if c3.button("Edit", key=f"edit_{t.id}"):
            st.session_state.editing_tx = t.id
            st.rerun()
        if c4.button("Delete", key=f"del_{t.id}"):
            show_result(tracker.remove_transaction(t.id))

elif menu == "💰 Budgets":
    st.title("💰 Budgets")

    with st.form("budget_form", clear_on_submit=True):
        category = st.selectbox("Category", EXPENSE_CATEGORIES)
        amount = st.number_input("Monthly limit", min_value=0.0, step=10.0, format="%.2f")
        submitted = st.form_submit_button("Save Budget")
    if submitted:
        show_result(tracker.add_budget({"category": category, "amount": amount}))

    for usage in tracker.budget_overview(today):
        budget_bar(usage)
        c1, c2 = st.columns([3, 1])
        new_limit = c1.number_input("Limit", value=usage.budget.amount, key=f"limit_{usage.budget.id}")
        if c1.button("Update", key=f"upd_{usage.budget.id}"):
            show_result(tracker.edit_budget(usage.budget.id, {"category": usage.budget.category, "amount": new_limit}))
        if c2.button("Delete", key=f"delb_{usage.budget.id}"):
            show_result(tracker.remove_budget(usage.budget.id))

elif menu == "🎯 Goals":
    st.title("🎯 Savings Goals")

    editing = st.session_state.get("editing_goal")
    current = tracker.store.goals.get(editing).get_or_else(None) if editing else None

    with st.form("goal_form", clear_on_submit=True):
        name = st.text_input("Goal name", value=current.name if current else "")
        target = st.number_input("Target amount", min_value=0.0, step=10.0, format="%.2f",
                                 value=current.target if current else 0.0)
        saved = st.number_input("Current amount", min_value=0.0, step=10.0, format="%.2f",
                                value=current.current if current else 0.0)
        has_deadline = st.checkbox("Set a deadline", value=bool(current and current.deadline))
        deadline = st.date_input("Deadline", value=current.deadline if current and current.deadline else today)
        submitted = st.form_submit_button("Update Goal" if current else "Save Goal")
    if submitted:
        draft = {"name": name, "target": target, "current": saved,
                 "deadline": deadline if has_deadline else None}
        st.session_state.editing_goal = None
        if current:
            show_result(tracker.edit_goal(current.id, draft))
        else:
            show_result(tracker.add_goal(draft))

    for progress in tracker.goal_overview():
        goal = progress.goal
        st.subheader(goal.name)
        st.caption(f"Target: {goal.deadline:%d %b %Y}" if goal.deadline else "No deadline")
        st.progress(min(progress.percentage, 100) / 100)
        st.write(f"{money(goal.current)} of {money(goal.target)} · {progress.percentage:.1f}% complete · "
                 f"{money(progress.remaining)} remaining")
        c1, c2, c3 = st.columns([3, 1, 1])
        new_amount = c1.number_input("New current amount", min_value=0.0, value=goal.current, key=f"cur_{goal.id}")
        if c1.button("Update Progress", key=f"prog_{goal.id}"):
            show_result(tracker.update_goal_current(goal.id, new_amount))
        if c2.button("Edit", key=f"editg_{goal.id}"):
            st.session_state.editing_goal = goal.id
            st.rerun()
        if c3.button("Delete", key=f"delg_{goal.id}"):
            show_result(tracker.remove_goal(goal.id))

elif menu == "📊 Analytics":
    st.title("📊 Analytics")
    transactions = tracker.store.transactions.list()

    ranking = category_ranking(transactions, Config.TOP_CATEGORIES)
    if ranking:
        df_cat = pd.DataFrame([{"Category": r.category, "Spent": r.amount} for r in ranking])
        fig_cat = px.bar(df_cat, x="Spent", y="Category", orientation="h",
                         title="Spending by Category", template="plotly_dark")
        fig_cat.update_yaxes(autorange="reversed")
        st.plotly_chart(fig_cat, use_container_width=True)
    else:
        st.info("No expense data")

    series = monthly_series(transactions, Config.SERIES_MONTHS)
    if series:
        labels = [pd.Timestamp(year=p.year, month=p.month, day=1).strftime("%b %Y") for p in series]
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Bar(x=labels, y=[p.income for p in series], name="Income"))
        fig_ts.add_trace(go.Bar(x=labels, y=[p.expense for p in series], name="Expenses"))
        fig_ts.update_layout(title="Monthly Income vs Expenses", barmode="group", template="plotly_dark")
        st.plotly_chart(fig_ts, use_container_width=True)
    else:
        st.info("No monthly data")

    progress = [goal_progress(g) for g in tracker.store.goals.list()]
    if progress:
        df_goals = pd.DataFrame([{"Goal": p.goal.name, "Progress": p.percentage} for p in progress])
        st.plotly_chart(px.bar(df_goals, x="Goal", y="Progress", title="Goal Progress (%)",
                               template="plotly_dark"), use_container_width=True)

elif menu == "💾 Data":
    st.title("💾 Backup & Restore")

    st.download_button(
        "⬇ Export Data",
        dumps_snapshot(tracker.export_data()),
        file_name=backup_filename(today),
        mime="application/json",
    )

    csv = tx_to_df(tracker.store.transactions.list()).to_csv(index=False)
    st.download_button("⬇ Download Transactions CSV", csv, file_name="transactions.csv", mime="text/csv")

    uploaded = st.file_uploader("Import backup", type=["json"])
    if uploaded is not None:
        st.warning("This will replace all your current data.")
        if st.button("Replace my data"):
            result = tracker.import_data(uploaded.getvalue())
            if not result.ok:
                st.session_state.notifications.append(
                    ("error", "Error importing data. Please check the file format.")
                )
            st.rerun()
