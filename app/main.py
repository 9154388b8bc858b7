import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date
from decimal import Decimal

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from core.aggregate import aggregate, previous_period
from core.budget import compare, NO_BUDGET
from core.charts import category_series, monthly_trend, to_frame
from core.config import TREND_MONTHS, configure_logging, get_seed_path
from core.domain import Category, Period, period_key_of
from core.events import event_bus, EXPENSE_ADDED, EXPENSE_UPDATED, EXPENSE_DELETED, BUDGET_SET
from core.export import export_csv, export_filename
from core.functional import validate_budget_input, validate_expense_input
from core.filters import all_of, by_amount_range, by_category, by_month
from core.i18n import DEFAULT_LOCALE, SUPPORTED_LOCALES, category_label, translations
from core.services import default_service
from core.transforms import (
    add_expense,
    delete_expense,
    expenses_for_owner,
    load_seed,
    update_expense,
    upsert_budget,
)

configure_logging()
st.set_page_config(page_title="Smart Expense", layout="wide")

if "expenses" not in st.session_state:
    seed_expenses, seed_budgets = load_seed(get_seed_path())
    st.session_state.expenses = seed_expenses
    st.session_state.budgets = seed_budgets
if "live_alerts" not in st.session_state:
    st.session_state.live_alerts = []

st.sidebar.markdown("### 👤 Profile")
owner_id = st.sidebar.text_input("User", value=st.session_state.get("owner_id", "demo")) or "demo"
st.session_state["owner_id"] = owner_id
locale = st.sidebar.selectbox("Language", SUPPORTED_LOCALES, index=SUPPORTED_LOCALES.index(DEFAULT_LOCALE))
t = translations(locale)

current_month = period_key_of(date.today())
service = default_service()


def owned_expenses():
    return expenses_for_owner(st.session_state.expenses, owner_id)


def publish_change(name: str, period_key: str):
    budget = next(
        (b for b in st.session_state.budgets if b.owner_id == owner_id and b.period_key == period_key),
        None,
    )
    results = event_bus.publish(name, {
        "expenses": owned_expenses(),
        "budget": budget,
        "period_key": period_key,
        "locale": locale,
    })
    for r in results:
        for alert in r.get("alerts", []):
            st.session_state.live_alerts.append({
                "event": name,
                "message": alert,
                "timestamp": pd.Timestamp.now().strftime("%H:%M:%S"),
            })


def money(value) -> str:
    return f"${float(value):,.2f}"


def expenses_df(records) -> pd.DataFrame:
    rows = [
        {
            "id": e.id,
            "date": e.occurred_on,
            "category": category_label(locale, e.category),
            "amount": float(e.amount),
            "note": e.note,
        }
        for e in sorted(records, key=lambda e: e.occurred_on, reverse=True)
    ]
    return pd.DataFrame(rows, columns=["id", "date", "category", "amount", "note"])


menu = st.sidebar.radio("Menu", [f"🏠 {t['dashboard']}", f"🧾 {t['expenses']}", f"📊 {t['analysis']}"])

if menu.endswith(t["dashboard"]):
    st.title(f"🏠 {t['dashboard']}")
    month = st.text_input("Month (YYYY-MM)", value=current_month)
    rpt = service.monthly_report(owner_id, month, st.session_state.expenses, st.session_state.budgets, locale, TREND_MONTHS)

    problems = [m for v in rpt["validation"] for m in v["messages"]]
    if problems:
        for m in problems:
            st.error(m)
        st.stop()

    res = rpt["result"]
    agg = res["aggregation"]
    budget = res["budget"].to_optional()
    remaining = res["budget_status"].remaining.to_optional()
    state = res["budget_state"]

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric(t["total_spent"], money(agg.total_spent),
                  f"{res['comparison'].total_change:+.1f}% {t['vs_last_period']}", delta_color="inverse")
        if budget is not None:
            st.progress(min(res["budget_status"].ratio, 1.0))
    with k2:
        st.metric(t["remaining_budget"], money(remaining) if remaining is not None else "N/A")
        st.caption(t[state] if state != NO_BUDGET else t["no_budget_set"])
    with k3:
        st.metric(t["monthly_budget"], money(budget.limit) if budget is not None else "N/A")
    with k4:
        st.metric(t["average_daily"], money(agg.average_daily_spend))

    with st.expander(f"🎯 {t['set_budget']}"):
        with st.form("budget_form"):
            limit = st.number_input(t["monthly_budget"], min_value=0.0, step=50.0,
                                    value=float(budget.limit) if budget is not None else 0.0)
            if st.form_submit_button(t["set_budget"]):
                checked = validate_budget_input(owner_id, month, limit)
                if checked.is_left():
                    st.error(checked.get_error()["message"])
                else:
                    st.session_state.budgets = upsert_budget(st.session_state.budgets, owner_id, month, limit)
                    publish_change(BUDGET_SET, month)
                    st.rerun()

    col_chart, col_advice = st.columns([2, 3])
    with col_chart:
        st.subheader(t["expenses_by_category"])
        df_cat = to_frame(res["category_series"])
        if agg.total_spent > 0:
            fig_cat = px.pie(df_cat[df_cat["current"] > 0], values="current", names="label", template="plotly_dark")
            fig_cat.update_layout(height=300, margin=dict(t=10, b=10, l=10, r=10))
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info(t["no_expenses_to_export"])

    with col_advice:
        advice = res["advice"]
        st.subheader(f"⚠️ {t['alerts']}")
        if advice.alerts:
            for a in advice.alerts:
                st.warning(a)
        else:
            st.caption(t["no_alerts"])
        st.subheader(f"💡 {t['recommendations']}")
        for r in advice.recommendations:
            st.success(r)

    st.divider()
    month_expenses = list(filter(by_month(month), owned_expenses()))
    if month_expenses:
        st.dataframe(expenses_df(month_expenses).drop(columns=["id"]), use_container_width=True)
        st.download_button(
            f"⬇ {t['export_csv']}",
            export_csv(month_expenses, locale),
            file_name=export_filename(month),
            mime="text/csv",
        )
    else:
        st.info(t["no_expenses_to_export"])

elif menu.endswith(t["expenses"]):
    st.title(f"🧾 {t['expenses']}")

    st.subheader(f"➕ {t['add_expense']}")
    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            day = st.date_input("Date", value=date.today())
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        with col2:
            category = st.selectbox("Category", [c.value for c in Category],
                                    format_func=lambda c: category_label(locale, c))
            note = st.text_input("Note (optional)", max_chars=100)
        submitted = st.form_submit_button(t["add_expense"])

    if submitted:
        checked = validate_expense_input(
            {"amount": amount, "category": category, "date": day, "note": note}, owner_id
        )
        if checked.is_left():
            st.error(checked.get_error()["message"])
        else:
            st.session_state.expenses, saved = add_expense(st.session_state.expenses, checked.get_or_else(None))
            publish_change(EXPENSE_ADDED, period_key_of(saved.occurred_on))
            st.success("✅ Expense added")

    st.divider()
    col1, col2, col3 = st.columns(3)
    with col1:
        selected_categories = st.multiselect(
            "Category",
            options=[c.value for c in Category],
            default=[],
            key="filter_category",
            format_func=lambda c: category_label(locale, c),
        )
    with col2:
        min_amount = st.number_input("Min amount", min_value=0.0, value=0.0, step=1.0, key="filter_min")
    with col3:
        max_amount = st.number_input("Max amount", min_value=0.0, value=0.0, step=1.0, key="filter_max",
                                     help="0 means no upper limit")

    preds = []
    if selected_categories:
        preds.append(by_category(*selected_categories))
    if min_amount or max_amount:
        high = Decimal(str(max_amount)) if max_amount else Decimal("Infinity")
        preds.append(by_amount_range(Decimal(str(min_amount)), high))
    records = tuple(filter(all_of(*preds), owned_expenses()))
    if records:
        df = expenses_df(records)
        st.dataframe(df.drop(columns=["id"]), use_container_width=True)

        by_id = {e.id: e for e in records}
        labels = {
            e.id: f"{e.occurred_on} · {category_label(locale, e.category)} · {money(e.amount)} {e.note}"
            for e in records
        }
        selected = st.selectbox("Edit or delete", list(labels), format_func=lambda i: labels[i])
        chosen = by_id[selected]
        with st.form("edit_form"):
            new_amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f", value=float(chosen.amount))
            new_note = st.text_input("Note", value=chosen.note, max_chars=100)
            col_save, col_delete = st.columns(2)
            save = col_save.form_submit_button("Save")
            remove = col_delete.form_submit_button("Delete")
        if save:
            checked = validate_expense_input(
                {"amount": new_amount, "category": chosen.category, "date": chosen.occurred_on, "note": new_note},
                owner_id,
            )
            if checked.is_left():
                st.error(checked.get_error()["message"])
            else:
                edited = checked.get_or_else(None)
                st.session_state.expenses = update_expense(
                    st.session_state.expenses, owner_id, chosen.id, amount=edited.amount, note=edited.note
                )
                publish_change(EXPENSE_UPDATED, period_key_of(chosen.occurred_on))
                st.rerun()
        if remove:
            st.session_state.expenses = delete_expense(st.session_state.expenses, owner_id, chosen.id)
            publish_change(EXPENSE_DELETED, period_key_of(chosen.occurred_on))
            st.rerun()
    else:
        st.info(t["no_expenses_to_export"])

    st.subheader(f"⚠️ {t['alerts']}")
    if st.session_state.live_alerts:
        for alert in reversed(st.session_state.live_alerts[-10:]):
            st.warning(f"[{alert['timestamp']}] {alert['message']}")
        if st.button("Clear alerts"):
            st.session_state.live_alerts = []
            st.rerun()
    else:
        st.caption(t["no_alerts"])

else:
    st.title(f"📊 {t['analysis']}")

    today = date.today()
    picked = st.date_input("Date range", value=(today.replace(day=1), today))
    if len(picked) != 2:
        st.stop()
    period = Period(picked[0], picked[1])
    prev = previous_period(period)
    records = owned_expenses()
    current = aggregate(records, period)
    before = aggregate(records, prev)
    delta = compare(current, before)

    c1, c2, c3 = st.columns(3)
    c1.metric(t["total_spent"], money(current.total_spent), f"{delta.total_change:+.1f}% {t['vs_last_period']}",
              delta_color="inverse")
    c2.metric(t["average_daily"], money(current.average_daily_spend),
              f"{delta.average_daily_change:+.1f}% {t['vs_last_period']}", delta_color="inverse")
    c3.metric(t["expenses"], current.count, f"{delta.count_change:+.1f}% {t['vs_last_period']}", delta_color="off")

    df_cmp = to_frame(category_series(current, before, locale))
    fig_cmp = go.Figure()
    fig_cmp.add_trace(go.Bar(x=df_cmp["label"], y=df_cmp["current"], name=t["current_period"]))
    fig_cmp.add_trace(go.Bar(x=df_cmp["label"], y=df_cmp["comparison"], name=t["comparison_period"]))
    fig_cmp.update_layout(barmode="group", template="plotly_dark", title=t["expenses_by_category"])
    st.plotly_chart(fig_cmp, use_container_width=True)

    st.subheader(t["spending_trend"])
    df_trend = to_frame(monthly_trend(records, period_key_of(period.end), TREND_MONTHS, locale))
    fig_trend = px.line(df_trend, x="label", y="total", markers=True, template="plotly_dark")
    fig_trend.update_layout(margin=dict(t=30, b=10, l=10, r=10), xaxis_title=None, yaxis_title=t["total_spent"])
    st.plotly_chart(fig_trend, use_container_width=True)
