"""
Streamlit Frontend for PennyWise

The page the user sees: sign in, the running balance, a form to add
transactions, expense and income lists with delete buttons, and a
spending report.

DESIGN PRINCIPLES:
1. The page only renders; every decision lives in the flows
2. Every outcome shows up as a toast
3. Lists are hidden while the store is loading
4. Nothing is shown until the identity provider has answered

Streamlit re-runs this script on every interaction, so the components
live in ``st.session_state`` (one set per browser session) and queued
notifications are drained as toasts at the top of each run.
"""

import asyncio
from datetime import date, datetime, time, timezone

import streamlit as st

from pennywise.audit import configure_logging, create_correlation_id
from pennywise.config import get_settings
from pennywise.models.transaction import NewTransaction, Transaction, TransactionCategory
from pennywise.orchestrator import SessionFlow, TransactionFlow, create_app_components
from pennywise.services.notifications import Navigator, NotificationQueue
from pennywise.views import build_dashboard, format_amount


st.set_page_config(
    page_title="PennyWise",
    page_icon="🐷",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .balance-positive {
        font-size: 3em;
        font-weight: bold;
        color: #22c55e;
        text-align: center;
    }
    .balance-negative {
        font-size: 3em;
        font-weight: bold;
        color: #ef4444;
        text-align: center;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class SessionStateNavigator(Navigator):
    """Routes are just a key in the Streamlit session state."""

    def go_to(self, path: str) -> None:
        st.session_state.route = path


def get_components() -> tuple[TransactionFlow, SessionFlow, NotificationQueue]:
    """Get or create this browser session's components."""
    if "components" not in st.session_state:
        notifications = NotificationQueue()
        transaction_flow, session_flow, _ = create_app_components(
            use_storage=True,
            notifier=notifications,
            navigator=SessionStateNavigator(),
        )
        st.session_state.components = (transaction_flow, session_flow, notifications)
        st.session_state.route = "/"
    return st.session_state.components


def show_notifications(notifications: NotificationQueue) -> None:
    for notification in notifications.drain():
        icon = "⚠️" if notification.is_error else "✅"
        st.toast(f"**{notification.title}** {notification.description}", icon=icon)


def main():
    """Main application entry point."""
    configure_logging(get_settings().app.log_level)
    transaction_flow, session_flow, notifications = get_components()
    session = transaction_flow.session

    if session.auth_loading:
        st.markdown("Loading...")
        return

    run_async(transaction_flow.sync(correlation_id=create_correlation_id()))
    show_notifications(notifications)

    render_header(session_flow)

    on_login_route = st.session_state.route == get_settings().app.login_path
    if session.current_user is None or on_login_route:
        render_login_page(session_flow)
    else:
        render_home_page(transaction_flow)

    show_notifications(notifications)


def render_header(session_flow: SessionFlow):
    st.title("🐷 PennyWise")
    st.caption("Your personal finance assistant")

    user = session_flow.session.current_user
    if user is not None:
        col1, col2 = st.columns([4, 1])
        with col1:
            st.markdown(f"Welcome, **{user.email}**")
        with col2:
            if st.button("Sign out", use_container_width=True):
                if run_async(session_flow.logout()):
                    st.rerun()


def render_login_page(session_flow: SessionFlow):
    """Sign-in form shown to anonymous visitors."""
    st.subheader("Welcome to PennyWise!")
    st.markdown("Please sign in to start managing your finances.")

    with st.form("login"):
        email = st.text_input("Email", placeholder="you@example.com")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        if run_async(session_flow.login(email)) is not None:
            st.session_state.route = "/"
            st.rerun()


def render_home_page(transaction_flow: TransactionFlow):
    """Balance, add form, lists and report for the signed-in user."""
    store = transaction_flow.store
    symbol = get_settings().app.currency_symbol
    dashboard = build_dashboard(store.transactions)

    st.markdown("### Current balance")
    css_class = "balance-positive" if dashboard.is_positive else "balance-negative"
    st.markdown(
        f'<p class="{css_class}">{format_amount(dashboard.balance, symbol)}</p>',
        unsafe_allow_html=True,
    )

    st.markdown("---")
    col_form, col_lists = st.columns([1, 2])

    with col_form:
        render_add_form(transaction_flow)

    with col_lists:
        st.subheader("Expenses")
        if store.loading:
            st.markdown("Loading expenses...")
        else:
            render_transaction_list(transaction_flow, dashboard.expenses, "expenses", symbol)

        st.subheader("Income")
        if store.loading:
            st.markdown("Loading income...")
        else:
            render_transaction_list(transaction_flow, dashboard.income, "income", symbol)

    st.markdown("---")
    st.subheader("Spending report")
    if store.loading:
        st.markdown("Loading report...")
    elif not dashboard.report:
        st.info("No expenses yet.")
    else:
        st.bar_chart(
            {row.category.value.title(): row.total for row in dashboard.report}
        )
        for row in dashboard.report:
            st.markdown(
                f"- **{row.category.value.title()}**: "
                f"{format_amount(row.total, symbol)} ({row.share:.0%}, {row.count} items)"
            )


def render_add_form(transaction_flow: TransactionFlow):
    st.subheader("Add transaction")

    with st.form("add_transaction", clear_on_submit=True):
        kind = st.radio("Type", ["Expense", "Income"], horizontal=True)
        amount = st.number_input(
            "Amount",
            min_value=0.0,
            step=0.01,
            format="%.2f",
        )
        description = st.text_input("Description", max_chars=200)
        category = st.selectbox(
            "Category",
            options=list(TransactionCategory),
            format_func=lambda c: c.value.title(),
        )
        when = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        if amount <= 0:
            st.error("Please enter an amount greater than zero")
            return
        signed_amount = -amount if kind == "Expense" else amount
        payload = NewTransaction(
            amount=signed_amount,
            date=datetime.combine(when, time.min, tzinfo=timezone.utc),
            description=description,
            category=category,
        )
        if run_async(transaction_flow.add_transaction(payload)) is not None:
            st.rerun()


def render_transaction_list(
    transaction_flow: TransactionFlow,
    transactions: list[Transaction],
    kind: str,
    symbol: str,
):
    if not transactions:
        st.info(f"No {kind} yet.")
        return

    for transaction in transactions:
        col1, col2, col3, col4 = st.columns([2, 3, 2, 1])
        with col1:
            st.markdown(transaction.date.strftime("%d %b %Y"))
        with col2:
            label = transaction.description or transaction.category.value.title()
            st.markdown(label)
        with col3:
            st.markdown(format_amount(transaction.amount, symbol))
        with col4:
            if st.button("🗑️", key=f"delete-{kind}-{transaction.id}"):
                if run_async(transaction_flow.delete_transaction(transaction.id)):
                    st.rerun()


if __name__ == "__main__":
    main()
