"""Derived view models package."""

from pennywise.views.summary import (
    DashboardView,
    build_dashboard,
    calculate_balance,
    expense_transactions,
    format_amount,
    income_transactions,
    spending_report,
)

__all__ = [
    "DashboardView",
    "build_dashboard",
    "calculate_balance",
    "expense_transactions",
    "format_amount",
    "income_transactions",
    "spending_report",
]
