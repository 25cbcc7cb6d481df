"""
Derived View Models

Pure functions over the store's transactions. Nothing here does I/O or
keeps state; the UI recomputes them on every render.

Zero-amount transactions count toward the balance but appear in
neither the income nor the expense view.
"""

import math
from collections import defaultdict
from typing import Any

from pydantic import BaseModel, Field

from pennywise.models.transaction import CategorySpending, Transaction


def calculate_balance(transactions: Any) -> float:
    """
    Sum of all amounts.

    Uses math.fsum so the result doesn't depend on ordering.
    Anything that isn't a list or tuple yields 0.
    """
    if not isinstance(transactions, (list, tuple)):
        return 0.0
    return math.fsum(float(t.amount) for t in transactions)


def income_transactions(transactions: list[Transaction]) -> list[Transaction]:
    """Transactions with a strictly positive amount, in store order."""
    return [t for t in transactions if t.amount > 0]


def expense_transactions(transactions: list[Transaction]) -> list[Transaction]:
    """Transactions with a strictly negative amount, in store order."""
    return [t for t in transactions if t.amount < 0]


def spending_report(expenses: list[Transaction]) -> list[CategorySpending]:
    """
    Spending per category, largest first.

    Totals are expense magnitudes (positive numbers). Non-expense entries
    passed in by mistake are ignored.
    """
    totals: dict = defaultdict(list)
    for t in expenses:
        if t.amount < 0:
            totals[t.category].append(-t.amount)

    grand_total = math.fsum(math.fsum(v) for v in totals.values())
    if grand_total <= 0:
        return []

    report = [
        CategorySpending(
            category=category,
            total=math.fsum(amounts),
            count=len(amounts),
            share=min(math.fsum(amounts) / grand_total, 1.0),
        )
        for category, amounts in totals.items()
    ]
    report.sort(key=lambda row: (-row.total, row.category.value))
    return report


def format_amount(value: float, symbol: str = "₴") -> str:
    """Two-decimal display, sign before the symbol: ``-₴30.00``."""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


class DashboardView(BaseModel):
    """Everything the home page renders, computed in one pass."""

    balance: float
    income: list[Transaction] = Field(default_factory=list)
    expenses: list[Transaction] = Field(default_factory=list)
    report: list[CategorySpending] = Field(default_factory=list)

    @property
    def is_positive(self) -> bool:
        return self.balance >= 0


def build_dashboard(transactions: list[Transaction]) -> DashboardView:
    expenses = expense_transactions(transactions)
    return DashboardView(
        balance=calculate_balance(transactions),
        income=income_transactions(transactions),
        expenses=expenses,
        report=spending_report(expenses),
    )
