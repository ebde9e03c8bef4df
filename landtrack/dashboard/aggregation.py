"""Mini README: Dashboard aggregation over the LandTrack record store.

Structure:
    * category_totals / present_category_totals - per-category expense sums.
    * DashboardStats - headline counts and money totals.
    * LandPerformance - income, expenses and profit for one land.
    * DashboardSummary - bundle of the three dashboard views.
    * AggregationEngine - computes the views from a fresh store snapshot.

Nothing here is cached or persisted; every call reads the store again so the
figures always match its current contents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from ..logging_utils import get_logger
from ..records import Expense, ExpenseCategory, LandRecordStore

LOGGER = get_logger(__name__)


def category_totals(expenses: Iterable[Expense]) -> Dict[ExpenseCategory, float]:
    """Sum amounts per category, reporting all five categories (zero if unused)."""

    totals: Dict[ExpenseCategory, float] = {category: 0.0 for category in ExpenseCategory}
    for expense in expenses:
        totals[expense.category] += expense.amount
    return totals


def present_category_totals(expenses: Iterable[Expense]) -> Dict[ExpenseCategory, float]:
    """Sum amounts per category, keeping only categories that have entries."""

    expenses = list(expenses)
    present = {expense.category for expense in expenses}
    totals = category_totals(expenses)
    return {category: totals[category] for category in ExpenseCategory if category in present}


@dataclass(slots=True)
class DashboardStats:
    """Headline figures shown at the top of the dashboard."""

    total_lands: int
    total_farmers: int
    total_expenses: float
    total_income: float


@dataclass(slots=True)
class LandPerformance:
    """Income against expenses for a single land."""

    land_id: str
    name: str
    expenses: float
    income: float

    @property
    def profit(self) -> float:
        return self.income - self.expenses


@dataclass(slots=True)
class DashboardSummary:
    """All dashboard views computed from one snapshot."""

    stats: DashboardStats
    lands: List[LandPerformance] = field(default_factory=list)
    categories: Dict[ExpenseCategory, float] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        """Export the summary with JSON-friendly keys."""

        return {
            "stats": {
                "total_lands": self.stats.total_lands,
                "total_farmers": self.stats.total_farmers,
                "total_expenses": self.stats.total_expenses,
                "total_income": self.stats.total_income,
            },
            "lands": [
                {
                    "land_id": entry.land_id,
                    "name": entry.name,
                    "expenses": entry.expenses,
                    "income": entry.income,
                    "profit": entry.profit,
                }
                for entry in self.lands
            ],
            "categories": [
                {"category": category.value, "amount": amount}
                for category, amount in self.categories.items()
            ],
        }


class AggregationEngine:
    """Derive dashboard statistics from the record store."""

    def __init__(self, store: LandRecordStore) -> None:
        self._store = store

    def dashboard_stats(self) -> DashboardStats:
        """Count lands and farmers and total every expense and income entry."""

        return DashboardStats(
            total_lands=len(self._store.get_lands()),
            total_farmers=len(self._store.get_farmers()),
            total_expenses=sum((expense.amount for expense in self._store.get_expenses()), 0.0),
            total_income=sum((income.amount for income in self._store.get_crop_incomes()), 0.0),
        )

    def land_performance(self) -> List[LandPerformance]:
        """Return one income/expense/profit row per land, in land order."""

        expenses = self._store.get_expenses()
        incomes = self._store.get_crop_incomes()
        rows: List[LandPerformance] = []
        for land in self._store.get_lands():
            rows.append(
                LandPerformance(
                    land_id=land.id,
                    name=land.name,
                    expenses=sum((e.amount for e in expenses if e.land_id == land.id), 0.0),
                    income=sum((i.amount for i in incomes if i.land_id == land.id), 0.0),
                )
            )
        return rows

    def category_breakdown(self) -> Dict[ExpenseCategory, float]:
        """Expense distribution across categories that have entries."""

        return present_category_totals(self._store.get_expenses())

    def summary(self) -> DashboardSummary:
        """Compute every dashboard view at once."""

        summary = DashboardSummary(
            stats=self.dashboard_stats(),
            lands=self.land_performance(),
            categories=self.category_breakdown(),
        )
        LOGGER.debug(
            "Dashboard -> lands: %s farmers: %s expenses: %.2f income: %.2f",
            summary.stats.total_lands,
            summary.stats.total_farmers,
            summary.stats.total_expenses,
            summary.stats.total_income,
        )
        return summary
