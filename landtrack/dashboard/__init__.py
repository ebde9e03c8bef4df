"""Mini README: Dashboard aggregation package.

The ``aggregation`` module turns the raw record store into the totals,
per-land comparison and expense distribution the dashboard displays.
"""

from .aggregation import (
    AggregationEngine,
    DashboardStats,
    DashboardSummary,
    LandPerformance,
    category_totals,
    present_category_totals,
)

__all__ = [
    "AggregationEngine",
    "DashboardStats",
    "DashboardSummary",
    "LandPerformance",
    "category_totals",
    "present_category_totals",
]
