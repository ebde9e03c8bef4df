"""Mini README: Profit settlement between landlord and farmer.

The ``calculator`` module exposes ``SettlementCalculator`` and the typed
``SettlementResult`` that display and printing code read from.
"""

from .calculator import (
    FARMER_EXPENSE_RATIO,
    FARMER_RATIO,
    LANDLORD_RATIO,
    SettlementCalculator,
    SettlementResult,
    season_label,
)

__all__ = [
    "FARMER_EXPENSE_RATIO",
    "FARMER_RATIO",
    "LANDLORD_RATIO",
    "SettlementCalculator",
    "SettlementResult",
    "season_label",
]
