"""Mini README: Landlord and farmer profit settlement for one land.

Structure:
    * LANDLORD_RATIO / FARMER_RATIO / FARMER_EXPENSE_RATIO - sharing constants.
    * SettlementResult - every intermediate figure of a settlement run.
    * SettlementCalculator - resolves the land, computes the distribution and
      records the entered crop income.

Net profit (income minus all expenses, lend included) is split 75/25. The
farmer's quarter is then reduced by a quarter of the farming expenses (seed,
diesel, machinery, other) and by the whole lend amount, which was money
advanced to the farmer. A negative farmer net means the farmer owes the
landlord that amount. Figures are plain floats with no rounding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..dashboard import present_category_totals
from ..exceptions import NotFound
from ..logging_utils import get_logger
from ..records import (
    FARMING_CATEGORIES,
    CropIncome,
    ExpenseCategory,
    Farmer,
    Land,
    LandRecordStore,
)
from ..relationships import RelationshipResolver

LOGGER = get_logger(__name__)

LANDLORD_RATIO = 0.75
FARMER_RATIO = 0.25
FARMER_EXPENSE_RATIO = 0.25


def season_label(moment: datetime) -> str:
    """Season label such as ``2024-5`` (month is not zero padded)."""

    return f"{moment.year}-{moment.month}"


@dataclass(slots=True)
class SettlementResult:
    """Outcome of one settlement run, ready for display or printing."""

    land: Land
    farmer: Optional[Farmer]
    total_income: float
    farming_expenses: float
    lend_amount: float
    total_expenses: float
    net_profit: float
    landlord_share: float
    farmer_gross_share: float
    farmer_expense_share: float
    farmer_lend_deduction: float
    total_farmer_deductions: float
    farmer_net_profit: float
    expenses_by_category: Dict[ExpenseCategory, float]
    calculated_at: datetime
    crop_income: Optional[CropIncome] = field(default=None)

    @property
    def farmer_owes(self) -> float:
        """Amount the farmer must pay back; zero when the farmer nets a profit."""

        return abs(self.farmer_net_profit) if self.farmer_net_profit < 0 else 0.0

    def as_dict(self) -> Dict[str, Any]:
        """Export the settlement with JSON-friendly values."""

        return {
            "land": self.land.as_dict(),
            "farmer": self.farmer.as_dict() if self.farmer else None,
            "total_income": self.total_income,
            "farming_expenses": self.farming_expenses,
            "lend_amount": self.lend_amount,
            "total_expenses": self.total_expenses,
            "net_profit": self.net_profit,
            "landlord_share": self.landlord_share,
            "farmer_gross_share": self.farmer_gross_share,
            "farmer_expense_share": self.farmer_expense_share,
            "farmer_lend_deduction": self.farmer_lend_deduction,
            "total_farmer_deductions": self.total_farmer_deductions,
            "farmer_net_profit": self.farmer_net_profit,
            "farmer_owes": self.farmer_owes,
            "expenses_by_category": {
                category.value: amount for category, amount in self.expenses_by_category.items()
            },
            "calculated_at": self.calculated_at.isoformat(),
            "crop_income_id": self.crop_income.id if self.crop_income else None,
        }


def _coerce_income(value: object) -> float:
    """Validate the entered crop income as a finite, non-negative number."""

    if isinstance(value, bool):
        raise ValueError("Crop income must be a number.")
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as error:
        raise ValueError(f"Crop income must be a number, got {value!r}") from error
    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f"Crop income must be a non-negative amount, got {value!r}")
    return amount


class SettlementCalculator:
    """Compute profit distributions and log the crop income they were based on."""

    def __init__(
        self, store: LandRecordStore, resolver: Optional[RelationshipResolver] = None
    ) -> None:
        self._store = store
        self._resolver = resolver or RelationshipResolver(store)

    def calculate_settlement(self, land_id: str, crop_income: object) -> SettlementResult:
        """Settle ``land_id`` against ``crop_income`` and record the income.

        Raises:
            ValueError: ``crop_income`` is negative, not finite or not a number
            NotFound: ``land_id`` does not resolve to a land
        """

        total_income = _coerce_income(crop_income)
        land = self._resolver.find_land(land_id)
        if land is None:
            LOGGER.warning("Settlement requested for unknown land %s", land_id)
            raise NotFound("Land", land_id)
        farmer = self._resolver.farmer_for_land(land)

        expenses = self._store.get_expenses_by_land(land.id)
        by_category = present_category_totals(expenses)

        farming_expenses = sum(
            (by_category.get(category, 0.0) for category in FARMING_CATEGORIES), 0.0
        )
        lend_amount = by_category.get(ExpenseCategory.LEND, 0.0)
        total_expenses = farming_expenses + lend_amount
        net_profit = total_income - total_expenses

        landlord_share = net_profit * LANDLORD_RATIO
        farmer_gross_share = net_profit * FARMER_RATIO
        farmer_expense_share = farming_expenses * FARMER_EXPENSE_RATIO
        farmer_lend_deduction = lend_amount
        total_farmer_deductions = farmer_expense_share + farmer_lend_deduction
        farmer_net_profit = farmer_gross_share - total_farmer_deductions

        calculated_at = self._store.now()
        recorded = self._store.add_crop_income(
            land_id=land.id,
            amount=total_income,
            season=season_label(calculated_at),
            date=calculated_at,
        )

        LOGGER.info(
            "Settled land %s: income=%.2f expenses=%.2f net=%.2f farmer_net=%.2f",
            land.id,
            total_income,
            total_expenses,
            net_profit,
            farmer_net_profit,
        )
        return SettlementResult(
            land=land,
            farmer=farmer,
            total_income=total_income,
            farming_expenses=farming_expenses,
            lend_amount=lend_amount,
            total_expenses=total_expenses,
            net_profit=net_profit,
            landlord_share=landlord_share,
            farmer_gross_share=farmer_gross_share,
            farmer_expense_share=farmer_expense_share,
            farmer_lend_deduction=farmer_lend_deduction,
            total_farmer_deductions=total_farmer_deductions,
            farmer_net_profit=farmer_net_profit,
            expenses_by_category=by_category,
            calculated_at=calculated_at,
            crop_income=recorded,
        )
