"""Mini README: Record models persisted by the LandTrack store.

Structure:
    * ExpenseCategory - enum of the five expense buckets.
    * StoredRecord - shared base carrying id and the two timestamps.
    * Land, Farmer, Expense, CropIncome - the four persisted entity kinds.

Attributes are snake_case in Python and camelCase on disk (``farmerId``,
``createdAt`` ...) through an alias generator, so persisted slots keep the
layout the UI collaborators already read. References between records
(``farmer_id``, ``land_id``) are plain strings and are never checked on
write.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> dt.datetime:
    """Current time as a timezone-aware UTC datetime."""

    return dt.datetime.now(dt.timezone.utc)


class ExpenseCategory(str, Enum):
    """Enumerate the supported expense buckets."""

    SEED = "seed"
    DIESEL = "diesel"
    MACHINERY = "machinery"
    OTHER = "other"
    LEND = "lend"


FARMING_CATEGORIES = (
    ExpenseCategory.SEED,
    ExpenseCategory.DIESEL,
    ExpenseCategory.MACHINERY,
    ExpenseCategory.OTHER,
)


class StoredRecord(BaseModel):
    """Fields every persisted record carries."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str
    created_at: dt.datetime
    updated_at: dt.datetime

    def as_dict(self) -> dict:
        """Export the record with JSON-friendly values and persisted key names."""

        return self.model_dump(mode="json", by_alias=True)


class Land(StoredRecord):
    """A leased parcel, optionally assigned to one farmer."""

    name: str
    location: str = ""
    area: float
    farmer_id: Optional[str] = None


class Farmer(StoredRecord):
    """A tenant working one or more lands."""

    name: str
    cnic: str = ""
    phone: str = ""


class Expense(StoredRecord):
    """A cost recorded against a land."""

    land_id: str
    category: ExpenseCategory
    amount: float
    date: dt.date
    note: str = ""


class CropIncome(StoredRecord):
    """Revenue recorded for a land in a given season."""

    land_id: str
    amount: float
    season: str
    date: dt.datetime
