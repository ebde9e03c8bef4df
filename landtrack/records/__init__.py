"""Mini README: Record storage package for LandTrack.

``models`` defines the persisted entities, ``backends`` the durable slot
storage and ``store`` the repository object that UI collaborators and the
derived-view services share.
"""

from .backends import JsonDirectoryBackend, KeyValueBackend, MemoryBackend
from .models import (
    FARMING_CATEGORIES,
    CropIncome,
    Expense,
    ExpenseCategory,
    Farmer,
    Land,
    utc_now,
)
from .store import SCHEMA_VERSION, LandRecordStore

__all__ = [
    "FARMING_CATEGORIES",
    "SCHEMA_VERSION",
    "CropIncome",
    "Expense",
    "ExpenseCategory",
    "Farmer",
    "JsonDirectoryBackend",
    "KeyValueBackend",
    "Land",
    "LandRecordStore",
    "MemoryBackend",
    "utc_now",
]
