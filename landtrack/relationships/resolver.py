"""Mini README: Foreign-key lookups between LandTrack records.

Structure:
    * find_by_id - first record in a sequence with a matching id.
    * RelationshipResolver - joins lands to farmers and expenses or income to
      lands, and lists records whose reference no longer resolves.

The resolver holds no state of its own and never writes. Lookups return
``None`` for unknown ids instead of raising.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from ..logging_utils import get_logger
from ..records import CropIncome, Expense, Farmer, Land, LandRecordStore
from ..records.models import StoredRecord

LOGGER = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=StoredRecord)

UNKNOWN_LAND_LABEL = "Unknown"


def find_by_id(records: Iterable[RecordT], record_id: Optional[str]) -> Optional[RecordT]:
    """Return the first record whose id equals ``record_id``."""

    if record_id is None:
        return None
    for record in records:
        if record.id == record_id:
            return record
    return None


class RelationshipResolver:
    """Resolve references against the current store contents."""

    def __init__(self, store: LandRecordStore) -> None:
        self._store = store

    def find_land(self, land_id: Optional[str]) -> Optional[Land]:
        return self._store.lands.get(land_id) if land_id is not None else None

    def find_farmer(self, farmer_id: Optional[str]) -> Optional[Farmer]:
        return self._store.farmers.get(farmer_id) if farmer_id is not None else None

    def farmer_for_land(
        self, land: Land, farmers: Optional[Sequence[Farmer]] = None
    ) -> Optional[Farmer]:
        """Return the farmer assigned to ``land``, if any and if it still exists."""

        if land.farmer_id is None:
            return None
        if farmers is None:
            farmers = self._store.get_farmers()
        farmer = find_by_id(farmers, land.farmer_id)
        if farmer is None:
            LOGGER.debug("Land %s references missing farmer %s", land.id, land.farmer_id)
        return farmer

    def land_name_for(
        self,
        record: Expense | CropIncome,
        lands: Optional[Sequence[Land]] = None,
        *,
        default: str = UNKNOWN_LAND_LABEL,
    ) -> str:
        """Label an expense or income entry with its land's name."""

        if lands is None:
            lands = self._store.get_lands()
        land = find_by_id(lands, record.land_id)
        return land.name if land else default

    def lands_with_farmers(self) -> List[Tuple[Land, Optional[Farmer]]]:
        """Pair every land with its resolved farmer for listings."""

        farmers = self._store.get_farmers()
        return [(land, self.farmer_for_land(land, farmers)) for land in self._store.get_lands()]

    def orphaned_expenses(self) -> List[Expense]:
        """Expenses whose land has been deleted or never existed."""

        land_ids = {land.id for land in self._store.get_lands()}
        return [expense for expense in self._store.get_expenses() if expense.land_id not in land_ids]

    def orphaned_crop_incomes(self) -> List[CropIncome]:
        """Crop income entries whose land no longer resolves."""

        land_ids = {land.id for land in self._store.get_lands()}
        return [
            income for income in self._store.get_crop_incomes() if income.land_id not in land_ids
        ]

    def lands_with_missing_farmer(self) -> List[Land]:
        """Lands assigned to a farmer id that does not resolve."""

        farmer_ids = {farmer.id for farmer in self._store.get_farmers()}
        return [
            land
            for land in self._store.get_lands()
            if land.farmer_id is not None and land.farmer_id not in farmer_ids
        ]
