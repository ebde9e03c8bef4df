"""Mini README: Persistent record store for lands, farmers, expenses and income.

Structure:
    * RecordCollection - whole-slot load/save plus add, get and delete.
    * EditableCollection - adds ``update`` (lands and farmers).
    * LandLinkedCollection - adds ``get_by_land`` (expenses and crop income).
    * LandRecordStore - repository object owning the backend, the clock, id
      generation and the four collections.

Every mutation reads the entire slot, changes it in memory and writes the
entire slot back. The read-modify-write runs under a per-slot lock so callers
sharing one store inside a process cannot lose updates; several processes
writing the same data directory are not supported.

References between records are stored as given. Deleting a land or farmer
leaves expenses, income and land assignments pointing at it untouched; use
``RelationshipResolver`` to list such orphans.
"""

from __future__ import annotations

import json
import threading
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import ValidationError

from ..configuration import LandtrackSettings
from ..exceptions import LandtrackError, StorageCorrupt, StoreClosed
from ..logging_utils import get_logger
from .backends import JsonDirectoryBackend, KeyValueBackend
from .models import CropIncome, Expense, Farmer, Land, StoredRecord, utc_now

LOGGER = get_logger(__name__)

SCHEMA_VERSION = 1
MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at", "createdAt", "updatedAt"})
MAX_ID_ATTEMPTS = 5

RecordT = TypeVar("RecordT", bound=StoredRecord)


def _new_uuid() -> str:
    return uuid.uuid4().hex


class RecordCollection(Generic[RecordT]):
    """Append/delete access to one persisted slot."""

    def __init__(self, store: "LandRecordStore", slot: str, model: Type[RecordT]) -> None:
        self._store = store
        self.slot = slot
        self.model = model
        self._lock = threading.RLock()

    @property
    def key(self) -> str:
        return f"{self._store.prefix}{self.slot}"

    # -- persistence -----------------------------------------------------

    def _load(self) -> List[RecordT]:
        try:
            raw = self._store.backend_for_io().read(self.key)
        except UnicodeDecodeError as error:
            LOGGER.error("Slot %s is not valid UTF-8: %s", self.key, error)
            raise StorageCorrupt(self.slot, "invalid UTF-8") from error
        if raw is None:
            return []
        return self._decode(raw)

    def _decode(self, raw: str) -> List[RecordT]:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as error:
            LOGGER.error("Slot %s holds invalid JSON: %s", self.key, error)
            raise StorageCorrupt(self.slot, f"invalid JSON ({error.msg})") from error

        if isinstance(payload, list):
            # Unversioned layout; rewritten in the envelope on the next save.
            items = payload
        elif isinstance(payload, dict):
            version = payload.get("schemaVersion")
            if version != SCHEMA_VERSION:
                raise StorageCorrupt(self.slot, f"unsupported schema version {version!r}")
            items = payload.get("records")
            if not isinstance(items, list):
                raise StorageCorrupt(self.slot, "'records' is not a list")
        else:
            raise StorageCorrupt(self.slot, f"expected a list, found {type(payload).__name__}")

        try:
            return [self.model.model_validate(item) for item in items]
        except ValidationError as error:
            LOGGER.error("Slot %s failed validation: %s", self.key, error)
            raise StorageCorrupt(
                self.slot, f"{error.error_count()} invalid field(s) in stored records"
            ) from error

    def _save(self, records: List[RecordT]) -> None:
        envelope = {
            "schemaVersion": SCHEMA_VERSION,
            "records": [record.as_dict() for record in records],
        }
        self._store.backend_for_io().write(self.key, json.dumps(envelope))

    # -- queries ---------------------------------------------------------

    def get_all(self) -> List[RecordT]:
        """Return every record in insertion order."""

        with self._lock:
            records = self._load()
        LOGGER.debug("Loaded %s records from %s", len(records), self.slot)
        return records

    def get(self, record_id: str) -> Optional[RecordT]:
        """Return the record with ``record_id`` or ``None``."""

        for record in self.get_all():
            if record.id == record_id:
                return record
        return None

    # -- mutations -------------------------------------------------------

    def _next_id(self, records: List[RecordT]) -> str:
        taken = {record.id for record in records}
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._store.id_factory()
            if candidate not in taken:
                return candidate
            LOGGER.warning("Generated id %s already used in %s; retrying", candidate, self.slot)
        raise LandtrackError(
            f"Could not generate a unique id for {self.slot}",
            details={"slot": self.slot, "attempts": MAX_ID_ATTEMPTS},
        )

    def add(self, **fields: object) -> RecordT:
        """Create a record from ``fields``, assigning id and both timestamps."""

        managed = MANAGED_FIELDS.intersection(fields)
        if managed:
            raise ValueError(f"Fields {sorted(managed)} are assigned by the store.")
        with self._lock:
            records = self._load()
            now = self._store.now()
            record = self.model.model_validate(
                {**fields, "id": self._next_id(records), "created_at": now, "updated_at": now}
            )
            records.append(record)
            self._save(records)
        LOGGER.info("Added %s record %s", self.slot, record.id)
        return record

    def delete(self, record_id: str) -> bool:
        """Remove the record with ``record_id``; ``False`` when none matched."""

        with self._lock:
            records = self._load()
            remaining = [record for record in records if record.id != record_id]
            if len(remaining) == len(records):
                LOGGER.debug("Delete on %s ignored; %s not found", self.slot, record_id)
                return False
            self._save(remaining)
        LOGGER.info("Deleted %s record %s", self.slot, record_id)
        return True


class EditableCollection(RecordCollection[RecordT]):
    """Collection whose records may be edited after creation."""

    def update(self, record_id: str, **changes: object) -> Optional[RecordT]:
        """Merge ``changes`` into the record and refresh ``updated_at``.

        Returns ``None`` when no record has ``record_id``. Changing the id or
        a timestamp, or naming a field the record does not have, raises
        ``ValueError``.
        """

        managed = MANAGED_FIELDS.intersection(changes)
        if managed:
            raise ValueError(f"Fields {sorted(managed)} cannot be updated.")
        unknown = set(changes) - set(self.model.model_fields)
        if unknown:
            raise ValueError(f"Unknown {self.slot} field(s): {sorted(unknown)}")

        with self._lock:
            records = self._load()
            for index, current in enumerate(records):
                if current.id == record_id:
                    break
            else:
                LOGGER.debug("Update on %s ignored; %s not found", self.slot, record_id)
                return None

            now = self._store.now()
            if now <= current.updated_at:
                now = current.updated_at + timedelta(microseconds=1)
            updated = self.model.model_validate(
                {**current.model_dump(), **changes, "updated_at": now}
            )
            records[index] = updated
            self._save(records)
        LOGGER.info("Updated %s record %s (%s)", self.slot, record_id, ", ".join(sorted(changes)))
        return updated


class LandLinkedCollection(RecordCollection[RecordT]):
    """Collection of records attached to a land through ``land_id``."""

    def get_by_land(self, land_id: str) -> List[RecordT]:
        """Return the records whose ``land_id`` equals ``land_id``."""

        return [record for record in self.get_all() if record.land_id == land_id]


class LandRecordStore:
    """Repository for the four LandTrack collections.

    The store is created closed. Call ``open()`` at startup and ``close()`` at
    shutdown, or use it as a context manager.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        prefix: str = "landtrack_",
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.backend = backend
        self.prefix = prefix
        self._clock = clock or utc_now
        self.id_factory = id_factory or _new_uuid
        self._is_open = False

        self.lands: EditableCollection[Land] = EditableCollection(self, "lands", Land)
        self.farmers: EditableCollection[Farmer] = EditableCollection(self, "farmers", Farmer)
        self.expenses: LandLinkedCollection[Expense] = LandLinkedCollection(
            self, "expenses", Expense
        )
        self.crop_incomes: LandLinkedCollection[CropIncome] = LandLinkedCollection(
            self, "cropIncomes", CropIncome
        )

    @classmethod
    def from_settings(cls, settings: LandtrackSettings) -> "LandRecordStore":
        """Build a store writing JSON slots into the configured data directory."""

        return cls(
            JsonDirectoryBackend(settings.data_directory),
            prefix=settings.storage_prefix,
        )

    # -- lifecycle -------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> "LandRecordStore":
        if not self._is_open:
            self.backend.open()
            self._is_open = True
            LOGGER.info(
                "Record store opened with %s (slots present: %s)",
                type(self.backend).__name__,
                ", ".join(self.backend.keys()) or "none",
            )
        return self

    def close(self) -> None:
        if self._is_open:
            self.backend.close()
            self._is_open = False
            LOGGER.info("Record store closed")

    def __enter__(self) -> "LandRecordStore":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def backend_for_io(self) -> KeyValueBackend:
        """Return the backend, refusing access while the store is closed."""

        if not self._is_open:
            raise StoreClosed("Record store is not open")
        return self.backend

    def now(self) -> datetime:
        return self._clock()

    # -- data-access contract used by UI collaborators --------------------

    def get_lands(self) -> List[Land]:
        return self.lands.get_all()

    def get_farmers(self) -> List[Farmer]:
        return self.farmers.get_all()

    def get_expenses(self) -> List[Expense]:
        return self.expenses.get_all()

    def get_crop_incomes(self) -> List[CropIncome]:
        return self.crop_incomes.get_all()

    def add_land(self, **fields: object) -> Land:
        return self.lands.add(**fields)

    def add_farmer(self, **fields: object) -> Farmer:
        return self.farmers.add(**fields)

    def add_expense(self, **fields: object) -> Expense:
        return self.expenses.add(**fields)

    def add_crop_income(self, **fields: object) -> CropIncome:
        return self.crop_incomes.add(**fields)

    def update_land(self, land_id: str, **changes: object) -> Optional[Land]:
        return self.lands.update(land_id, **changes)

    def update_farmer(self, farmer_id: str, **changes: object) -> Optional[Farmer]:
        return self.farmers.update(farmer_id, **changes)

    def delete_land(self, land_id: str) -> bool:
        return self.lands.delete(land_id)

    def delete_farmer(self, farmer_id: str) -> bool:
        return self.farmers.delete(farmer_id)

    def delete_expense(self, expense_id: str) -> bool:
        return self.expenses.delete(expense_id)

    def delete_crop_income(self, income_id: str) -> bool:
        return self.crop_incomes.delete(income_id)

    def get_expenses_by_land(self, land_id: str) -> List[Expense]:
        return self.expenses.get_by_land(land_id)

    def get_crop_incomes_by_land(self, land_id: str) -> List[CropIncome]:
        return self.crop_incomes.get_by_land(land_id)

    def slot_sizes(self) -> Dict[str, int]:
        """Record counts per slot, handy for startup logging."""

        return {
            collection.slot: len(collection.get_all())
            for collection in (self.lands, self.farmers, self.expenses, self.crop_incomes)
        }
