"""Mini README: Tests for the persistent record store.

Covers id and timestamp assignment, update/delete sentinels, whole-slot
persistence in the versioned envelope, reading the unversioned layout and
the StorageCorrupt failures raised for malformed slots.
"""

from __future__ import annotations

import json
import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from landtrack.exceptions import StorageCorrupt, StoreClosed
from landtrack.records import (
    SCHEMA_VERSION,
    ExpenseCategory,
    JsonDirectoryBackend,
    LandRecordStore,
    MemoryBackend,
)

from conftest import StepClock


def test_add_assigns_unique_id_and_equal_timestamps(store: LandRecordStore) -> None:
    """Adding grows the collection by one with store-managed fields filled in."""

    first = store.add_land(name="North Field", location="Okara", area=12.5)
    before = store.get_lands()
    second = store.add_land(name="Canal Plot", location="Sahiwal", area=4.0)
    after = store.get_lands()

    assert len(after) == len(before) + 1
    assert second.id != first.id
    assert second.created_at == second.updated_at
    assert second.farmer_id is None
    assert [land.id for land in after] == [first.id, second.id]


def test_add_rejects_store_managed_fields(store: LandRecordStore) -> None:
    with pytest.raises(ValueError):
        store.add_farmer(id="custom", name="Akram", cnic="35202-1", phone="0300")
    assert store.get_farmers() == []


def test_add_retries_when_generated_id_collides(backend: MemoryBackend, clock: StepClock) -> None:
    """A duplicate id from the factory is regenerated before insertion."""

    ids = iter(["a1", "a1", "b2"])
    with LandRecordStore(backend, clock=clock, id_factory=lambda: next(ids)) as store:
        first = store.add_farmer(name="Akram", cnic="1", phone="1")
        second = store.add_farmer(name="Bashir", cnic="2", phone="2")

    assert (first.id, second.id) == ("a1", "b2")


def test_delete_reports_whether_a_record_was_removed(store: LandRecordStore) -> None:
    land = store.add_land(name="North Field", location="Okara", area=12.5)
    expense = store.add_expense(
        land_id=land.id, category="seed", amount=1000, date=date(2024, 4, 2), note="wheat"
    )

    assert store.delete_expense("missing") is False
    assert len(store.get_expenses()) == 1
    assert store.delete_expense(expense.id) is True
    assert store.get_expenses() == []


def test_update_merges_fields_and_advances_updated_at(backend: MemoryBackend) -> None:
    """updated_at moves strictly forward even when the clock has not ticked."""

    frozen = StepClock(datetime(2024, 5, 1, tzinfo=timezone.utc), step=timedelta(0))
    with LandRecordStore(backend, clock=frozen) as store:
        land = store.add_land(name="North Field", location="Okara", area=12.5)
        farmer = store.add_farmer(name="Akram", cnic="35202-1234567-1", phone="0300-1234567")

        updated = store.update_land(land.id, farmer_id=farmer.id, area=13)

        assert updated is not None
        assert updated.farmer_id == farmer.id
        assert updated.area == pytest.approx(13.0)
        assert updated.name == "North Field"
        assert updated.created_at == land.created_at
        assert updated.updated_at > land.updated_at
        assert store.get_lands() == [updated]


def test_update_missing_id_returns_none(store: LandRecordStore) -> None:
    farmer = store.add_farmer(name="Akram", cnic="1", phone="1")

    assert store.update_farmer("missing", phone="0311") is None
    assert store.get_farmers() == [farmer]


def test_update_refuses_managed_or_unknown_fields(store: LandRecordStore) -> None:
    land = store.add_land(name="North Field", location="Okara", area=12.5)

    with pytest.raises(ValueError):
        store.update_land(land.id, id="other")
    with pytest.raises(ValueError):
        store.update_land(land.id, colour="green")
    assert store.get_lands() == [land]


def test_get_by_land_filters_expenses_and_income(store: LandRecordStore) -> None:
    north = store.add_land(name="North", location="A", area=1)
    south = store.add_land(name="South", location="B", area=2)
    store.add_expense(land_id=north.id, category=ExpenseCategory.DIESEL, amount=500, date=date(2024, 4, 1))
    store.add_expense(land_id=south.id, category=ExpenseCategory.SEED, amount=800, date=date(2024, 4, 1))
    store.add_crop_income(land_id=south.id, amount=9000, season="2024-4", date=datetime(2024, 4, 30, tzinfo=timezone.utc))

    assert [e.amount for e in store.get_expenses_by_land(north.id)] == [500]
    assert store.get_crop_incomes_by_land(north.id) == []
    assert [i.amount for i in store.get_crop_incomes_by_land(south.id)] == [9000]


def test_deleting_a_land_leaves_dependents_in_place(store: LandRecordStore) -> None:
    land = store.add_land(name="North", location="A", area=1)
    store.add_expense(land_id=land.id, category="lend", amount=2000, date=date(2024, 4, 1))

    assert store.delete_land(land.id) is True
    assert len(store.get_expenses_by_land(land.id)) == 1


def test_slots_are_written_as_versioned_camel_case_envelopes(
    store: LandRecordStore, backend: MemoryBackend
) -> None:
    farmer = store.add_farmer(name="Akram", cnic="1", phone="1")
    store.add_land(name="North", location="A", area=1, farmer_id=farmer.id)

    payload = json.loads(backend.read("landtrack_lands"))
    assert payload["schemaVersion"] == SCHEMA_VERSION
    record = payload["records"][0]
    assert record["farmerId"] == farmer.id
    assert {"id", "name", "location", "area", "createdAt", "updatedAt"} <= set(record)


def test_missing_slot_reads_as_empty(store: LandRecordStore) -> None:
    assert store.get_crop_incomes() == []
    assert store.slot_sizes() == {"lands": 0, "farmers": 0, "expenses": 0, "cropIncomes": 0}


def test_unversioned_list_layout_is_still_readable(clock: StepClock) -> None:
    legacy = [
        {
            "id": "1717000000000abc",
            "name": "North",
            "location": "Okara",
            "area": 5,
            "createdAt": "2024-01-01T00:00:00.000Z",
            "updatedAt": "2024-01-01T00:00:00.000Z",
        }
    ]
    backend = MemoryBackend({"landtrack_lands": json.dumps(legacy)})
    with LandRecordStore(backend, clock=clock) as store:
        lands = store.get_lands()
        store.update_land("1717000000000abc", location="Pakpattan")

    assert lands[0].name == "North"
    assert lands[0].farmer_id is None
    assert json.loads(backend.read("landtrack_lands"))["schemaVersion"] == SCHEMA_VERSION


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"schemaVersion": 99, "records": []}),
        json.dumps({"schemaVersion": SCHEMA_VERSION, "records": "nope"}),
        json.dumps("a string"),
        json.dumps([{"id": "x", "name": "North"}]),
    ],
)
def test_corrupt_slots_raise_storage_corrupt(raw: str, clock: StepClock) -> None:
    backend = MemoryBackend({"landtrack_lands": raw})
    with LandRecordStore(backend, clock=clock) as store:
        with pytest.raises(StorageCorrupt) as excinfo:
            store.get_lands()
        assert excinfo.value.slot == "lands"
        # Other slots stay usable.
        assert store.get_farmers() == []


def test_invalid_utf8_slot_file_raises_storage_corrupt(tmp_path, clock: StepClock) -> None:
    """Undecodable bytes on disk are reported like any other corrupt slot."""

    (tmp_path / "landtrack_lands.json").write_bytes(b'[{"name": "\xff\xfe"}]')

    with LandRecordStore(JsonDirectoryBackend(tmp_path), clock=clock) as store:
        with pytest.raises(StorageCorrupt) as excinfo:
            store.get_lands()

    assert excinfo.value.slot == "lands"
    assert excinfo.value.reason == "invalid UTF-8"


def test_concurrent_adds_are_not_lost(store: LandRecordStore) -> None:
    """Threads sharing one store each see their records persisted."""

    def add_batch(worker: int) -> None:
        for index in range(50):
            store.add_farmer(name=f"Farmer {worker}-{index}", cnic=str(index), phone="0300")

    workers = [threading.Thread(target=add_batch, args=(worker,)) for worker in range(8)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    farmers = store.get_farmers()
    assert len(farmers) == 400
    assert len({farmer.id for farmer in farmers}) == 400


def test_closed_store_refuses_access(backend: MemoryBackend) -> None:
    store = LandRecordStore(backend)
    with pytest.raises(StoreClosed):
        store.get_lands()
    store.open()
    store.add_farmer(name="Akram", cnic="1", phone="1")
    store.close()
    with pytest.raises(StoreClosed):
        store.add_farmer(name="Bashir", cnic="2", phone="2")


def test_json_directory_backend_survives_reopen(tmp_path, clock: StepClock) -> None:
    with LandRecordStore(JsonDirectoryBackend(tmp_path), clock=clock) as store:
        land = store.add_land(name="North", location="Okara", area=3.5)

    assert (tmp_path / "landtrack_lands.json").exists()
    assert list(JsonDirectoryBackend(tmp_path).keys()) == ["landtrack_lands"]

    with LandRecordStore(JsonDirectoryBackend(tmp_path), clock=clock) as reopened:
        assert reopened.get_lands() == [land]
