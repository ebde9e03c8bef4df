"""Shared fixtures: an in-memory record store driven by a controllable clock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from landtrack.records import LandRecordStore, MemoryBackend


class StepClock:
    """Clock returning ``start`` and advancing by ``step`` on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def clock() -> StepClock:
    return StepClock(datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend, clock: StepClock):
    with LandRecordStore(backend, clock=clock) as opened:
        yield opened
