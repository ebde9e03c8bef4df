"""Mini README: Tests for environment-driven settings and the Typer CLI.

Settings honour the ``LANDTRACK_`` prefix, and the ``settle``/``summary``
commands work against a JSON data directory built from those settings.
"""

from __future__ import annotations

from datetime import date

import pytest
from typer.testing import CliRunner

from landtrack.configuration import LandtrackSettings, get_settings
from landtrack.records import LandRecordStore


@pytest.fixture
def data_directory(tmp_path, monkeypatch):
    directory = tmp_path / "records"
    monkeypatch.setenv("LANDTRACK_DATA_DIRECTORY", str(directory))
    monkeypatch.setenv("LANDTRACK_INTERFACE_PORT", "9001")
    get_settings.cache_clear()
    yield directory
    get_settings.cache_clear()


def test_settings_read_prefixed_environment(data_directory) -> None:
    settings = LandtrackSettings()

    assert settings.data_directory == data_directory.resolve()
    assert data_directory.is_dir()
    assert settings.interface_port == 9001
    assert settings.storage_prefix == "landtrack_"


def test_settle_and_summary_commands(data_directory) -> None:
    from landtrack_cli import cli

    with LandRecordStore.from_settings(LandtrackSettings()) as store:
        land = store.add_land(name="North", location="Okara", area=10)
        store.add_expense(land_id=land.id, category="seed", amount=1000, date=date(2024, 3, 1))
        store.add_expense(land_id=land.id, category="lend", amount=2000, date=date(2024, 3, 1))

    runner = CliRunner()
    settled = runner.invoke(cli, ["settle", land.id, "10000"])
    assert settled.exit_code == 0, settled.output
    assert "Farmer owes" in settled.output
    assert "unassigned" in settled.output

    summary = runner.invoke(cli, ["summary"])
    assert summary.exit_code == 0, summary.output
    assert "Lands: 1" in summary.output
    assert "Total income:   Rs. 10,000.00" in summary.output


def test_settle_unknown_land_exits_non_zero(data_directory) -> None:
    from landtrack_cli import cli

    result = CliRunner().invoke(cli, ["settle", "missing", "100"])

    assert result.exit_code == 1
