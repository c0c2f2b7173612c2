import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from logbook.schema import MedicationDose, SymptomOccurrence  # noqa: E402

T0 = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


def at(hours: float) -> datetime:
    """Instant ``hours`` after 2025-01-01 09:00 UTC."""
    return T0 + timedelta(hours=hours)


@pytest.fixture
def make_dose():
    def _make(name="Ibuprofen", dosage="200mg", hours=0.0, **kwargs):
        return MedicationDose(medication_name=name, dosage=dosage, timestamp=at(hours), **kwargs)

    return _make


@pytest.fixture
def make_symptom():
    def _make(description="Headache", severity=3, hours=0.0, **kwargs):
        return SymptomOccurrence(description=description, severity=severity, timestamp=at(hours), **kwargs)

    return _make


@pytest.fixture(autouse=True)
def _isolated_db(tmp_path, monkeypatch):
    # every test gets its own SQLite file
    monkeypatch.setenv("DOSELOG_DB_PATH", str(tmp_path / "doselog.db"))


@pytest.fixture(name="at")
def at_fixture():
    return at
