from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from zoneinfo import ZoneInfo

from logbook.schema import (
    InvalidEntryError,
    LogType,
    MedicationDose,
    SymptomOccurrence,
    parse_entries,
    parse_entry,
    serialise_entry,
)


def test_parse_dispatches_on_type_tag():
    dose = parse_entry({
        "id": "a", "type": "MEDICATION", "timestamp": "2025-01-01T09:00:00Z",
        "medicationName": "Ibuprofen", "dosage": "200mg",
    })
    sym = parse_entry({
        "id": "b", "type": "SYMPTOM", "timestamp": "2025-01-01T10:00:00Z",
        "description": "Headache", "severity": 4,
    })
    assert isinstance(dose, MedicationDose)
    assert dose.label == "Ibuprofen (200mg)"
    assert isinstance(sym, SymptomOccurrence)
    assert sym.type == LogType.symptom


def test_unknown_type_rejected():
    with pytest.raises(InvalidEntryError):
        parse_entry({"type": "MOOD", "timestamp": "2025-01-01T09:00:00Z"})


@pytest.mark.parametrize("severity", [0, 6, -1])
def test_severity_out_of_range_rejected(severity):
    with pytest.raises(InvalidEntryError):
        parse_entry({
            "type": "SYMPTOM", "timestamp": "2025-01-01T09:00:00Z",
            "description": "Nausea", "severity": severity,
        })


def test_blank_required_strings_rejected():
    with pytest.raises(ValidationError):
        MedicationDose(medication_name="   ", dosage="5mg", timestamp=datetime.now(timezone.utc))
    with pytest.raises(ValidationError):
        SymptomOccurrence(description="", severity=2, timestamp=datetime.now(timezone.utc))


def test_missing_timestamp_rejected():
    with pytest.raises(InvalidEntryError):
        parse_entry({"type": "MEDICATION", "medicationName": "X", "dosage": "1"})


def test_timestamps_normalised_to_utc():
    entry = parse_entry({
        "type": "SYMPTOM", "timestamp": "2025-01-01T09:00:00-05:00",
        "description": "Fever", "severity": 2,
    })
    assert entry.timestamp.tzinfo == ZoneInfo("UTC")
    assert entry.timestamp.hour == 14

    naive = SymptomOccurrence(description="Fever", severity=2, timestamp=datetime(2025, 1, 1, 9))
    assert naive.timestamp == datetime(2025, 1, 1, 9, tzinfo=timezone.utc)


def test_id_generated_and_blank_notes_dropped():
    entry = SymptomOccurrence(description="Cough", severity=1, timestamp="2025-01-01T09:00:00Z", notes="  ")
    assert entry.id
    assert entry.notes is None


def test_entries_are_immutable():
    entry = SymptomOccurrence(description="Cough", severity=1, timestamp="2025-01-01T09:00:00Z")
    with pytest.raises(ValidationError):
        entry.severity = 5


def test_serialised_form_uses_wire_names():
    entry = MedicationDose(
        id="d1", medication_name="Ibuprofen", dosage="200mg", timestamp="2025-01-01T09:00:00Z", notes="with food"
    )
    data = serialise_entry(entry)
    assert data == {
        "id": "d1",
        "type": "MEDICATION",
        "timestamp": "2025-01-01T09:00:00Z",
        "notes": "with food",
        "medicationName": "Ibuprofen",
        "dosage": "200mg",
    }
    assert parse_entry(data) == entry


def test_parse_entries_rejects_duplicate_ids():
    raw = [
        {"id": "x", "type": "SYMPTOM", "timestamp": "2025-01-01T09:00:00Z", "description": "A", "severity": 1},
        {"id": "x", "type": "SYMPTOM", "timestamp": "2025-01-01T10:00:00Z", "description": "B", "severity": 2},
    ]
    with pytest.raises(InvalidEntryError, match="Duplicate"):
        parse_entries(raw)


def test_parse_entries_requires_list():
    with pytest.raises(InvalidEntryError):
        parse_entries({"id": "x"})


@pytest.mark.parametrize("severity", [True, False, "4", 4.0, 3.5, None])
def test_non_integer_severity_rejected(severity):
    with pytest.raises(InvalidEntryError):
        parse_entry({
            "type": "SYMPTOM", "timestamp": "2025-01-01T09:00:00Z",
            "description": "Nausea", "severity": severity,
        })
