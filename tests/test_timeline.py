import random
from datetime import timedelta

import pytest

from analysis import EFFECT_WINDOW_HOURS, InsufficientData, Timeline, build_timeline
from logbook.schema import InvalidEntryError


def test_empty_input_is_insufficient():
    result = build_timeline([])
    assert isinstance(result, InsufficientData)
    assert result.status == "insufficient_data"


def test_single_symptom_timestamp_is_insufficient(make_symptom, make_dose):
    entries = [make_dose(), make_symptom(hours=1), make_symptom("Nausea", 2, hours=1)]
    assert isinstance(build_timeline(entries), InsufficientData)


def test_doses_only_is_insufficient(make_dose):
    assert isinstance(build_timeline([make_dose(hours=0), make_dose(hours=5)]), InsufficientData)


def test_points_merge_on_exact_timestamp(make_symptom, at):
    entries = [
        make_symptom("Headache", 4, hours=1, notes="first"),
        make_symptom("Nausea", 2, hours=1, notes="second"),
        make_symptom("Headache", 3, hours=2),
    ]
    result = build_timeline(entries)
    assert isinstance(result, Timeline)
    assert [p.timestamp for p in result.points] == [at(1), at(2)]
    assert result.points[0].values == {"Headache": 4, "Nausea": 2}
    assert result.points[0].notes == "second"
    assert result.points[1].notes is None
    assert result.symptom_names == ["Headache", "Nausea"]


def test_near_simultaneous_timestamps_stay_separate(make_symptom):
    entries = [
        make_symptom(hours=1),
        make_symptom(hours=1 + 1 / 3600),
    ]
    result = build_timeline(entries)
    assert len(result.points) == 2


def test_symptom_names_follow_chronology_not_input_order(make_symptom):
    entries = [
        make_symptom("Late", 1, hours=5),
        make_symptom("Early", 1, hours=1),
    ]
    assert build_timeline(entries).symptom_names == ["Early", "Late"]


def test_points_strictly_ascending_for_any_order(make_symptom):
    entries = [make_symptom(f"S{i % 3}", 1 + i % 5, hours=i % 7) for i in range(20)]
    expected = build_timeline(entries)
    rng = random.Random(7)
    for _ in range(5):
        shuffled = entries[:]
        rng.shuffle(shuffled)
        result = build_timeline(shuffled)
        stamps = [p.timestamp for p in result.points]
        assert all(a < b for a, b in zip(stamps, stamps[1:]))
        assert stamps == [p.timestamp for p in expected.points]


def test_markers_carry_label_and_window(make_symptom, make_dose, at):
    entries = [
        make_dose("Ibuprofen", "200mg", hours=3),
        make_dose("Paracetamol", "500mg", hours=0),
        make_symptom(hours=1),
        make_symptom(hours=2),
    ]
    result = build_timeline(entries, window_hours=4)
    assert [m.label for m in result.medication_markers] == ["Paracetamol (500mg)", "Ibuprofen (200mg)"]
    window = result.medication_markers[1].window
    assert window.start == at(3)
    assert window.end == at(3) + timedelta(hours=4)


def test_default_window_is_eight_hours(make_symptom, make_dose):
    result = build_timeline([make_dose(), make_symptom(hours=1), make_symptom(hours=2)])
    marker = result.medication_markers[0]
    assert marker.window.end - marker.window.start == timedelta(hours=EFFECT_WINDOW_HOURS)


def test_series_skips_gaps(make_symptom, at):
    entries = [make_symptom("A", 1, hours=0), make_symptom("B", 2, hours=1), make_symptom("A", 3, hours=2)]
    assert build_timeline(entries).series("A") == [(at(0), 1), (at(2), 3)]


def test_repeated_calls_identical(make_symptom, make_dose):
    entries = [make_dose(hours=0), make_symptom(hours=1), make_symptom("Nausea", 5, hours=2)]
    assert build_timeline(entries) == build_timeline(entries)


@pytest.mark.parametrize("hours", [0, -1, "8", None, True])
def test_invalid_window_rejected(make_symptom, hours):
    with pytest.raises(ValueError):
        build_timeline([make_symptom(hours=1), make_symptom(hours=2)], window_hours=hours)


def test_duplicate_ids_rejected(make_symptom):
    with pytest.raises(InvalidEntryError):
        build_timeline([make_symptom(id="same", hours=1), make_symptom(id="same", hours=2)])


def test_input_not_mutated(make_symptom):
    entries = [make_symptom(hours=5), make_symptom(hours=1)]
    before = list(entries)
    build_timeline(entries)
    assert entries == before


@pytest.mark.parametrize("hours", [1e9, float("inf"), float("nan")])
def test_window_past_datetime_range_rejected(make_symptom, make_dose, hours):
    entries = [make_dose(), make_symptom(hours=1), make_symptom(hours=2)]
    with pytest.raises(ValueError):
        build_timeline(entries, window_hours=hours)


def test_serialized_entries_rejected(make_symptom):
    entry = make_symptom(hours=1)
    with pytest.raises(TypeError):
        build_timeline([entry, entry.model_dump(by_alias=True)])
