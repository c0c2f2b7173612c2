from datetime import timedelta

from db import repository as repo
from logbook.schema import MedicationDose, SymptomOccurrence


def test_repo_roundtrip(make_dose, make_symptom):
    dose = make_dose("Ibuprofen", "200mg", hours=0, notes="with food")
    sym = make_symptom("Headache", 4, hours=1)
    repo.add_entry(dose)
    repo.add_entry(sym)

    stored = {e.id: e for e in repo.list_entries()}
    assert stored[dose.id] == dose
    assert stored[sym.id] == sym
    assert isinstance(stored[dose.id], MedicationDose)
    assert isinstance(stored[sym.id], SymptomOccurrence)
    # UTC survives the SQLite round trip
    assert stored[sym.id].timestamp == sym.timestamp


def test_list_since_filters(make_symptom, at):
    repo.add_entry(make_symptom(hours=0))
    late = make_symptom(hours=5)
    repo.add_entry(late)
    assert [e.id for e in repo.list_entries(since=at(1))] == [late.id]
    assert repo.list_entries(since=at(5) + timedelta(seconds=1)) == []


def test_get_and_delete(make_dose):
    dose = make_dose()
    repo.add_entry(dose)
    assert repo.get_entry(dose.id) == dose
    assert repo.delete_entry(dose.id) is True
    assert repo.delete_entry(dose.id) is False
    assert repo.get_entry(dose.id) is None


def test_replace_and_clear(make_dose, make_symptom):
    repo.add_entry(make_dose())
    replacement = [make_symptom(hours=1), make_symptom(hours=2)]
    assert repo.replace_entries(replacement) == 2
    assert {e.id for e in repo.list_entries()} == {e.id for e in replacement}
    assert repo.clear_entries() == 2
    assert repo.list_entries() == []


def test_db_path_follows_env(tmp_path, monkeypatch, make_dose):
    repo.add_entry(make_dose())
    monkeypatch.setenv("DOSELOG_DB_PATH", str(tmp_path / "other.db"))
    assert repo.list_entries() == []
    assert (tmp_path / "other.db").exists()
