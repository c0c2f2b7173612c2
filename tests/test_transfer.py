import json

import pytest

from db import repository as repo
from logbook import transfer
from logbook.schema import InvalidEntryError


def test_export_is_importable(make_dose, make_symptom):
    entries = [make_dose(hours=0, notes="after lunch"), make_symptom("Headache", 4, hours=1)]
    text = transfer.export_entries(entries)

    data = json.loads(text)
    assert data[0]["medicationName"] == "Ibuprofen"
    assert data[1]["timestamp"] == "2025-01-01T10:00:00Z"
    assert transfer.import_entries(text) == entries


@pytest.mark.parametrize("text", ["not json", "{}", '[{"type": "SYMPTOM"}]'])
def test_import_rejects_bad_files(text):
    with pytest.raises(InvalidEntryError):
        transfer.import_entries(text)


def test_restore_overwrites_store(make_dose, make_symptom):
    repo.add_entry(make_dose())
    imported = transfer.import_entries(transfer.export_entries([make_symptom(hours=3)]))
    assert transfer.restore(imported) == 1
    assert repo.list_entries() == imported
