from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Iterable, List, Literal, Optional, Union
from uuid import uuid4
from zoneinfo import ZoneInfo

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, ValidationError, field_validator

__all__ = [
    "LogType",
    "MedicationDose",
    "SymptomOccurrence",
    "LogEntry",
    "InvalidEntryError",
    "parse_entry",
    "parse_entries",
    "ensure_unique_ids",
    "serialise_entry",
    "parse_timestamp",
]


class LogType(str, Enum):
    """Tags of the two log entry variants."""

    medication = "MEDICATION"
    symptom = "SYMPTOM"


class InvalidEntryError(ValueError):
    """Raised when a log entry (or a collection of them) is malformed."""


_DEF_TZ = ZoneInfo("UTC")

SEVERITY_MIN = 1
SEVERITY_MAX = 5


def _to_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware and converted to UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_DEF_TZ)
    return dt.astimezone(_DEF_TZ)


def parse_timestamp(value: datetime | str) -> datetime:
    """Parse an ISO-8601 instant (a trailing ``Z`` is accepted) into UTC."""
    if isinstance(value, datetime):
        return _to_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError("timestamp must be an ISO-8601 string or datetime")
    return _to_utc(isoparse(value.strip()))


class _BaseEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: str(uuid4()), min_length=1)
    timestamp: datetime
    notes: Optional[str] = None

    @field_validator("timestamp", mode="before")
    def _parse_timestamp(cls, v: datetime | str) -> datetime:
        return parse_timestamp(v)

    @field_validator("notes", mode="before")
    def _blank_notes(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class MedicationDose(_BaseEntry):
    """A logged instance of taking a medication."""

    type: Literal["MEDICATION"] = LogType.medication.value
    medication_name: str = Field(alias="medicationName", min_length=1)
    dosage: str = Field(min_length=1)

    @property
    def label(self) -> str:
        return f"{self.medication_name} ({self.dosage})"


class SymptomOccurrence(_BaseEntry):
    """A logged instance of experiencing a symptom."""

    type: Literal["SYMPTOM"] = LogType.symptom.value
    description: str = Field(min_length=1)
    severity: StrictInt = Field(ge=SEVERITY_MIN, le=SEVERITY_MAX)


LogEntry = Annotated[Union[MedicationDose, SymptomOccurrence], Field(discriminator="type")]

_ENTRY_ADAPTER: TypeAdapter = TypeAdapter(LogEntry)


def ensure_unique_ids(entries: Iterable[Any]) -> None:
    """Raise :class:`InvalidEntryError` if two entries share an ``id``."""
    seen: set[str] = set()
    for entry in entries:
        if entry.id in seen:
            raise InvalidEntryError(f"Duplicate entry id: {entry.id}")
        seen.add(entry.id)


def parse_entry(data: Any) -> Union[MedicationDose, SymptomOccurrence]:
    """Validate a single serialized entry (or pass an existing model through)."""
    if isinstance(data, (MedicationDose, SymptomOccurrence)):
        return data
    try:
        return _ENTRY_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise InvalidEntryError(str(exc)) from exc


def parse_entries(data: Any) -> List[Union[MedicationDose, SymptomOccurrence]]:
    """Validate a serialized collection of entries and check id uniqueness."""
    if not isinstance(data, (list, tuple)):
        raise InvalidEntryError("Entries must be a list")
    entries = [parse_entry(item) for item in data]
    ensure_unique_ids(entries)
    return entries


def serialise_entry(entry: Union[MedicationDose, SymptomOccurrence]) -> dict:
    """JSON-ready dict using the wire field names (``medicationName`` etc.)."""
    return entry.model_dump(mode="json", by_alias=True)
