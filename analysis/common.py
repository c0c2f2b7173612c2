"""Shared building blocks for the aggregators.

Nothing in here touches storage or the network; every helper takes plain
entry models and returns new values.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from numbers import Real
from operator import attrgetter
from typing import Hashable, Iterable, List, Literal, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict

from logbook.schema import MedicationDose, SymptomOccurrence, ensure_unique_ids

EFFECT_WINDOW_HOURS = 8

T = TypeVar("T", bound=Hashable)


class InsufficientData(BaseModel):
    """Returned instead of a dataset when the input is too sparse to chart."""

    model_config = ConfigDict(frozen=True)

    status: Literal["insufficient_data"] = "insufficient_data"
    reason: str


class EffectWindow(BaseModel):
    """Half-open interval ``[start, end)`` following a dose."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @classmethod
    def after(cls, start: datetime, length: timedelta) -> "EffectWindow":
        try:
            end = start + length
        except OverflowError as exc:
            raise ValueError(f"Effect window of {length} after {start.isoformat()} is out of range") from exc
        return cls(start=start, end=end)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


def window_length(window_hours: float) -> timedelta:
    """Validate ``window_hours`` and turn it into a ``timedelta``."""
    if isinstance(window_hours, bool) or not isinstance(window_hours, Real):
        raise ValueError(f"window_hours must be a number, got {window_hours!r}")
    if not window_hours > 0:
        raise ValueError(f"window_hours must be positive, got {window_hours!r}")
    try:
        return timedelta(hours=float(window_hours))
    except OverflowError as exc:
        raise ValueError(f"window_hours is out of range, got {window_hours!r}") from exc


def snapshot(entries: Iterable) -> list:
    """Materialise ``entries`` once, rejecting non-entries and duplicate ids."""
    items = list(entries)
    for item in items:
        if not isinstance(item, (MedicationDose, SymptomOccurrence)):
            raise TypeError(f"Not a log entry: {item!r}")
    ensure_unique_ids(items)
    return items


def chronological(entries: Iterable) -> list:
    # sorted() is stable, so entries sharing a timestamp keep their input order
    return sorted(entries, key=attrgetter("timestamp"))


def split_by_type(entries: Iterable) -> tuple[List[MedicationDose], List[SymptomOccurrence]]:
    doses: List[MedicationDose] = []
    symptoms: List[SymptomOccurrence] = []
    for entry in entries:
        if isinstance(entry, MedicationDose):
            doses.append(entry)
        elif isinstance(entry, SymptomOccurrence):
            symptoms.append(entry)
        else:
            raise TypeError(f"Not a log entry: {entry!r}")
    return doses, symptoms


def unique_in_order(values: Iterable[T]) -> List[T]:
    return list(dict.fromkeys(values))


def mean_severity(severities: Sequence[int]) -> Optional[float]:
    """Mean rounded to 2 decimals, or ``None`` for an empty sequence."""
    if not severities:
        return None
    return round(sum(severities) / len(severities), 2)
