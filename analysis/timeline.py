"""Symptom timeline: time-aligned severity series plus dose markers."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from analysis.common import (
    EFFECT_WINDOW_HOURS,
    EffectWindow,
    InsufficientData,
    chronological,
    snapshot,
    split_by_type,
    unique_in_order,
    window_length,
)

MIN_TIMELINE_POINTS = 2


class ChartPoint(BaseModel):
    """All symptom severities logged at one exact instant."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    values: Dict[str, int]
    notes: Optional[str] = None


class MedicationMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    label: str
    window: EffectWindow


class Timeline(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    points: List[ChartPoint]
    symptom_names: List[str]
    medication_markers: List[MedicationMarker]

    def series(self, symptom: str) -> List[tuple[datetime, int]]:
        """(timestamp, severity) pairs for one symptom, skipping gaps."""
        return [(p.timestamp, p.values[symptom]) for p in self.points if symptom in p.values]


def build_timeline(
    entries: Iterable, window_hours: float = EFFECT_WINDOW_HOURS
) -> Union[Timeline, InsufficientData]:
    """
    Build the symptom timeline chart dataset.

    Symptom occurrences sharing an exact timestamp merge into one point; the
    notes of the last of them (in chronological, then input order) are kept.
    Every dose yields a marker with its effect window.

    Returns:
        Timeline, or InsufficientData when there are no symptoms or fewer
        than two distinct symptom timestamps.
    """
    length = window_length(window_hours)
    doses, symptoms = split_by_type(chronological(snapshot(entries)))

    symptom_names = unique_in_order(s.description for s in symptoms)

    buckets: Dict[datetime, dict] = {}
    for occurrence in symptoms:
        bucket = buckets.setdefault(occurrence.timestamp, {"values": {}, "notes": None})
        bucket["values"][occurrence.description] = occurrence.severity
        bucket["notes"] = occurrence.notes

    if not symptom_names or len(buckets) < MIN_TIMELINE_POINTS:
        return InsufficientData(
            reason="Not enough data for a timeline. Log at least two symptoms at different times."
        )

    points = [
        ChartPoint(timestamp=ts, values=bucket["values"], notes=bucket["notes"])
        for ts, bucket in buckets.items()
    ]
    markers = [
        MedicationMarker(
            timestamp=dose.timestamp,
            label=dose.label,
            window=EffectWindow.after(dose.timestamp, length),
        )
        for dose in doses
    ]
    return Timeline(points=points, symptom_names=symptom_names, medication_markers=markers)
