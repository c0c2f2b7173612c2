"""Per-symptom frequency and average severity."""
from __future__ import annotations

from typing import Dict, Iterable, List

from pydantic import BaseModel, ConfigDict

from analysis.common import mean_severity, snapshot, split_by_type


class SymptomStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    frequency: int
    average_severity: float


def summarize_symptoms(entries: Iterable) -> List[SymptomStat]:
    """Group symptom occurrences by description.

    Sorted by frequency descending; equal frequencies are ordered by
    description so the output does not depend on input order. An input with
    no symptoms yields an empty list.
    """
    _, symptoms = split_by_type(snapshot(entries))

    severities: Dict[str, List[int]] = {}
    for occurrence in symptoms:
        severities.setdefault(occurrence.description, []).append(occurrence.severity)

    stats = [
        SymptomStat(
            description=description,
            frequency=len(values),
            average_severity=mean_severity(values),
        )
        for description, values in severities.items()
    ]
    stats.sort(key=lambda s: (-s.frequency, s.description))
    return stats
