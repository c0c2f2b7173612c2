"""Post-medication analysis.

For every (medication label, symptom description) pair, average the severity
of the symptom occurrences that fall inside an effect window of a dose with
that label. Windows are half-open, ``[dose, dose + window_hours)``.

A symptom that sits inside the overlapping windows of two doses of the same
medication is counted once per window. Frequent dosing therefore weighs
those occurrences more; this is kept as is rather than deduplicated.
"""
from __future__ import annotations

from bisect import bisect_left
from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from analysis.common import (
    EFFECT_WINDOW_HOURS,
    EffectWindow,
    InsufficientData,
    chronological,
    mean_severity,
    snapshot,
    split_by_type,
    unique_in_order,
    window_length,
)


class CorrelationCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    medication_label: str
    symptom_description: str
    occurrences: int
    # None when no occurrence fell inside any window
    average_severity: Optional[float] = None

    @property
    def chart_value(self) -> float:
        """Bar height for charting, 0 when nothing matched."""
        return self.average_severity if self.average_severity is not None else 0.0


class CorrelationMatrix(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    medication_labels: List[str]
    symptom_descriptions: List[str]
    cells: List[CorrelationCell]

    def cell(self, medication_label: str, symptom_description: str) -> CorrelationCell:
        for cell in self.cells:
            if (
                cell.medication_label == medication_label
                and cell.symptom_description == symptom_description
            ):
                return cell
        raise KeyError((medication_label, symptom_description))

    def as_rows(self) -> List[dict]:
        """One row per symptom with a chart value per medication label."""
        rows: Dict[str, dict] = {d: {"symptom": d} for d in self.symptom_descriptions}
        for cell in self.cells:
            rows[cell.symptom_description][cell.medication_label] = cell.chart_value
        return list(rows.values())


class _SymptomSeries:
    """Chronological timestamps and severities of one symptom description."""

    __slots__ = ("times", "severities")

    def __init__(self) -> None:
        self.times: List[datetime] = []
        self.severities: List[int] = []

    def within(self, window: EffectWindow) -> List[int]:
        lo = bisect_left(self.times, window.start)
        hi = bisect_left(self.times, window.end)
        return self.severities[lo:hi]


def correlate(
    entries: Iterable, window_hours: float = EFFECT_WINDOW_HOURS
) -> Union[CorrelationMatrix, InsufficientData]:
    """
    Compute the post-medication correlation matrix.

    Parameters:
        entries: Log entries in any order.
        window_hours: Length of the effect window following each dose.

    Returns:
        CorrelationMatrix with one cell per (medication label, symptom
        description), medication labels outermost. InsufficientData when
        there is no dose or no symptom.
    """
    length = window_length(window_hours)
    doses, symptoms = split_by_type(chronological(snapshot(entries)))

    labels = unique_in_order(d.label for d in doses)
    descriptions = unique_in_order(s.description for s in symptoms)
    if not labels or not descriptions:
        return InsufficientData(
            reason="Not enough data. Log at least one medication and one symptom."
        )

    windows: Dict[str, List[EffectWindow]] = {label: [] for label in labels}
    for dose in doses:
        windows[dose.label].append(EffectWindow.after(dose.timestamp, length))

    series: Dict[str, _SymptomSeries] = {d: _SymptomSeries() for d in descriptions}
    for occurrence in symptoms:
        s = series[occurrence.description]
        s.times.append(occurrence.timestamp)
        s.severities.append(occurrence.severity)

    cells: List[CorrelationCell] = []
    for label in labels:
        for description in descriptions:
            matched: List[int] = []
            for window in windows[label]:
                matched.extend(series[description].within(window))
            cells.append(
                CorrelationCell(
                    medication_label=label,
                    symptom_description=description,
                    occurrences=len(matched),
                    average_severity=mean_severity(matched),
                )
            )

    return CorrelationMatrix(
        medication_labels=labels,
        symptom_descriptions=descriptions,
        cells=cells,
    )
