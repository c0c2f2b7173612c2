"""Pure aggregators turning log entries into chart and table datasets."""

from .breakdown import SymptomStat, summarize_symptoms
from .common import EFFECT_WINDOW_HOURS, EffectWindow, InsufficientData
from .correlation import CorrelationCell, CorrelationMatrix, correlate
from .sorting import SortDirection, medication_history, sort_by
from .timeline import ChartPoint, MedicationMarker, Timeline, build_timeline

__all__ = [
    "EFFECT_WINDOW_HOURS",
    "EffectWindow",
    "InsufficientData",
    "ChartPoint",
    "MedicationMarker",
    "Timeline",
    "build_timeline",
    "SymptomStat",
    "summarize_symptoms",
    "CorrelationCell",
    "CorrelationMatrix",
    "correlate",
    "SortDirection",
    "sort_by",
    "medication_history",
]
