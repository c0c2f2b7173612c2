"""DoseLog demo exposing the FastAPI API and a Gradio UI in one process.

Run with ``uvicorn app:app``; the API lives under ``/api`` and the UI at ``/ui``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import dateparser
import gradio as gr

from analysis import (
    EFFECT_WINDOW_HOURS,
    InsufficientData,
    build_timeline,
    correlate,
    medication_history,
    sort_by,
    summarize_symptoms,
)
from db.repository import clear_entries
from logbook.get_entries import get_entries
from logbook import transfer
from logbook.log_entry import delete_entry, log_entry
from logbook.schema import InvalidEntryError, LogType
from logbook.summarize import summarize
from server.main import app as fastapi_app


logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

MEDICATION_COLUMNS = {
    "Medication Name": "medicationName",
    "Dosage": "dosage",
    "Timestamp": "timestamp",
}


def _parse_when(text: Optional[str]) -> datetime:
    """Free text such as "2 hours ago" or "yesterday 9am" → aware UTC datetime."""

    if not text or not text.strip():
        return datetime.now(timezone.utc)
    dt = dateparser.parse(
        text,
        settings={"RETURN_AS_TIMEZONE_AWARE": True, "TO_TIMEZONE": "UTC"},
    )
    if not dt:
        raise ValueError(f"Could not understand the time {text!r}")
    return dt


def _fmt_time(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M")


def _table(headers: List[str], rows: List[List[Any]]) -> Dict[str, Any]:
    return {"headers": headers, "data": rows}


def submit_log(
    kind: str,
    medication_name: str,
    dosage: str,
    description: str,
    severity: float,
    notes: str,
    when: str,
) -> str:
    """Store one entry from the form; returns a short confirmation or error."""

    try:
        payload: Dict[str, Any] = {"timestamp": _parse_when(when), "notes": notes}
        if kind == "Medication":
            payload.update(type=LogType.medication.value, medicationName=medication_name, dosage=dosage)
        else:
            payload.update(type=LogType.symptom.value, description=description, severity=int(severity))
        entry = log_entry(payload)
    except (InvalidEntryError, ValueError) as exc:
        return f"Could not log entry: {exc}"

    if entry.type == LogType.medication.value:
        return f"Logged: {entry.label} at {_fmt_time(entry.timestamp)}"
    return f"Logged: {entry.description} ({entry.severity}/5) at {_fmt_time(entry.timestamp)}"


def _window(window_hours: Optional[float]) -> float:
    # a cleared gr.Number arrives as None
    return EFFECT_WINDOW_HOURS if window_hours is None else window_hours


def timeline_view(window_hours: Optional[float] = EFFECT_WINDOW_HOURS):
    try:
        result = build_timeline(get_entries(), _window(window_hours))
    except ValueError as exc:
        return f"Invalid effect window: {exc}", _table(["Time"], [])
    if isinstance(result, InsufficientData):
        return result.reason, _table(["Time"], [])

    headers = ["Time", *result.symptom_names, "Notes"]
    rows = [
        [_fmt_time(p.timestamp), *[p.values.get(name, "") for name in result.symptom_names], p.notes or ""]
        for p in result.points
    ]
    doses = "\n".join(
        f"- {m.label}: {_fmt_time(m.window.start)} → {_fmt_time(m.window.end)}"
        for m in result.medication_markers
    )
    return doses or "No medication doses logged.", _table(headers, rows)


def breakdown_view():
    stats = summarize_symptoms(get_entries())
    return _table(
        ["Symptom", "Frequency", "Average Severity"],
        [[s.description, s.frequency, s.average_severity] for s in stats],
    )


def post_medication_view(window_hours: Optional[float] = EFFECT_WINDOW_HOURS):
    window_hours = _window(window_hours)
    try:
        result = correlate(get_entries(), window_hours)
    except ValueError as exc:
        return f"Invalid effect window: {exc}", _table(["Symptom"], [])
    if isinstance(result, InsufficientData):
        return result.reason, _table(["Symptom"], [])

    headers = ["Symptom", *result.medication_labels]
    rows = [
        [description, *[result.cell(label, description).average_severity or "–" for label in result.medication_labels]]
        for description in result.symptom_descriptions
    ]
    note = (
        f"Average severity of each symptom within {window_hours:g} hours after each medication. "
        "'–' means the symptom was not logged in that window."
    )
    return note, _table(headers, rows)


def medication_view(column: str = "Timestamp", direction: str = "desc"):
    doses = medication_history(get_entries(), key=MEDICATION_COLUMNS.get(column, "timestamp"), direction=direction)
    return _table(
        list(MEDICATION_COLUMNS),
        [[d.medication_name, d.dosage, _fmt_time(d.timestamp)] for d in doses],
    )


def history_view():
    """Every entry, newest first, with the id needed to delete it."""

    rows = []
    for e in sort_by(get_entries(), "timestamp", "desc"):
        if e.type == LogType.medication.value:
            rows.append([e.id, _fmt_time(e.timestamp), "Medication", e.label, e.notes or ""])
        else:
            rows.append([e.id, _fmt_time(e.timestamp), "Symptom", f"{e.description} ({e.severity}/5)", e.notes or ""])
    return _table(["ID", "Time", "Type", "Entry", "Notes"], rows)


def delete_view(entry_id: str) -> str:
    entry_id = (entry_id or "").strip()
    if not entry_id:
        return "Enter the ID of the entry to delete."
    if not delete_entry(entry_id):
        return f"No entry with ID {entry_id}."
    return f"Deleted entry {entry_id}."


def export_view() -> str:
    """Write the export file and return its path for download."""

    path = Path(tempfile.mkdtemp(prefix="doselog-")) / transfer.EXPORT_FILENAME
    path.write_text(transfer.export_entries(get_entries()), encoding="utf-8")
    return str(path)


def import_view(file_path: Optional[str]) -> str:
    if not file_path:
        return "Choose an exported JSON file first."
    try:
        entries = transfer.import_entries(Path(file_path).read_text(encoding="utf-8"))
    except InvalidEntryError as exc:
        return f"Import failed: {exc}"
    count = transfer.restore(entries)
    return f"Imported {count} entries. The previous log was replaced."


def clear_view() -> str:
    deleted = clear_entries()
    return f"Deleted {deleted} entries."


def analyze() -> str:
    return summarize(get_entries())


# ---------------------------------------------------------------------------
# Gradio UI


with gr.Blocks(title="DoseLog") as demo:
    gr.Markdown("### DoseLog: medication & symptom tracker")

    with gr.Tab("Log"):
        kind = gr.Radio(["Medication", "Symptom"], value="Medication", label="Type")
        med_name = gr.Textbox(label="Medication name")
        dosage_box = gr.Textbox(label="Dosage", placeholder="e.g. 200mg")
        desc_box = gr.Textbox(label="Symptom")
        severity_slider = gr.Slider(1, 5, value=3, step=1, label="Severity")
        notes_box = gr.Textbox(label="Notes", lines=2)
        when_box = gr.Textbox(label="When", placeholder="now, 2 hours ago, 2025-01-01 09:00 …")
        log_btn = gr.Button("Add log")
        log_out = gr.Markdown()
        log_btn.click(
            submit_log,
            inputs=[kind, med_name, dosage_box, desc_box, severity_slider, notes_box, when_box],
            outputs=log_out,
        )

    with gr.Tab("Symptom Timeline"):
        tl_hours = gr.Number(value=EFFECT_WINDOW_HOURS, label="Effect window (hours)", minimum=0.5)
        tl_btn = gr.Button("Refresh")
        tl_note = gr.Markdown()
        tl_table = gr.Dataframe(interactive=False)
        tl_btn.click(timeline_view, inputs=tl_hours, outputs=[tl_note, tl_table])

    with gr.Tab("Symptom Breakdown"):
        bd_btn = gr.Button("Refresh")
        bd_table = gr.Dataframe(interactive=False)
        bd_btn.click(breakdown_view, outputs=bd_table)

    with gr.Tab("Post-Medication Analysis"):
        pm_hours = gr.Number(value=EFFECT_WINDOW_HOURS, label="Effect window (hours)", minimum=0.5)
        pm_btn = gr.Button("Refresh")
        pm_note = gr.Markdown()
        pm_table = gr.Dataframe(interactive=False)
        pm_btn.click(post_medication_view, inputs=pm_hours, outputs=[pm_note, pm_table])

    with gr.Tab("Medication Table"):
        sort_col = gr.Dropdown(list(MEDICATION_COLUMNS), value="Timestamp", label="Sort by")
        sort_dir = gr.Radio(["asc", "desc"], value="desc", label="Direction")
        mt_btn = gr.Button("Refresh")
        mt_table = gr.Dataframe(interactive=False)
        mt_btn.click(medication_view, inputs=[sort_col, sort_dir], outputs=mt_table)

    with gr.Tab("History"):
        hist_btn = gr.Button("Refresh")
        hist_table = gr.Dataframe(interactive=False)
        hist_btn.click(history_view, outputs=hist_table)
        del_id = gr.Textbox(label="Entry ID")
        del_btn = gr.Button("Delete entry")
        del_out = gr.Markdown()
        del_btn.click(delete_view, inputs=del_id, outputs=del_out)

    with gr.Tab("Settings"):
        export_btn = gr.Button("Export logs")
        export_file = gr.File(label="Export")
        export_btn.click(export_view, outputs=export_file)
        import_file = gr.File(label="Import (replaces all logs)", file_types=[".json"], type="filepath")
        import_btn = gr.Button("Import")
        import_out = gr.Markdown()
        import_btn.click(import_view, inputs=import_file, outputs=import_out)
        clear_btn = gr.Button("Clear all logs", variant="stop")
        clear_out = gr.Markdown()
        clear_btn.click(clear_view, outputs=clear_out)

    with gr.Tab("AI Analysis"):
        gr.Markdown("Pattern summary only, not medical advice. Discuss any findings with your doctor.")
        ai_btn = gr.Button("Analyze my logs")
        ai_out = gr.Markdown()
        ai_btn.click(analyze, outputs=ai_out)


# Mount Gradio UI at `/ui` next to the API routes.
app = gr.mount_gradio_app(fastapi_app, demo, path="/ui")
