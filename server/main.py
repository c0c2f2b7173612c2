# server/main.py
from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware

from analysis import build_timeline, correlate, medication_history, sort_by, summarize_symptoms
from logbook.get_entries import get_entries as tool_get_entries
from logbook.log_entry import delete_entry as tool_delete_entry
from logbook.log_entry import log_entry as tool_log_entry
from logbook.schema import InvalidEntryError, parse_timestamp, serialise_entry
from logbook.summarize import tool_summarize
from logbook import transfer
from db import repository as repo

app = FastAPI(title="DoseLog API", version="0.1.0")

# --- CORS (configurable) ---
def _parse_cors_origins(env_val: str | None):
    """
    Parse comma-separated origins. If env is None or '*', return ['*'] (dev).
    Otherwise, return a cleaned list like ['https://app.example.com', 'https://example.com'].
    """
    if not env_val or env_val.strip() == "*":
        return ["*"]
    parts = [p.strip() for p in env_val.split(",")]
    return [p for p in parts if p] or ["*"]

_CORS_ORIGINS = _parse_cors_origins(os.getenv("CORS_ORIGINS"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=_CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger(__name__)
if _CORS_ORIGINS == ["*"]:
    logger.warning("CORS is permissive ('*'). This is fine for dev but restrict in production via CORS_ORIGINS.")
else:
    logger.info("CORS allowed origins: %s", _CORS_ORIGINS)

# --- Config ---
def _default_window_hours() -> float:
    """EFFECT_WINDOW_HOURS from the environment, 8 when unset or invalid."""
    raw = os.getenv("EFFECT_WINDOW_HOURS")
    if not raw:
        return 8.0
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric EFFECT_WINDOW_HOURS=%r", raw)
        return 8.0
    if value <= 0:
        logger.warning("Ignoring non-positive EFFECT_WINDOW_HOURS=%r", raw)
        return 8.0
    return value

WINDOW_HOURS = _default_window_hours()

# --- Helpers ---
def _parse_since(since_str: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp string into a timezone-aware datetime, or return None when no input is provided.

    Raises:
        HTTPException: 400 Bad Request if `since_str` cannot be parsed as an ISO 8601 datetime.
    """
    if not since_str:
        return None
    try:
        # same ISO 8601 rules as entry timestamps; UTC if no tzinfo present
        return parse_timestamp(since_str)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid 'since' datetime format. Use ISO 8601.") from exc

def _entries():
    try:
        return tool_get_entries()
    except InvalidEntryError as exc:
        # a stored row no longer validates
        logger.exception("Stored log is corrupt")
        raise HTTPException(status_code=500, detail="Stored log is corrupt") from exc

def _analyse(fn, window_hours: Optional[float]):
    try:
        return fn(_entries(), window_hours or WINDOW_HOURS)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

def _analysis(result) -> dict:
    return result.model_dump(mode="json")

# --- Routes ---
@app.get("/health")
def health():
    """Liveness probe."""
    return {"ok": True}


@app.get("/api/logs")
def api_list_logs(
    since: Optional[str] = Query(default=None, description="ISO8601 datetime, UTC assumed if tz missing"),
):
    """List entries, newest first."""
    dt = _parse_since(since)
    entries = tool_get_entries(since=dt)
    return [serialise_entry(e) for e in sort_by(entries, "timestamp", "desc")]


@app.post("/api/logs", status_code=status.HTTP_201_CREATED)
def api_create_log(payload: dict[str, Any] = Body(...)):
    """Validate and store one entry; returns the stored entry."""
    try:
        saved = tool_log_entry(payload)
    except InvalidEntryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return serialise_entry(saved)


@app.delete("/api/logs/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_log(entry_id: str):
    if not tool_delete_entry(entry_id):
        raise HTTPException(status_code=404, detail="Log entry not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/api/logs")
def api_clear_logs():
    """Delete every entry."""
    deleted = repo.clear_entries()
    logger.info("Cleared %s entries", deleted)
    return {"deleted": deleted}


@app.get("/api/logs/export")
def api_export_logs():
    """Download all entries as the JSON file the import endpoint accepts."""
    body = transfer.export_entries(_entries())
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{transfer.EXPORT_FILENAME}"'},
    )


@app.post("/api/logs/import")
def api_import_logs(payload: Any = Body(...)):
    """Overwrite the stored log with an exported JSON array."""
    try:
        count = transfer.restore(transfer.load_entries(payload))
    except InvalidEntryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"imported": count}


@app.get("/api/analysis/timeline")
def api_timeline(window_hours: Optional[float] = Query(default=None, gt=0)):
    return _analysis(_analyse(build_timeline, window_hours))


@app.get("/api/analysis/breakdown")
def api_breakdown():
    return [stat.model_dump(mode="json") for stat in summarize_symptoms(_entries())]


@app.get("/api/analysis/post-medication")
def api_post_medication(window_hours: Optional[float] = Query(default=None, gt=0)):
    result = _analyse(correlate, window_hours)
    body = _analysis(result)
    if result.status == "ok":
        body["rows"] = result.as_rows()
    return body


@app.get("/api/medications")
def api_medications(
    sort: str = Query(default="timestamp"),
    direction: str = Query(default="desc"),
):
    """Dose history table."""
    try:
        doses = medication_history(_entries(), key=sort, direction=direction)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [serialise_entry(d) for d in doses]


@app.get("/api/summary")
def api_summary(
    since: Optional[str] = Query(default=None, description="ISO8601 datetime, UTC assumed if tz missing"),
):
    """Free-text pattern commentary from the language model."""
    text = tool_summarize(since=_parse_since(since))
    # summarize returns plain text → wrap for uniform JSON
    return {"summary": str(text)}
