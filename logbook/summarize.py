from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Iterable, Optional

from llama_index.llms.openai import OpenAI

from analysis.sorting import sort_by
from logbook.get_entries import get_entries
from logbook.schema import LogType, serialise_entry

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
FALLBACK_LIMIT = 5

_PROMPT = """\
You are a helpful assistant analyzing a user's medication and symptom log.
The user is tracking their reaction to a new medication.

IMPORTANT: Do NOT provide any medical advice, diagnosis, or treatment recommendations. Your role is ONLY to identify patterns in the data provided.

Based on the following data, provide a summary of potential correlations and patterns between medication intake and the reported symptoms.
- Look for symptoms that appear or increase in severity shortly after a medication dose.
- Note any recurring patterns in timing.
- Keep the analysis objective and based strictly on the provided timestamps and data points.
- Conclude by strongly recommending the user discuss these observations with their doctor or healthcare provider.

Here is the data in JSON format:
{entries}

Please provide the analysis in a clear, easy-to-read format using Markdown.
"""


def _format_bullets(entries: list[dict]) -> str:
    """Consistent fallback bullet list from recent entries."""

    def fmt(e: dict) -> str:
        when = e.get("timestamp") or ""
        if e.get("type") == LogType.medication.value:
            head = f"{e.get('medicationName')} ({e.get('dosage')})"
        else:
            head = f"{e.get('description')} (severity: {e.get('severity')})"
        notes = e.get("notes")
        notes_txt = f" - {notes}" if notes else ""
        return f"- {when} {head}{notes_txt}".strip()

    return "\n".join(fmt(e) for e in entries)


def _llm() -> OpenAI:
    # relies on OPENAI_API_KEY in env
    return OpenAI(model=os.getenv("SUMMARY_MODEL", DEFAULT_MODEL), temperature=0.3)


def summarize(entries: Iterable) -> str:
    """
    Ask the language model for a pattern-only commentary on ``entries``.

    Returns "No entries found." for an empty log. If the model call fails for
    any reason, returns a bullet list of the most recent entries instead.
    """
    ordered = [serialise_entry(e) for e in sort_by(list(entries), "timestamp", "desc")]
    if not ordered:
        return "No entries found."

    prompt = _PROMPT.format(entries=json.dumps(ordered, indent=2))
    try:
        response = _llm().complete(prompt)
        return response.text
    except Exception as exc:
        logger.warning("LLM summary failed (%s); falling back to bullet list.", exc)
        return _format_bullets(ordered[:FALLBACK_LIMIT])


def tool_summarize(since: Optional[datetime] = None) -> str:
    """Summarise stored entries, optionally only those on or after ``since``."""

    return summarize(get_entries(since=since))
