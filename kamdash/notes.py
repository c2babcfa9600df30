"""Helpers for the append-only internal notes log.

Notes are newline-separated entries, oldest first:

    [2024-01-01] called candidate
    [2024-01-03] [SNOOZE: 2024-01-10] waiting on client feedback
    [COMPLETED: 2024-01-12]

Snooze and completion state live only as markers inside this log, so every
reader of snooze/completion goes through the patterns here.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

SNOOZE_RE = re.compile(r"\[SNOOZE:\s*(\d{4}-\d{2}-\d{2})\]")
COMPLETION_RE = re.compile(r"\[(?:COMPLETED|SUBMITTED):\s*\d{4}-\d{2}-\d{2}\]")

_ENTRY_DATE_PREFIX_RE = re.compile(r"^\[\d{4}-\d{2}-\d{2}\]\s*")
_SNOOZE_MARKER_RE = re.compile(r"\[SNOOZE:.*?\]\s*")
_COMPLETION_MARKER_RE = re.compile(r"\[(?:COMPLETED|SUBMITTED):.*?\]\s*")


def today_iso() -> str:
    """Today's date in UTC as YYYY-MM-DD, the format used in note entries."""
    return datetime.now(timezone.utc).date().isoformat()


def last_snooze_date(notes: str | None) -> str | None:
    """Return the date of the last [SNOOZE: ...] marker, or None.

    Entries are appended, so the last marker is the most recent snooze.
    """
    if not notes:
        return None
    matches = SNOOZE_RE.findall(notes)
    return matches[-1] if matches else None


def has_completion_marker(notes: str | None) -> bool:
    return bool(notes) and COMPLETION_RE.search(notes) is not None


def format_entry(text: str, on: str | None = None) -> str:
    return f"[{on or today_iso()}] {text}"


def snooze_comment(comment: str, snooze_date: str | None) -> str:
    """Prefix a comment with a snooze marker when a date is given."""
    if snooze_date:
        return f"[SNOOZE: {snooze_date}] {comment}"
    return comment


def completion_marker(marker: str = "COMPLETED", on: str | None = None) -> str:
    return f"[{marker}: {on or today_iso()}]"


def append_entry(existing: str | None, entry: str) -> str:
    """Append an entry at the end of the log, never touching existing lines."""
    if existing:
        return f"{existing}\n{entry}"
    return entry


def latest_note_preview(notes: str | None) -> str:
    """Last line of the log with its date prefix and markers stripped."""
    if not notes:
        return ""
    last_line = notes.split("\n")[-1]
    text = _ENTRY_DATE_PREFIX_RE.sub("", last_line, count=1)
    text = _SNOOZE_MARKER_RE.sub("", text, count=1)
    text = _COMPLETION_MARKER_RE.sub("", text, count=1)
    return text.strip()


def is_snooze_elapsed(snooze_until: str | None, today: date) -> bool:
    """True when a snooze date exists and is today or earlier."""
    return bool(snooze_until) and snooze_until <= today.isoformat()


def snooze_days_left(snooze_until: str | None, today: date) -> int | None:
    if not snooze_until:
        return None
    try:
        until = date.fromisoformat(snooze_until)
    except ValueError:
        return None
    return (until - today).days
