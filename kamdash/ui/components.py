"""Shared UI components for the kamdash Streamlit dashboard."""

from __future__ import annotations

from datetime import date

import streamlit as st

from kamdash.models import SOURCE_LABELS, ActionableItem
from kamdash.notes import is_snooze_elapsed, latest_note_preview, snooze_days_left

SEVERITY_EMOJI = {
    "extreme": "\U0001f534",
    "critical": "\U0001f7e1",
    "high": "\U0001f7e2",
    "medium": "\U0001f7e2",
    "low": "\U0001f7e2",
}

# Substring of the lowercased status -> Streamlit color
STATUS_COLORS = [
    ("waiting", "orange"),
    ("availabilities", "blue"),
    ("completed", "green"),
    ("edge case", "violet"),
]

SWIMLANE_TITLES = {
    "critical": "Critical (45+ Days)",
    "attention": "Attention (30-44 Days)",
    "normal": "Normal (10-29 Days)",
}

SWIMLANE_EMPTY = {
    "critical": "No critical items",
    "attention": "No items needing attention",
    "normal": "No normal items",
}


def severity_badge(severity: str) -> str:
    return SEVERITY_EMOJI.get(severity, "⚪")


def status_color(status: str) -> str:
    s = status.lower()
    for needle, color in STATUS_COLORS:
        if needle in s:
            return color
    return "gray"


def status_pill(status: str) -> str:
    return f":{status_color(status)}-background[{status}]"


def snooze_label(item: ActionableItem, today: date) -> str:
    """Badge for a snooze that has run out; active snoozes are never on screen."""
    if is_snooze_elapsed(item.snooze_until, today):
        return "⏰ Snooze expired"
    return ""


def snooze_preview(snooze_date: str | None, today: date) -> str:
    """Caption under the snooze picker, or "" when no date is chosen."""
    days = snooze_days_left(snooze_date, today)
    if days is None:
        return ""
    return f"Hidden for {days}d, back on the board {snooze_date}"


def render_item_card(item: ActionableItem, today: date) -> None:
    """Render the read-only part of an item card."""
    badge = severity_badge(item.severity)
    st.markdown(f"{badge} **{item.candidate_name}** \u2014 {item.pending_days}d")
    st.caption(f"{item.company} · {item.role}")
    st.markdown(status_pill(item.status))

    details = [SOURCE_LABELS.get(item.source, item.source), f"KAM: {item.kam_label}"]
    label = snooze_label(item, today)
    if label:
        details.append(label)
    st.caption(" | ".join(details))

    preview = latest_note_preview(item.display_notes)
    if preview:
        if len(preview) > 140:
            preview = preview[:137] + "..."
        st.markdown(f"> {preview}")

    if item.platform_link and item.platform_link != "#":
        st.markdown(f"[Platform]({item.platform_link})")


def render_notes(item: ActionableItem) -> None:
    """Full notes log, oldest entry first."""
    if not item.display_notes:
        st.info("No notes yet.")
        return
    st.code(item.display_notes, language="text")
    if item.scheduler_notes:
        st.markdown("**Scheduler notes:**")
        st.code(item.scheduler_notes, language="text")
