"""User intents that touch both the store and the backend.

Comment/snooze: the store is patched optimistically, then the write goes out;
a failed write restores the previous notes.

Complete: the item is hidden locally, then the write goes out. A successful
write schedules a silent refresh once the backend sync has had time to land.
A failed write does not unhide the item; a full refresh runs instead and the
user is told the completion failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from kamdash.backend.writer import NotesWriter, ValidationError, WriteError
from kamdash.models import ActionableItem
from kamdash.notes import append_entry, format_entry, snooze_comment, today_iso
from kamdash.state.store import DashboardStore

logger = logging.getLogger(__name__)

COMPLETE_REFRESH_DELAY = 5.0  # seconds for the backend to sync into Airtable
QUICK_SNOOZE_DAYS = (1, 3, 7)

SNOOZE_NEEDS_COMMENT = "Please add a comment to snooze this item."
NOTHING_TO_SAVE = "Please add a comment or select a snooze date."


@dataclass
class ActionOutcome:
    ok: bool
    message: str


def snooze_date_in(days: int, today: date | None = None) -> str:
    return ((today or date.today()) + timedelta(days=days)).isoformat()


def validate_comment(comment: str, snooze_date: str | None) -> str:
    """Return the trimmed comment, or raise ValidationError."""
    trimmed = (comment or "").strip()
    if snooze_date and not trimmed:
        raise ValidationError(SNOOZE_NEEDS_COMMENT)
    if not snooze_date and not trimmed:
        raise ValidationError(NOTHING_TO_SAVE)
    return trimmed


def submit_comment(
    store: DashboardStore,
    writer: NotesWriter,
    item: ActionableItem,
    comment: str,
    snooze_date: str | None = None,
) -> ActionOutcome:
    """Save a comment, optionally snoozing the item until ``snooze_date``."""
    try:
        trimmed = validate_comment(comment, snooze_date)
    except ValidationError as e:
        return ActionOutcome(ok=False, message=str(e))

    final_comment = snooze_comment(trimmed, snooze_date)
    optimistic_notes = append_entry(item.display_notes, format_entry(final_comment, today_iso()))

    patch = store.add_comment_optimistic(item.id, optimistic_notes, snooze_date or None)
    store.mark_handled(item.id)

    try:
        writer.add_comment(item, final_comment)
    except (WriteError, ValidationError) as e:
        logger.error(f"Failed to save comment for {item.id}, rolling back: {e}")
        store.rollback(patch)
        return ActionOutcome(ok=False, message=f"Failed to save comment: {e}")

    if snooze_date:
        return ActionOutcome(ok=True, message=f"{item.candidate_name} snoozed until {snooze_date}")
    return ActionOutcome(ok=True, message=f"Comment added for {item.candidate_name}")


def complete_item(
    store: DashboardStore, writer: NotesWriter, item: ActionableItem
) -> ActionOutcome:
    """Mark an item complete locally and in the backend."""
    store.mark_complete(item.id)

    try:
        writer.mark_complete(item)
    except WriteError as e:
        logger.error(f"Failed to complete {item.id}: {e}")
        store.refresh()
        return ActionOutcome(ok=False, message=f"Failed to complete: {e}")

    store.schedule_refresh(COMPLETE_REFRESH_DELAY)
    return ActionOutcome(ok=True, message=f"{item.candidate_name} marked as complete!")
