"""Writes KAM comments and completion markers back through the Weekday backend.

The backend owns the sync into Airtable; we only post the full, updated
``internalWeekdayNotes`` value for a (jdUid, publicIdentifier) pair. Before
each write the record is re-read so entries added by other KAMs since our
last refresh are kept. This narrows, but does not close, the window for
lost updates: there is no revision token to write against.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from kamdash.airtable.fetcher import Fetcher
from kamdash.config import DEFAULT_COMPLETION_MARKER, Config
from kamdash.models import ActionableItem
from kamdash.normalize.fields import NOTES_FIELD
from kamdash.notes import append_entry, completion_marker, format_entry, today_iso

logger = logging.getLogger(__name__)

IDENTITY_HEADER = "weekdayidentityid"


class ValidationError(ValueError):
    """Input rejected before any network call."""


class WriteError(Exception):
    """The backend rejected or never received a notes update."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotesWriter:
    """Appends entries to an item's notes and pushes them to the backend."""

    def __init__(
        self,
        fetcher: Fetcher,
        update_url: str,
        identity_id: str,
        completion_marker: str = DEFAULT_COMPLETION_MARKER,
        http: httpx.Client | None = None,
        today: Callable[[], str] = today_iso,
    ) -> None:
        self._fetcher = fetcher
        self._update_url = update_url
        self._identity_id = identity_id
        self._marker = completion_marker
        self._http = http or httpx.Client(timeout=30.0)
        self._today = today

    @classmethod
    def from_config(cls, config: Config, fetcher: Fetcher) -> NotesWriter:
        return cls(
            fetcher,
            update_url=config.backend_update_url,
            identity_id=config.backend_identity_id,
            completion_marker=config.completion_marker,
        )

    def add_comment(self, item: ActionableItem, text: str) -> str:
        """Append ``[today] text`` to the item's notes. Returns the new notes."""
        if not text or not text.strip():
            raise ValidationError("Comment can't be empty")

        entry = format_entry(text.strip(), on=self._today())
        updated = append_entry(self._current_notes(item), entry)
        self._post(item, updated)
        return updated

    def mark_complete(self, item: ActionableItem) -> str:
        """Append the completion marker to the item's notes. Returns the new notes."""
        marker = completion_marker(self._marker, on=self._today())
        updated = append_entry(self._current_notes(item), marker)
        self._post(item, updated)
        return updated

    def _current_notes(self, item: ActionableItem) -> str:
        """Latest notes from Airtable, falling back to what we hold locally."""
        fresh = self._fetcher.fetch_record(item.id, item.source)
        if fresh and fresh.get("fields") is not None:
            return fresh["fields"].get(NOTES_FIELD) or ""

        logger.warning(
            f"Could not fetch fresh notes for {item.id}, using local state"
        )
        if NOTES_FIELD in item.raw:
            return item.raw.get(NOTES_FIELD) or ""
        return item.display_notes or ""

    def build_payload(self, item: ActionableItem, notes: str) -> dict:
        return {
            "jdUid": item.jd_uid,
            "publicIdentifier": item.public_identifier,
            "data": {NOTES_FIELD: notes},
        }

    def _post(self, item: ActionableItem, notes: str) -> None:
        payload = self.build_payload(item, notes)
        try:
            response = self._http.post(
                self._update_url,
                json=payload,
                headers={IDENTITY_HEADER: self._identity_id},
            )
        except httpx.HTTPError as e:
            logger.error(f"Error updating notes for {item.id}: {e}")
            raise WriteError(f"Backend unreachable: {e}") from e

        if not response.is_success:
            logger.error(
                f"Backend rejected notes update for {item.id}: "
                f"{response.status_code} {response.text}"
            )
            raise WriteError(
                f"API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

    def close(self) -> None:
        self._http.close()
