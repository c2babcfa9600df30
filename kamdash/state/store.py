"""Single source of truth for the dashboard.

The store owns one immutable DashboardState and swaps it for a new snapshot
on every operation. Everything the UI shows comes from ``view()``, which runs
the pure selectors over the current snapshot.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date

from kamdash.airtable.fetcher import Fetcher
from kamdash.models import SOURCES, ActionableItem
from kamdash.normalize.transform import normalize_source
from kamdash.state.model import ALL_SOURCES, TIMELINES, VIEWS, DashboardState
from kamdash.state.persistence import CompletedIdsFile
from kamdash.state.selectors import DashboardView, derive_view

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotesPatch:
    """Notes values an optimistic update replaced, for rollback."""

    item_id: str
    display_notes: str
    snooze_until: str | None


class DashboardStore:
    def __init__(
        self,
        fetcher: Fetcher,
        completed_file: CompletedIdsFile,
        today: Callable[[], date] = date.today,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._completed_file = completed_file
        self._today = today
        self._clock = clock
        self._refresh_due_at: float | None = None
        self.state = DashboardState(completed_ids=completed_file.load())

    # -- Derived views -------------------------------------------------------

    def view(self) -> DashboardView:
        return derive_view(self.state, self._today())

    def get_item(self, item_id: str) -> ActionableItem | None:
        for item in self.state.items:
            if item.id == item_id:
                return item
        return None

    # -- Loading -------------------------------------------------------------

    def refresh(self, silent: bool = False) -> DashboardState:
        """Re-fetch both sources and replace the item collection wholesale.

        Local overlays are reconciled against the new data: completed ids no
        longer returned by either view are forgotten, and handled ids whose
        record now has notes or an active snooze are released. Never raises:
        if loading fails outright, the last items stay and both sources are
        marked degraded.
        """
        if not silent:
            self.state = replace(self.state, loading=True)

        try:
            items, degraded = self._load()
        except Exception as e:
            logger.error(f"Refresh failed, keeping the last loaded items: {e!r}")
            self.state = replace(self.state, degraded_sources=SOURCES)
        else:
            self._apply(items, degraded)
        finally:
            if not silent:
                self.state = replace(self.state, loading=False)

        return self.state

    def _load(self) -> tuple[list[ActionableItem], tuple[str, ...]]:
        results = self._fetcher.fetch_all()
        items: list[ActionableItem] = []
        for result in results:
            items.extend(normalize_source(result.source, result.records))
        return items, tuple(r.source for r in results if not r.complete)

    def _apply(self, items: list[ActionableItem], degraded: tuple[str, ...]) -> None:
        # A partial fetch can't tell "gone upstream" from "not loaded"
        completed = self.state.completed_ids
        if not degraded:
            fetched_ids = {item.id for item in items}
            completed = frozenset(i for i in completed if i in fetched_ids)
        handled = self._reconcile_handled(items)

        if completed != self.state.completed_ids:
            self._completed_file.save(completed)

        self.state = replace(
            self.state,
            items=tuple(items),
            completed_ids=completed,
            handled_ids=handled,
            degraded_sources=degraded,
        )
        logger.info(
            f"Loaded {len(items)} actionable(s)"
            + (f", incomplete sources: {', '.join(degraded)}" if degraded else "")
        )

    def _reconcile_handled(self, items: list[ActionableItem]) -> frozenset[str]:
        today = self._today().isoformat()
        by_id = {item.id: item for item in items}
        kept = set()
        for item_id in self.state.handled_ids:
            item = by_id.get(item_id)
            if item is not None:
                snoozed = bool(item.snooze_until) and item.snooze_until > today
                if item.display_notes or snoozed:
                    continue
            kept.add(item_id)
        return frozenset(kept)

    def schedule_refresh(self, delay: float) -> None:
        """Ask for a silent refresh once ``delay`` seconds have passed."""
        self._refresh_due_at = self._clock() + delay

    def refresh_pending(self) -> bool:
        return self._refresh_due_at is not None

    def run_due_refresh(self) -> bool:
        """Run the scheduled silent refresh if it is due. Returns True if it ran."""
        if self._refresh_due_at is None or self._clock() < self._refresh_due_at:
            return False
        self._refresh_due_at = None
        self.refresh(silent=True)
        return True

    # -- Local mutations -----------------------------------------------------

    def mark_complete(self, item_id: str) -> None:
        """Hide an item right away; the backend write follows separately."""
        completed = self.state.completed_ids | {item_id}
        self.state = replace(self.state, completed_ids=completed)
        self._completed_file.save(completed)

    def add_comment_optimistic(
        self, item_id: str, display_notes: str, snooze_until: str | None = None
    ) -> NotesPatch:
        """Overwrite an item's notes in memory before the write resolves.

        ``snooze_until`` of None leaves the current snooze date in place.
        Returns the replaced values for ``rollback``.
        """
        item = self.get_item(item_id)
        if item is None:
            raise KeyError(item_id)

        patch = NotesPatch(item_id, item.display_notes, item.snooze_until)
        updated = replace(
            item,
            display_notes=display_notes,
            snooze_until=snooze_until if snooze_until is not None else item.snooze_until,
        )
        self._replace_item(updated)
        return patch

    def rollback(self, patch: NotesPatch) -> None:
        item = self.get_item(patch.item_id)
        if item is None:
            return
        self._replace_item(
            replace(item, display_notes=patch.display_notes, snooze_until=patch.snooze_until)
        )

    def mark_handled(self, item_id: str) -> None:
        self.state = replace(self.state, handled_ids=self.state.handled_ids | {item_id})

    def _replace_item(self, updated: ActionableItem) -> None:
        items = tuple(updated if i.id == updated.id else i for i in self.state.items)
        self.state = replace(self.state, items=items)

    # -- Filters -------------------------------------------------------------

    def set_source(self, source: str) -> None:
        if source != ALL_SOURCES and source not in SOURCES:
            raise ValueError(f"Unknown source: {source}")
        self.state = replace(self.state, source=source)

    def set_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        self.state = replace(self.state, view=view)

    def set_timeline(self, timeline: str) -> None:
        if timeline not in TIMELINES:
            raise ValueError(f"Unknown timeline filter: {timeline}")
        self.state = replace(self.state, timeline=timeline)

    def set_search(self, query: str) -> None:
        self.state = replace(self.state, search=query)

    def set_kams(self, kams: list[str]) -> None:
        self.state = replace(self.state, selected_kams=tuple(kams))
