"""Derived views over a DashboardState snapshot.

Each selector is a pure function of ``(state, today)``. They form a chain:

    base_actionables -> source_search_filtered -> view_filtered
        -> kam_filtered -> displayed_items -> swimlanes

KPI counts and the KAM leaderboard deliberately read from different depths
of that chain: KPIs ignore the timeline filter (the tiles select it) and the
leaderboard ignores the KAM selection (it is the KAM picker).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from kamdash.models import ActionableItem
from kamdash.notes import has_completion_marker, is_snooze_elapsed
from kamdash.state.model import (
    ALL_SOURCES,
    TIMELINE_10_PLUS,
    TIMELINE_30_PLUS,
    TIMELINE_45_PLUS,
    VIEW_NEW,
    DashboardState,
)

CRITICAL_DAYS = 45
ATTENTION_DAYS = 30
NORMAL_DAYS = 10


@dataclass
class Swimlanes:
    critical: list[ActionableItem] = field(default_factory=list)  # 45+ days
    attention: list[ActionableItem] = field(default_factory=list)  # 30-44 days
    normal: list[ActionableItem] = field(default_factory=list)  # under 30 days


@dataclass
class KpiCounts:
    total: int = 0
    critical: int = 0
    attention: int = 0
    normal: int = 0
    new: int = 0


@dataclass
class KamStat:
    name: str
    count: int


@dataclass
class DashboardView:
    """Every slice the presentation layer reads."""

    items: list[ActionableItem]
    swimlanes: Swimlanes
    kpis: KpiCounts
    leaderboard: list[KamStat]
    all_kams: list[str]
    degraded_sources: list[str]


def base_actionables(state: DashboardState) -> list[ActionableItem]:
    """Items not completed locally and without a completion marker."""
    return [
        item
        for item in state.items
        if item.id not in state.completed_ids
        and not has_completion_marker(item.display_notes)
    ]


def matches_search(item: ActionableItem, query: str) -> bool:
    query = query.strip().lower()
    if not query:
        return True
    return query in item.candidate_name.lower() or query in item.company.lower()


def is_snoozed(item: ActionableItem, today: date) -> bool:
    """Snooze date set and still in the future."""
    return bool(item.snooze_until) and not is_snooze_elapsed(item.snooze_until, today)


def source_search_filtered(state: DashboardState, today: date) -> list[ActionableItem]:
    """Source and search filters; actively snoozed items are hidden in every view."""
    return [
        item
        for item in base_actionables(state)
        if (state.source == ALL_SOURCES or item.source == state.source)
        and matches_search(item, state.search)
        and not is_snoozed(item, today)
    ]


def is_new(item: ActionableItem, handled_ids: frozenset[str], today: date) -> bool:
    """No notes yet, or the latest snooze has run out, and not handled this session."""
    if item.id in handled_ids:
        return False
    return not item.display_notes or is_snooze_elapsed(item.snooze_until, today)


def view_filtered(state: DashboardState, today: date) -> list[ActionableItem]:
    items = source_search_filtered(state, today)
    if state.view != VIEW_NEW:
        return items
    return [item for item in items if is_new(item, state.handled_ids, today)]


def kam_filtered(state: DashboardState, today: date) -> list[ActionableItem]:
    items = view_filtered(state, today)
    if not state.selected_kams:
        return items
    selected = set(state.selected_kams)
    return [item for item in items if item.kam in selected or item.kam_label in selected]


def in_timeline(item: ActionableItem, timeline: str) -> bool:
    days = item.pending_days
    if timeline == TIMELINE_45_PLUS:
        return days >= CRITICAL_DAYS
    if timeline == TIMELINE_30_PLUS:
        return ATTENTION_DAYS <= days < CRITICAL_DAYS
    if timeline == TIMELINE_10_PLUS:
        return NORMAL_DAYS <= days < ATTENTION_DAYS
    return True


def displayed_items(state: DashboardState, today: date) -> list[ActionableItem]:
    return [item for item in kam_filtered(state, today) if in_timeline(item, state.timeline)]


def lane_sort_key(item: ActionableItem, today: date) -> tuple[bool, int]:
    """Expired snoozes first, then the longest pending."""
    return (not is_snooze_elapsed(item.snooze_until, today), -item.pending_days)


def bucket_swimlanes(items: list[ActionableItem], today: date) -> Swimlanes:
    lanes = Swimlanes()
    for item in items:
        if item.pending_days >= CRITICAL_DAYS:
            lanes.critical.append(item)
        elif item.pending_days >= ATTENTION_DAYS:
            lanes.attention.append(item)
        else:
            lanes.normal.append(item)

    for lane in (lanes.critical, lanes.attention, lanes.normal):
        lane.sort(key=lambda i: lane_sort_key(i, today))
    return lanes


def swimlanes(state: DashboardState, today: date) -> Swimlanes:
    return bucket_swimlanes(displayed_items(state, today), today)


def kpi_counts(state: DashboardState, today: date) -> KpiCounts:
    items = kam_filtered(state, today)
    return KpiCounts(
        total=len(items),
        critical=sum(1 for i in items if i.pending_days >= CRITICAL_DAYS),
        attention=sum(1 for i in items if ATTENTION_DAYS <= i.pending_days < CRITICAL_DAYS),
        normal=sum(1 for i in items if i.pending_days < ATTENTION_DAYS),
        new=sum(1 for i in items if is_new(i, state.handled_ids, today)),
    )


def kam_leaderboard(state: DashboardState, today: date) -> list[KamStat]:
    counts: dict[str, int] = {}
    for item in view_filtered(state, today):
        counts[item.kam_label] = counts.get(item.kam_label, 0) + 1
    stats = [KamStat(name=name, count=count) for name, count in counts.items()]
    stats.sort(key=lambda s: (-s.count, s.name))
    return stats


def all_kams(state: DashboardState) -> list[str]:
    return sorted({item.kam for item in base_actionables(state) if item.kam})


def derive_view(state: DashboardState, today: date) -> DashboardView:
    return DashboardView(
        items=displayed_items(state, today),
        swimlanes=swimlanes(state, today),
        kpis=kpi_counts(state, today),
        leaderboard=kam_leaderboard(state, today),
        all_kams=all_kams(state),
        degraded_sources=list(state.degraded_sources),
    )
