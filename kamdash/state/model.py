"""Dashboard state snapshot and filter values."""

from __future__ import annotations

from dataclasses import dataclass, field

from kamdash.models import ActionableItem

# Source filter
ALL_SOURCES = "ALL"

# View filter
VIEW_ALL = "ALL"
VIEW_NEW = "NEW"
VIEWS = (VIEW_ALL, VIEW_NEW)

# Pending-days timeline filter (selected from the KPI tiles)
TIMELINE_ALL = "ALL"
TIMELINE_10_PLUS = "10_PLUS"
TIMELINE_30_PLUS = "30_PLUS"
TIMELINE_45_PLUS = "45_PLUS"
TIMELINES = (TIMELINE_ALL, TIMELINE_10_PLUS, TIMELINE_30_PLUS, TIMELINE_45_PLUS)


@dataclass(frozen=True)
class DashboardState:
    items: tuple[ActionableItem, ...] = ()
    completed_ids: frozenset[str] = frozenset()  # persisted across sessions
    handled_ids: frozenset[str] = frozenset()  # this session only
    source: str = ALL_SOURCES
    view: str = VIEW_ALL
    selected_kams: tuple[str, ...] = ()  # empty = all KAMs
    search: str = ""
    timeline: str = TIMELINE_ALL
    loading: bool = False
    degraded_sources: tuple[str, ...] = field(default=())
