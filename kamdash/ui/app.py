"""Streamlit UI for kamdash.

One page: KPI tiles, three swimlanes of pending actionables, and per-item
snooze/comment, notes and complete actions. Source, KAM, view and search
filters live in the sidebar and header.
"""

from __future__ import annotations

import time
from datetime import date

import streamlit as st

from kamdash.actions import (
    QUICK_SNOOZE_DAYS,
    complete_item,
    snooze_date_in,
    submit_comment,
    validate_comment,
)
from kamdash.airtable.fetcher import Fetcher
from kamdash.backend.writer import NotesWriter, ValidationError
from kamdash.config import Config
from kamdash.models import SOURCE_LABELS, SOURCES, ActionableItem
from kamdash.state.model import (
    ALL_SOURCES,
    TIMELINE_10_PLUS,
    TIMELINE_30_PLUS,
    TIMELINE_45_PLUS,
    TIMELINE_ALL,
    VIEW_ALL,
    VIEW_NEW,
)
from kamdash.state.persistence import CompletedIdsFile
from kamdash.state.store import DashboardStore
from kamdash.ui.components import (
    SWIMLANE_EMPTY,
    SWIMLANE_TITLES,
    render_item_card,
    render_notes,
    snooze_preview,
)

COMPLETE_DELAY_SECONDS = 4  # lets the user see the item is being completed

KPI_TILES = [
    (TIMELINE_ALL, "Total Pending", "total"),
    (TIMELINE_45_PLUS, "Critical (45+ Days)", "critical"),
    (TIMELINE_30_PLUS, "Attention (30+ Days)", "attention"),
    (TIMELINE_10_PLUS, "Normal (10+ Days)", "normal"),
]


def _get_services() -> tuple[DashboardStore, NotesWriter]:
    """One store and writer per browser session."""
    if "store" not in st.session_state:
        config = Config.load()
        fetcher = Fetcher.from_config(config)
        store = DashboardStore(fetcher, CompletedIdsFile(config.state_path))
        with st.spinner("Loading actionables..."):
            store.refresh()
        st.session_state.store = store
        st.session_state.writer = NotesWriter.from_config(config, fetcher)
    return st.session_state.store, st.session_state.writer


def main() -> None:
    st.set_page_config(page_title="KAM Actionables", page_icon="\U0001f4ca", layout="wide")

    config = Config.load()
    issues = config.validate()
    if issues:
        st.title("KAM Actionables")
        for issue in issues:
            st.error(f"Config error: {issue}")
        return

    store, writer = _get_services()
    if store.run_due_refresh():
        st.toast("Data refreshed")

    _flash_messages()
    render_sidebar(store)
    render_header(store)

    view = store.view()
    if view.degraded_sources:
        names = ", ".join(SOURCE_LABELS.get(s, s) for s in view.degraded_sources)
        st.warning(f"Data may be incomplete: fetching {names} failed partway. Try refreshing.")

    render_kpis(store)
    today = date.today()
    for lane in ("critical", "attention", "normal"):
        render_swimlane(store, writer, lane, getattr(view.swimlanes, lane), today)

    if store.refresh_pending():
        # Pick up the delayed silent refresh once it is due
        time.sleep(1)
        st.rerun()


def _flash(message: str, ok: bool = True) -> None:
    st.session_state.setdefault("flash", []).append((ok, message))


def _flash_messages() -> None:
    for ok, message in st.session_state.pop("flash", []):
        if ok:
            st.toast(message, icon="✅")
        else:
            st.error(message)


def render_sidebar(store: DashboardStore) -> None:
    view = store.view()
    state = store.state

    with st.sidebar:
        st.header("\U0001f4ca KAM Actionables")

        options = [ALL_SOURCES, *SOURCES]
        labels = {ALL_SOURCES: "All Actionables", **SOURCE_LABELS}
        source = st.radio(
            "Source",
            options,
            index=options.index(state.source),
            format_func=lambda s: labels[s],
        )
        if source != state.source:
            store.set_source(source)
            st.rerun()

        kams = st.multiselect(
            "KAM Filter",
            view.all_kams,
            default=[k for k in state.selected_kams if k in view.all_kams],
            placeholder="All KAMs",
        )
        if tuple(kams) != state.selected_kams:
            store.set_kams(kams)
            st.rerun()

        st.subheader("Leaderboard")
        if not view.leaderboard:
            st.caption("No pending items")
        for stat in view.leaderboard:
            st.markdown(f"**{stat.name}** \u2014 {stat.count}")

        st.divider()
        if st.button("Refresh Data", use_container_width=True):
            with st.spinner("Refreshing..."):
                store.refresh()
            st.rerun()


def render_header(store: DashboardStore) -> None:
    state = store.state
    col1, col2 = st.columns([3, 1])
    with col1:
        query = st.text_input(
            "Search",
            value=state.search,
            placeholder="Search candidate or company...",
            label_visibility="collapsed",
        )
        if query != state.search:
            store.set_search(query)
            st.rerun()
    with col2:
        view = st.segmented_control(
            "View",
            [VIEW_ALL, VIEW_NEW],
            default=state.view,
            format_func=lambda v: "All" if v == VIEW_ALL else "New",
            label_visibility="collapsed",
        )
        if view and view != state.view:
            store.set_view(view)
            st.rerun()


def render_kpis(store: DashboardStore) -> None:
    kpis = store.view().kpis
    cols = st.columns(len(KPI_TILES))
    for col, (timeline, label, attr) in zip(cols, KPI_TILES):
        with col:
            st.metric(label, getattr(kpis, attr))
            active = store.state.timeline == timeline
            if st.button(
                "Showing" if active else "Show",
                key=f"kpi_{timeline}",
                type="primary" if active else "secondary",
                use_container_width=True,
            ):
                store.set_timeline(timeline)
                st.rerun()


def render_swimlane(
    store: DashboardStore,
    writer: NotesWriter,
    lane: str,
    items: list[ActionableItem],
    today: date,
) -> None:
    st.subheader(f"{SWIMLANE_TITLES[lane]} ({len(items)})")
    if not items:
        st.caption(SWIMLANE_EMPTY[lane])
        return

    cols = st.columns(3)
    for i, item in enumerate(items):
        with cols[i % 3], st.container(border=True):
            render_item_card(item, today)
            _render_card_actions(store, writer, item)


def _render_card_actions(store: DashboardStore, writer: NotesWriter, item: ActionableItem) -> None:
    completing = st.session_state.get("completing") == item.id
    c1, c2, c3 = st.columns(3)

    if c1.button("Snooze", key=f"snooze_{item.id}"):
        store.mark_handled(item.id)
        action_dialog(item.id)

    if c2.button("Notes", key=f"notes_{item.id}"):
        notes_dialog(item)

    if c3.button(
        "Completing..." if completing else "Complete",
        key=f"complete_{item.id}",
        disabled=completing,
        type="primary",
    ):
        st.session_state.completing = item.id
        with st.spinner(f"Completing {item.candidate_name}..."):
            time.sleep(COMPLETE_DELAY_SECONDS)
            outcome = complete_item(store, writer, item)
        st.session_state.completing = None
        _flash(outcome.message, outcome.ok)
        st.rerun()


@st.dialog("Snooze / Comment")
def action_dialog(item_id: str) -> None:
    store: DashboardStore = st.session_state.store
    writer: NotesWriter = st.session_state.writer
    item = store.get_item(item_id)
    if item is None:
        st.info("This item is no longer pending.")
        return

    st.caption(f"{item.candidate_name} • {item.company}")

    quick = st.radio(
        "Snooze until",
        ["None", *[f"{d} Day{'s' if d > 1 else ''}" for d in QUICK_SNOOZE_DAYS], "Custom"],
        horizontal=True,
    )
    snooze_date: str | None = None
    if quick == "Custom":
        picked = st.date_input("Custom date", min_value=date.today())
        snooze_date = picked.isoformat() if picked else None
    elif quick != "None":
        snooze_date = snooze_date_in(int(quick.split()[0]))

    preview = snooze_preview(snooze_date, date.today())
    if preview:
        st.caption(preview)

    comment = st.text_area("Comment", placeholder="Add reasoning or context...", height=120)

    if st.button("Confirm", type="primary"):
        try:
            validate_comment(comment, snooze_date)
        except ValidationError as e:
            st.error(str(e))
            return
        outcome = submit_comment(store, writer, item, comment, snooze_date)
        _flash(outcome.message, outcome.ok)
        st.rerun()


@st.dialog("Notes", width="large")
def notes_dialog(item: ActionableItem) -> None:
    st.caption(f"{item.candidate_name} • {item.company} • {item.role}")
    render_notes(item)


if __name__ == "__main__":
    main()
