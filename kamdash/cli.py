"""CLI entry point for kamdash."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

import typer
from rich import print as rprint
from rich.table import Table

from kamdash.actions import complete_item, submit_comment
from kamdash.airtable.fetcher import Fetcher
from kamdash.backend.writer import NotesWriter
from kamdash.config import Config
from kamdash.models import SOURCE_LABELS, ActionableItem
from kamdash.notes import latest_note_preview
from kamdash.state.model import ALL_SOURCES, VIEW_ALL, VIEW_NEW
from kamdash.state.persistence import CompletedIdsFile
from kamdash.state.store import DashboardStore

app = typer.Typer(help="Triage pending KAM actionables from the Post-TBR and IC bases.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config() -> Config:
    config = Config.load()
    issues = config.validate()
    if issues:
        for issue in issues:
            rprint(f"[red]Config error: {issue}[/red]")
        raise typer.Exit(1)
    return config


def _open_store(config: Config) -> tuple[DashboardStore, Fetcher]:
    fetcher = Fetcher.from_config(config)
    store = DashboardStore(fetcher, CompletedIdsFile(config.state_path))
    store.refresh()
    for source in store.state.degraded_sources:
        rprint(
            f"[yellow]Data may be incomplete: fetching "
            f"{SOURCE_LABELS.get(source, source)} failed partway.[/yellow]"
        )
    return store, fetcher


def _find_item(store: DashboardStore, record_id: str) -> ActionableItem:
    item = store.get_item(record_id)
    if item is None:
        rprint(f"[red]No pending actionable with id {record_id}[/red]")
        raise typer.Exit(1)
    return item


def _lane_table(title: str, items: list[ActionableItem]) -> Table:
    table = Table(title=f"{title} ({len(items)})", title_justify="left")
    table.add_column("ID", style="dim")
    table.add_column("Days", justify="right")
    table.add_column("Candidate")
    table.add_column("Company")
    table.add_column("Status")
    table.add_column("KAM")
    table.add_column("Snooze")
    table.add_column("Latest note", overflow="fold", max_width=40)
    for item in items:
        table.add_row(
            item.id,
            str(item.pending_days),
            item.candidate_name,
            item.company,
            item.status,
            item.kam_label,
            item.snooze_until or "",
            latest_note_preview(item.display_notes),
        )
    return table


@app.command()
def ui(
    port: int = typer.Option(8501, help="Port for the Streamlit server"),
) -> None:
    """Launch the dashboard in the browser."""
    app_path = Path(__file__).resolve().parent / "ui" / "app.py"
    raise typer.Exit(
        subprocess.call(
            [sys.executable, "-m", "streamlit", "run", str(app_path), "--server.port", str(port)]
        )
    )


@app.command()
def summary(
    source: str = typer.Option(ALL_SOURCES, help="ALL, POST_TBR or IC"),
    kam: list[str] = typer.Option([], help="Only these KAMs (repeatable)"),
    search: str = typer.Option("", help="Filter by candidate or company name"),
    new: bool = typer.Option(False, "--new", help="Only items with no notes or an expired snooze"),
) -> None:
    """Print KPI counts, swimlanes and the KAM leaderboard."""
    config = _load_config()
    store, fetcher = _open_store(config)

    try:
        store.set_source(source.upper())
        store.set_view(VIEW_NEW if new else VIEW_ALL)
        store.set_search(search)
        store.set_kams(kam)
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)
    finally:
        fetcher.close()

    view = store.view()
    k = view.kpis
    rprint("[bold]KAM actionables:[/bold]")
    rprint(f"  Total pending:        {k.total}")
    rprint(f"  [red]Critical (45+ days):  {k.critical}[/red]")
    rprint(f"  [yellow]Attention (30-44):    {k.attention}[/yellow]")
    rprint(f"  [green]Normal (<30):         {k.normal}[/green]")
    rprint(f"  New:                  {k.new}")

    rprint(_lane_table("Critical (45+ Days)", view.swimlanes.critical))
    rprint(_lane_table("Attention (30-44 Days)", view.swimlanes.attention))
    rprint(_lane_table("Normal (10-29 Days)", view.swimlanes.normal))

    if view.leaderboard:
        rprint("\n[bold]Leaderboard:[/bold]")
        for stat in view.leaderboard:
            rprint(f"  {stat.name}: {stat.count}")


@app.command()
def comment(
    record_id: str = typer.Argument(help="Airtable record id of the actionable"),
    text: str = typer.Argument("", help="Comment to append to the notes"),
    snooze: str = typer.Option(None, help="Snooze until this date (YYYY-MM-DD)"),
) -> None:
    """Append a comment (and optional snooze) to an actionable's notes."""
    config = _load_config()
    store, fetcher = _open_store(config)
    writer = NotesWriter.from_config(config, fetcher)

    try:
        item = _find_item(store, record_id)
        outcome = submit_comment(store, writer, item, text, snooze)
    finally:
        writer.close()
        fetcher.close()

    if not outcome.ok:
        rprint(f"[red]{outcome.message}[/red]")
        raise typer.Exit(1)
    rprint(f"[green]{outcome.message}[/green]")


@app.command()
def complete(
    record_id: str = typer.Argument(help="Airtable record id of the actionable"),
) -> None:
    """Mark an actionable complete."""
    config = _load_config()
    store, fetcher = _open_store(config)
    writer = NotesWriter.from_config(config, fetcher)

    try:
        item = _find_item(store, record_id)
        outcome = complete_item(store, writer, item)
    finally:
        writer.close()
        fetcher.close()

    if not outcome.ok:
        rprint(f"[red]{outcome.message}[/red]")
        raise typer.Exit(1)
    rprint(f"[green]{outcome.message}[/green]")


if __name__ == "__main__":
    app()
