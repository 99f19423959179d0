"""Rich-based display functions for Mail Topic Tracker."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .constants import DATE_FORMAT
from .models import SyncResult, SyncState, TopicSummary

console = Console()


def _recent_color(summary: TopicSummary) -> str:
    """Highlight topics with recent or unread traffic."""
    if summary.unread and summary.last_7_days:
        return "red"
    if summary.last_7_days:
        return "yellow"
    return "white"


def display_summary(summaries: list[TopicSummary], limit: int | None = None) -> None:
    """Display topic summaries, most recent first."""
    shown = summaries[:limit] if limit else summaries

    table = Table(title="Topics")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Topic")
    table.add_column("Total", justify="right")
    table.add_column("Unread", justify="right")
    table.add_column("Attach.", justify="right")
    table.add_column("7 Days", justify="right")
    table.add_column("Latest")
    table.add_column("Latest Sender")
    table.add_column("Latest Subject", overflow="ellipsis", max_width=50)

    total_messages = 0
    for idx, s in enumerate(shown, start=1):
        color = _recent_color(s)
        total_messages += s.total
        table.add_row(
            str(idx),
            f"[{color}]{s.topic}[/{color}]",
            str(s.total),
            str(s.unread),
            str(s.with_attachments),
            f"[{color}]{s.last_7_days}[/{color}]",
            s.latest_date.strftime(DATE_FORMAT) if s.latest_date else "",
            s.latest_sender,
            s.latest_subject,
        )

    console.print(table)
    console.print(
        Panel(
            f"Topics shown: {len(shown)} of {len(summaries)}  |  "
            f"Messages: {total_messages}",
            title="Summary",
        )
    )


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress bar."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def display_sync_result(result: SyncResult) -> None:
    """Display the outcome of a sync run."""
    lines = [
        f"[bold]New messages:[/bold] {result.processed}",
        f"[bold]Already seen:[/bold] {result.skipped}",
        f"[bold]Topics touched:[/bold] {len(result.rows_by_topic)}",
    ]
    for topic, rows in result.rows_by_topic.items():
        lines.append(f"  - {topic} ({len(rows)})")
    if result.workbook_path:
        lines.append("")
        lines.append(f"[bold]Report:[/bold] {result.workbook_path}")

    console.print(Panel("\n".join(lines), title="Sync"))


def display_state(state: SyncState, path: str) -> None:
    """Display the persisted sync state."""
    last = state.last_received_utc.isoformat() if state.last_received_utc else "never"
    console.print(f"[bold]State file:[/bold] {path}")
    console.print(f"[bold]Last received (UTC):[/bold] {last}")
    console.print(f"[bold]Processed messages:[/bold] {len(state.processed_ids)}")
