"""CLI entry point for Mail Topic Tracker."""

from __future__ import annotations

import logging

import click

from . import __version__
from .aggregator import aggregate
from .auth import check_auth, get_gmail_service
from .config import ConfigError, TrackerConfig, load_config
from .constants import EXIT_CONFIG_ERROR, EXIT_FAILURE
from .display import console, display_state, display_summary, display_sync_result
from .export import export_summary
from .log import configure_logging
from .models import TopicSummary
from .report import TopicWorkbook
from .state import load_state, reset_state
from .tracker import sync

log = logging.getLogger(__name__)


class ConfigurationFailed(click.ClickException):
    exit_code = EXIT_CONFIG_ERROR


class SyncFailed(click.ClickException):
    exit_code = EXIT_FAILURE


def _load_summaries(config: TrackerConfig) -> list[TopicSummary]:
    if not config.workbook_path.exists():
        raise click.ClickException(
            f"No report found at {config.workbook_path}. Run 'sync' first."
        )
    workbook = TopicWorkbook(config.workbook_path)
    return aggregate(workbook.all_topic_rows(), config.attachments_dir)


@click.group()
@click.version_option(version=__version__, prog_name="mail-topic-tracker")
@click.option(
    "-o",
    "--output-root",
    default=None,
    type=click.Path(file_okay=False),
    help="Folder holding the report, attachments and state file.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, output_root: str | None, verbose: bool) -> None:
    """Mail Topic Tracker - sort your mailbox into per-topic Excel reports."""
    try:
        config = load_config(output_root=output_root, log_level="DEBUG" if verbose else None)
    except ConfigError as e:
        raise ConfigurationFailed(str(e)) from e
    configure_logging(config.log_level)
    ctx.obj = config


@cli.command(name="sync")
@click.option("-q", "--query", default=None, help="Extra Gmail search query (e.g. 'label:work').")
@click.option("--page-size", default=None, type=int, help="Messages per page.")
@click.option("-m", "--max-messages", default=None, type=int, help="Stop after this many new messages.")
@click.pass_obj
def sync_cmd(
    config: TrackerConfig,
    query: str | None,
    page_size: int | None,
    max_messages: int | None,
) -> None:
    """Fetch new messages, classify them and update the report."""
    if query is not None:
        config.query = query
    if page_size is not None:
        config.page_size = page_size
    if max_messages is not None:
        config.max_messages = max_messages

    try:
        config.validate()
        service = get_gmail_service(config.credentials_path, config.token_path)
    except ConfigError as e:
        raise ConfigurationFailed(str(e)) from e
    except Exception as e:  # noqa: BLE001
        log.debug("Authentication failed", exc_info=True)
        raise SyncFailed(str(e)) from e

    try:
        result = sync(service, config)
    except Exception as e:  # noqa: BLE001
        log.debug("Sync failed", exc_info=True)
        raise SyncFailed(str(e)) from e

    display_sync_result(result)
    console.print(
        f"Done. Processed {result.processed} new messages. Updated: {result.workbook_path}"
    )


@cli.command()
@click.option("-n", "--limit", default=None, type=int, help="Show only the N most recent topics.")
@click.pass_obj
def summary(config: TrackerConfig, limit: int | None) -> None:
    """Show per-topic statistics from the report."""
    summaries = _load_summaries(config)
    if not summaries:
        console.print("[dim]The report has no topics yet.[/dim]")
        return
    display_summary(summaries, limit=limit)


@cli.command(name="export")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="csv",
    help="Output format.",
)
@click.option("-f", "--file", "output", required=True, help="Output file path.")
@click.pass_obj
def export_cmd(config: TrackerConfig, fmt: str, output: str) -> None:
    """Export the topic summary to CSV or JSON."""
    export_summary(_load_summaries(config), format=fmt, output_path=output)


@cli.command()
@click.pass_obj
def auth(config: TrackerConfig) -> None:
    """Test Gmail authentication."""
    if not check_auth(config.credentials_path, config.token_path):
        raise SystemExit(EXIT_CONFIG_ERROR)


@cli.group(name="state")
def state_group() -> None:
    """Inspect or reset the sync state."""


@state_group.command(name="info")
@click.pass_obj
def state_info(config: TrackerConfig) -> None:
    """Show the high-water mark and processed message count."""
    display_state(load_state(config.state_path), str(config.state_path))


@state_group.command(name="reset")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def state_reset(config: TrackerConfig, yes: bool) -> None:
    """Forget processed messages so the next sync starts from scratch."""
    if not yes:
        click.confirm(
            "The next sync will re-read the whole mailbox and append duplicate rows. Continue?",
            abort=True,
        )
    if reset_state(config.state_path):
        console.print("[green]State reset.[/green]")
    else:
        console.print("[dim]No state file to reset.[/dim]")
