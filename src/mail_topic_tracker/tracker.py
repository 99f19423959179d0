"""Sync orchestration - classify new messages, update the report, then the state."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Callable, Iterable

from .aggregator import aggregate
from .attachments import save_attachments
from .classifier import detect_topic
from .config import TrackerConfig
from .constants import DATE_FORMAT
from .counterparty import derive_company, derive_window
from .display import console, create_progress
from .gmail_client import fetch_attachments, iter_message_pages
from .models import Attachment, MailMessage, MessageRow, SyncResult, SyncState, TopicBuckets
from .report import TopicWorkbook
from .state import load_state, save_state

log = logging.getLogger(__name__)

Downloader = Callable[[MailMessage], list[Attachment]]


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def local_received(message: MailMessage) -> datetime:
    """The message's received time in the machine's local time zone."""
    received = message.received or datetime.now(timezone.utc)
    return received.astimezone()


def build_row(
    message: MailMessage,
    saved_paths: Iterable[str] = (),
) -> MessageRow:
    """Derive the report row for a message."""
    paths = tuple(p for p in saved_paths if p)
    return MessageRow(
        date_local=local_received(message).strftime(DATE_FORMAT),
        from_name=message.sender_name,
        from_address=message.sender_email,
        company=derive_company(message.sender_email),
        window=derive_window(message.sender_email, message.to, message.cc),
        subject=message.subject,
        is_read=_yes_no(message.is_read),
        has_attachments=_yes_no(message.has_attachments),
        attachment_count=len(paths),
        attachment_paths=paths,
        message_id=message.message_id,
    )


def classify_messages(
    pages: Iterable[Iterable[MailMessage]],
    state: SyncState,
    attachments_root: Path,
    download: Downloader,
    folder_name: Callable[[str], str] = lambda topic: topic,
    max_messages: int | None = None,
    on_message: Callable[[], None] | None = None,
) -> tuple[TopicBuckets, int, int]:
    """Turn new messages into topic buckets, updating ``state`` in place.

    Messages already in ``state`` are skipped without touching it.
    ``folder_name`` maps a topic to the name of its attachment folder.
    Returns (buckets, processed, skipped).
    """
    buckets = TopicBuckets()
    processed = skipped = 0

    for page in pages:
        for message in page:
            if not message.message_id:
                continue
            if state.is_processed(message.message_id):
                skipped += 1
                continue

            topic = buckets.key_for(
                detect_topic(message.subject, message.preview, message.sender_email)
            )

            saved: list[str] = []
            if message.has_attachments:
                saved = save_attachments(
                    attachments_root,
                    folder_name(topic),
                    local_received(message),
                    download(message),
                )

            buckets.add(topic, build_row(message, saved))
            state.mark_processed(message.message_id, message.received)
            processed += 1
            log.debug("Message %s -> topic %r", message.message_id, topic)

            if on_message:
                on_message()
            if max_messages and processed >= max_messages:
                log.info("Reached the limit of %d new messages", max_messages)
                return buckets, processed, skipped

    return buckets, processed, skipped


def run_sync(
    pages: Iterable[Iterable[MailMessage]],
    state: SyncState,
    workbook: TopicWorkbook,
    attachments_root: Path,
    download: Downloader,
    max_messages: int | None = None,
    now: datetime | None = None,
    on_message: Callable[[], None] | None = None,
) -> SyncResult:
    """Process new messages and rewrite the report.

    ``state`` is not modified; the updated copy is returned in the result
    and must only be persisted after this function returns.
    """
    new_state = state.copy()
    buckets, processed, skipped = classify_messages(
        pages,
        new_state,
        attachments_root,
        download,
        folder_name=workbook.sheet_title_for,
        max_messages=max_messages,
        on_message=on_message,
    )

    for topic, rows in buckets.items():
        workbook.append_rows(topic, rows)

    summaries = aggregate(workbook.all_topic_rows(), attachments_root, now=now)
    workbook.write_overview(summaries)
    workbook.save()

    return SyncResult(
        state=new_state,
        rows_by_topic=buckets.as_dict(),
        processed=processed,
        skipped=skipped,
        summaries=summaries,
        workbook_path=str(workbook.path),
    )


def sync(service, config: TrackerConfig, now: datetime | None = None) -> SyncResult:
    """Full run: load state, fetch, classify, write the report, save state."""
    config.output_root.mkdir(parents=True, exist_ok=True)
    config.attachments_dir.mkdir(parents=True, exist_ok=True)

    state = load_state(config.state_path)
    if state.last_received_utc is None:
        console.print("[dim]No previous sync found, reading the whole mailbox.[/dim]")
    else:
        console.print(f"[dim]Reading messages since {state.last_received_utc.isoformat()}[/dim]")

    workbook = TopicWorkbook(config.workbook_path)
    pages = iter_message_pages(
        service,
        since=state.last_received_utc,
        query=config.query,
        page_size=config.page_size,
    )

    with create_progress("Processing messages") as progress:
        task = progress.add_task("processing", total=config.max_messages)
        result = run_sync(
            pages,
            state,
            workbook,
            config.attachments_dir,
            download=partial(fetch_attachments, service),
            max_messages=config.max_messages,
            now=now,
            on_message=lambda: progress.advance(task),
        )

    # Only now that the workbook is on disk may messages count as seen.
    save_state(config.state_path, result.state)
    log.info("Processed %d new messages, skipped %d", result.processed, result.skipped)
    return result
