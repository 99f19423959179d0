"""Roll per-message rows up into per-topic summary statistics."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from .attachments import topic_folder
from .constants import DATE_FORMAT, RECENT_DAYS
from .models import MessageRow, TopicSummary


def parse_row_date(value: object) -> datetime | None:
    """Parse a report date cell; None when it is empty or unparseable."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        return None


def summarize_topic(
    topic: str,
    rows: Iterable[MessageRow],
    folder: str = "",
    now: datetime | None = None,
) -> TopicSummary:
    """Compute the summary for a single topic.

    ``unread`` counts rows whose read flag is "No".  Rows dated in the
    future count towards ``last_7_days``.
    """
    now = now or datetime.now()
    window = timedelta(days=RECENT_DAYS)
    summary = TopicSummary(topic=topic, folder=folder)

    for row in rows:
        summary.total += 1
        if row.is_read.strip().lower() == "no":
            summary.unread += 1
        if row.has_attachments.strip().lower() == "yes":
            summary.with_attachments += 1

        date = parse_row_date(row.date_local)
        if date is None:
            continue
        if now - date <= window:
            summary.last_7_days += 1
        if summary.latest_date is None or date > summary.latest_date:
            summary.latest_date = date
            summary.latest_sender = row.from_name
            summary.latest_subject = row.subject

    return summary


def order_summaries(summaries: Iterable[TopicSummary]) -> list[TopicSummary]:
    """Most recent topic first; topics without a parseable date last."""
    return sorted(
        summaries,
        key=lambda s: s.latest_date or datetime.min,
        reverse=True,
    )


def aggregate(
    rows_by_topic: Mapping[str, Sequence[MessageRow]],
    attachments_root: Path,
    now: datetime | None = None,
) -> list[TopicSummary]:
    """Summarize every topic and order them by latest message."""
    now = now or datetime.now()
    summaries = [
        summarize_topic(
            topic,
            rows,
            folder=str(topic_folder(attachments_root, topic)),
            now=now,
        )
        for topic, rows in rows_by_topic.items()
    ]
    return order_summaries(summaries)
