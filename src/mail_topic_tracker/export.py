"""Export topic summaries to CSV or JSON."""

import csv
import json

from .constants import DATE_FORMAT
from .display import console
from .models import TopicSummary

FIELDNAMES = [
    "topic",
    "total",
    "unread",
    "with_attachments",
    "last_7_days",
    "latest_date",
    "latest_sender",
    "latest_subject",
    "folder",
]


def summary_record(summary: TopicSummary) -> dict:
    return {
        "topic": summary.topic,
        "total": summary.total,
        "unread": summary.unread,
        "with_attachments": summary.with_attachments,
        "last_7_days": summary.last_7_days,
        "latest_date": summary.latest_date.strftime(DATE_FORMAT) if summary.latest_date else "",
        "latest_sender": summary.latest_sender,
        "latest_subject": summary.latest_subject,
        "folder": summary.folder,
    }


def export_summary(summaries: list[TopicSummary], format: str, output_path: str) -> None:
    """Export topic summaries to a file.

    Args:
        summaries: Summaries in the order they should be written.
        format: Output format, either 'csv' or 'json'.
        output_path: Path to write the output file.
    """
    rows = [summary_record(s) for s in summaries]

    if format == "csv":
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
            writer.writeheader()
            writer.writerows(rows)
    elif format == "json":
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2, ensure_ascii=False)
    else:
        raise ValueError(f"Unsupported export format: {format}")

    console.print(f"Results saved to {output_path}")
