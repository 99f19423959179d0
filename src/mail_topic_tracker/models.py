"""Data models for Mail Topic Tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Attachment:
    """A file attachment downloaded from a message."""

    name: str
    content: bytes


@dataclass
class AttachmentRef:
    """A file part of a message that can be downloaded on demand."""

    name: str
    attachment_id: str = ""
    data: str = ""  # inline base64url payload, used when there is no attachment_id


@dataclass
class MailMessage:
    """Metadata for a single message as returned by the mail provider."""

    message_id: str
    subject: str = ""
    sender_name: str = ""
    sender_email: str = ""
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    received: datetime | None = None  # timezone-aware, UTC
    is_read: bool = False
    has_attachments: bool = False
    preview: str = ""  # body preview / snippet
    attachment_refs: list[AttachmentRef] = field(default_factory=list, repr=False)


@dataclass(frozen=True)
class MessageRow:
    """One report row per processed message."""

    date_local: str
    from_name: str
    from_address: str
    company: str
    window: str
    subject: str
    is_read: str  # "Yes" / "No"
    has_attachments: str  # "Yes" / "No"
    attachment_count: int
    attachment_paths: tuple[str, ...]
    message_id: str


@dataclass
class TopicSummary:
    """Summary statistics for one topic, recomputed every run."""

    topic: str
    total: int = 0
    unread: int = 0
    with_attachments: int = 0
    last_7_days: int = 0
    latest_date: datetime | None = None
    latest_sender: str = ""
    latest_subject: str = ""
    folder: str = ""


@dataclass
class SyncState:
    """Persisted high-water mark and processed message ids."""

    last_received_utc: datetime | None = None
    processed_ids: set[str] = field(default_factory=set)

    def copy(self) -> SyncState:
        return SyncState(self.last_received_utc, set(self.processed_ids))

    def is_processed(self, message_id: str) -> bool:
        return message_id in self.processed_ids

    def mark_processed(self, message_id: str, received_utc: datetime | None) -> None:
        """Record a processed message and advance the high-water mark."""
        self.processed_ids.add(message_id)
        if received_utc is not None and (
            self.last_received_utc is None or received_utc > self.last_received_utc
        ):
            self.last_received_utc = received_utc


@dataclass
class SyncResult:
    """Outcome of a sync run."""

    state: SyncState
    rows_by_topic: dict[str, list[MessageRow]] = field(default_factory=dict)
    processed: int = 0
    skipped: int = 0
    summaries: list[TopicSummary] = field(default_factory=list)
    workbook_path: str = ""


class TopicBuckets:
    """Rows grouped by topic; topic labels are compared case-insensitively.

    The first spelling seen for a topic is the one kept as its key.
    """

    def __init__(self) -> None:
        self._keys: dict[str, str] = {}
        self._rows: dict[str, list[MessageRow]] = {}

    def key_for(self, topic: str) -> str:
        return self._keys.get(topic.lower(), topic)

    def add(self, topic: str, row: MessageRow) -> str:
        key = self._keys.setdefault(topic.lower(), topic)
        self._rows.setdefault(key, []).append(row)
        return key

    def __getitem__(self, topic: str) -> list[MessageRow]:
        return self._rows[self.key_for(topic)]

    def __contains__(self, topic: object) -> bool:
        return isinstance(topic, str) and topic.lower() in self._keys

    def __iter__(self):
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def items(self):
        return self._rows.items()

    def as_dict(self) -> dict[str, list[MessageRow]]:
        return {key: list(rows) for key, rows in self._rows.items()}
