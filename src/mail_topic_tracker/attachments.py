"""Save message attachments under <root>/<topic>/<YYYY-MM-DD>/."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

from .constants import FALLBACK_ATTACHMENT_NAME, FOLDER_DATE_FORMAT
from .models import Attachment
from .sanitize import sanitize_path_segment

log = logging.getLogger(__name__)


def topic_folder(root: Path, topic: str) -> Path:
    """Return the attachment folder for a topic."""
    return Path(root) / sanitize_path_segment(topic)


def save_attachments(
    root: Path,
    topic: str,
    received_local: datetime,
    attachments: Iterable[Attachment],
) -> list[str]:
    """Write attachments to disk and return their paths in order.

    Existing files with the same name are overwritten, so re-running an
    interrupted sync is harmless.
    """
    saved: list[str] = []
    target_dir = topic_folder(root, topic) / received_local.strftime(FOLDER_DATE_FORMAT)

    for attachment in attachments:
        if not saved:
            target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / sanitize_path_segment(attachment.name or FALLBACK_ATTACHMENT_NAME)
        path.write_bytes(attachment.content)
        log.debug("Saved attachment %s (%d bytes)", path, len(attachment.content))
        saved.append(str(path))

    return saved
