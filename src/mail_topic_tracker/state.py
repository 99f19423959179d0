"""JSON-backed sync state: high-water mark plus processed message ids."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from .models import SyncState

log = logging.getLogger(__name__)


def _parse_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def state_to_dict(state: SyncState) -> dict:
    return {
        "last_received_utc": (
            state.last_received_utc.astimezone(timezone.utc).isoformat()
            if state.last_received_utc
            else None
        ),
        "processed_ids": sorted(state.processed_ids),
    }


def state_from_dict(data: dict) -> SyncState:
    ids = data.get("processed_ids") or []
    if not isinstance(ids, list):
        raise ValueError("processed_ids must be a list")
    return SyncState(
        last_received_utc=_parse_timestamp(data.get("last_received_utc")),
        processed_ids={str(i) for i in ids},
    )


def load_state(path: Path) -> SyncState:
    """Load the sync state, or return a fresh one.

    A missing, unreadable or malformed file never fails the run: the
    tracker simply starts over as if it had never run before.
    """
    path = Path(path)
    if not path.exists():
        log.debug("No state file at %s, starting fresh", path)
        return SyncState()

    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
        if not isinstance(data, dict):
            raise ValueError("state file is not a JSON object")
        state = state_from_dict(data)
    except (OSError, ValueError, TypeError) as exc:
        log.debug("Ignoring unusable state file %s: %s", path, exc)
        return SyncState()

    log.debug(
        "Loaded state: %d processed ids, last received %s",
        len(state.processed_ids),
        state.last_received_utc,
    )
    return state


def save_state(path: Path, state: SyncState) -> None:
    """Overwrite the state file atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(state_to_dict(state), f, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    log.debug("Saved state to %s (%d processed ids)", path, len(state.processed_ids))


def reset_state(path: Path) -> bool:
    """Delete the state file. Returns True when a file was removed."""
    path = Path(path)
    if not path.exists():
        return False
    path.unlink()
    return True
