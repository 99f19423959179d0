"""Make free text safe for file system paths and worksheet names."""

import re

from .constants import FALLBACK_FILE_NAME, FALLBACK_SHEET_NAME, MAX_SHEET_NAME_LENGTH

# Characters rejected in file names on Windows, plus '/' and control characters.
_INVALID_PATH_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_INVALID_SHEET_CHARS_RE = re.compile(r"[\\/*\[\]:?]")


def sanitize_path_segment(name: str | None) -> str:
    """Replace characters illegal in a file or directory name with '_'."""
    safe = _INVALID_PATH_CHARS_RE.sub("_", name or "")
    # "." and ".." would point outside the intended folder
    return safe if safe.strip(". ") else FALLBACK_FILE_NAME


def sanitize_sheet_name(name: str | None) -> str:
    """Return a valid worksheet title: no ``\\ / * [ ] : ?``, at most 31 chars."""
    safe = _INVALID_SHEET_CHARS_RE.sub("_", name or "")[:MAX_SHEET_NAME_LENGTH]
    return safe if safe.strip() else FALLBACK_SHEET_NAME
