"""Excel report: one sheet per topic plus an Overview sheet (openpyxl)."""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterable

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .constants import (
    ATTACHMENT_PATH_SEPARATOR,
    DATE_FORMAT,
    MAX_SHEET_NAME_LENGTH,
    OVERVIEW_HEADERS,
    OVERVIEW_SHEET,
    TOPIC_HEADERS,
    TOPIC_TYPE,
)
from .models import MessageRow, TopicSummary
from .sanitize import sanitize_sheet_name

log = logging.getLogger(__name__)

MAX_COLUMN_WIDTH = 80


def row_to_cells(row: MessageRow) -> list:
    return [
        row.date_local,
        row.from_name,
        row.from_address,
        row.company,
        row.window,
        row.subject,
        row.is_read,
        row.has_attachments,
        row.attachment_count,
        ATTACHMENT_PATH_SEPARATOR.join(row.attachment_paths),
        row.message_id,
    ]


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    return str(value)


def _count(value: object) -> int:
    try:
        return max(int(value), 0)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def row_from_cells(values: Iterable[object]) -> MessageRow:
    """Build a MessageRow from the cell values of one report row."""
    cells = list(values)[: len(TOPIC_HEADERS)]
    cells += [None] * (len(TOPIC_HEADERS) - len(cells))
    paths = _text(cells[9])
    return MessageRow(
        date_local=_text(cells[0]),
        from_name=_text(cells[1]),
        from_address=_text(cells[2]),
        company=_text(cells[3]),
        window=_text(cells[4]),
        subject=_text(cells[5]),
        is_read=_text(cells[6]),
        has_attachments=_text(cells[7]),
        attachment_count=_count(cells[8]),
        attachment_paths=tuple(p for p in paths.split(ATTACHMENT_PATH_SEPARATOR) if p),
        message_id=_text(cells[10]),
    )


def _clean_cell(value: object) -> object:
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _is_empty(ws: Worksheet) -> bool:
    return ws.max_row == 1 and ws.max_column == 1 and ws.cell(1, 1).value is None


def _write_header(ws: Worksheet, headers: list[str]) -> None:
    # By coordinate: reading A1 in _is_empty already moved append() past row 1.
    for col, title in enumerate(headers, start=1):
        ws.cell(row=1, column=col, value=title).font = Font(bold=True)


def _append(ws: Worksheet, values: list) -> None:
    ws.append([_clean_cell(v) for v in values])
    # Subjects like "=SUM(...)" must stay text, not become formulas.
    for cell in ws[ws.max_row]:
        if isinstance(cell.value, str) and cell.value.startswith("="):
            cell.data_type = "s"


def _adjust_widths(ws: Worksheet, column_count: int) -> None:
    for idx in range(1, column_count + 1):
        longest = max(
            (len(_text(cell.value)) for (cell,) in ws.iter_rows(min_col=idx, max_col=idx)),
            default=0,
        )
        ws.column_dimensions[get_column_letter(idx)].width = min(longest + 2, MAX_COLUMN_WIDTH)


class TopicWorkbook:
    """The tracker workbook, loaded into memory until save() is called."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        if self.path.exists():
            self._wb = load_workbook(self.path)
        else:
            self._wb = Workbook()
            self._wb.active.title = OVERVIEW_SHEET
        if self.find_sheet(OVERVIEW_SHEET) is None:
            self._wb.create_sheet(OVERVIEW_SHEET, 0)

    # --- sheets ---

    def find_sheet(self, name: str) -> Worksheet | None:
        """Look a sheet up by name, ignoring case."""
        wanted = name.lower()
        for ws in self._wb.worksheets:
            if ws.title.lower() == wanted:
                return ws
        return None

    def sheet_title_for(self, topic: str) -> str:
        """Return the sheet title a topic's rows live in.

        An existing sheet whose title matches case-insensitively wins, so
        "Foo" and "FOO" share one sheet.
        """
        title = sanitize_sheet_name(topic)
        if title.lower() == OVERVIEW_SHEET.lower():
            title = title[: MAX_SHEET_NAME_LENGTH - 1] + "_"
        existing = self.find_sheet(title)
        return existing.title if existing is not None else title

    def topic_sheets(self) -> list[Worksheet]:
        return [ws for ws in self._wb.worksheets if ws.title.lower() != OVERVIEW_SHEET.lower()]

    # --- topic rows ---

    def append_rows(self, topic: str, rows: Iterable[MessageRow]) -> str:
        """Append rows to the topic's sheet, creating it with a header if needed.

        Returns the sheet title used.
        """
        title = self.sheet_title_for(topic)
        ws = self.find_sheet(title)
        if ws is None:
            ws = self._wb.create_sheet(title)
            log.debug("Created sheet %r", title)
        if _is_empty(ws):
            _write_header(ws, TOPIC_HEADERS)

        count = 0
        for row in rows:
            _append(ws, row_to_cells(row))
            count += 1
        _adjust_widths(ws, len(TOPIC_HEADERS))
        log.debug("Appended %d rows to sheet %r", count, title)
        return title

    def read_rows(self, title: str) -> list[MessageRow]:
        """Read back the data rows (below the header) of a topic sheet."""
        ws = self.find_sheet(title)
        if ws is None or _is_empty(ws):
            return []
        return [
            row_from_cells(values)
            for values in ws.iter_rows(min_row=2, values_only=True)
            if any(v not in (None, "") for v in values)
        ]

    def all_topic_rows(self) -> dict[str, list[MessageRow]]:
        """Every topic sheet's rows keyed by sheet title, in workbook order."""
        return {
            ws.title: self.read_rows(ws.title)
            for ws in self.topic_sheets()
            if not _is_empty(ws)
        }

    # --- overview ---

    def write_overview(self, summaries: Iterable[TopicSummary]) -> None:
        """Replace the Overview sheet with the given summaries."""
        old = self.find_sheet(OVERVIEW_SHEET)
        index = self._wb.worksheets.index(old) if old is not None else 0
        if old is not None:
            self._wb.remove(old)
        ws = self._wb.create_sheet(OVERVIEW_SHEET, index)

        _write_header(ws, OVERVIEW_HEADERS)
        for s in summaries:
            _append(
                ws,
                [
                    s.topic,
                    TOPIC_TYPE,
                    s.total,
                    s.unread,
                    s.with_attachments,
                    s.last_7_days,
                    s.latest_date.strftime(DATE_FORMAT) if s.latest_date else "",
                    s.latest_sender,
                    s.latest_subject,
                    s.folder,
                ],
            )
        _adjust_widths(ws, len(OVERVIEW_HEADERS))

    # --- persistence ---

    def save(self) -> None:
        """Write the workbook, replacing the previous file atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".~", suffix=".xlsx")
        os.close(fd)
        try:
            self._wb.save(tmp_name)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        log.debug("Saved workbook %s", self.path)
