"""Excel batch writer — one ``cleaned_<column>_batch_<n>.xlsx`` per window."""

from __future__ import annotations

import io
import re
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet as XlWorksheet

from column_scrub.models import BatchWindow

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

SHEET_TITLE = "Cleaned"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_AUTO_WIDTH_SAMPLE_ROWS = 300
_MAX_COLUMN_WIDTH = 60
_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


# ── Helpers ──────────────────────────────────────────────────────


def batch_filename(window: BatchWindow) -> str:
    """Return ``cleaned_<column>_batch_<n>.xlsx`` with a filesystem-safe column."""
    column = _UNSAFE_FILENAME_RE.sub("_", window.column)
    return f"cleaned_{column}_batch_{window.number}.xlsx"


def _text_cell(ws: XlWorksheet, row: int, value: str) -> None:
    cell = ws.cell(row=row, column=1, value=ILLEGAL_CHARACTERS_RE.sub("", value))
    # Values are literal text: "=1+1" stays a string, not a formula.
    cell.data_type = "s"


def _auto_width(ws: XlWorksheet) -> None:
    max_row = min(ws.max_row, _AUTO_WIDTH_SAMPLE_ROWS + 1)
    width = 0
    for row in ws.iter_rows(min_row=1, max_row=max_row, min_col=1, max_col=1):
        width = max(width, len(str(row[0].value or "")))
    ws.column_dimensions[get_column_letter(1)].width = min(width + 4, _MAX_COLUMN_WIDTH)


def build_batch_workbook(window: BatchWindow) -> Workbook:
    """Single-sheet workbook: the column name in A1, one value per row below."""
    wb = Workbook()
    ws = wb.active
    if ws is None:
        ws = wb.create_sheet()
    ws.title = SHEET_TITLE

    _text_cell(ws, 1, window.column)
    header = ws.cell(row=1, column=1)
    header.font = HEADER_FONT
    header.fill = HEADER_FILL
    header.alignment = HEADER_ALIGN
    for r_idx, value in enumerate(window.values, 2):
        _text_cell(ws, r_idx, value)

    ws.freeze_panes = "A2"
    _auto_width(ws)
    return wb


# ── Public API ───────────────────────────────────────────────────


def batch_to_bytes(window: BatchWindow) -> bytes:
    """Render *window* as ``.xlsx`` bytes, ready for a download button."""
    buffer = io.BytesIO()
    build_batch_workbook(window).save(buffer)
    return buffer.getvalue()


def write_batch(out_dir: Path, window: BatchWindow) -> Path:
    """Write *window* into *out_dir* and return the path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / batch_filename(window)

    tmp_path = out_dir / f"{path.stem}.tmp.xlsx"
    build_batch_workbook(window).save(tmp_path)
    tmp_path.replace(path)
    return path
