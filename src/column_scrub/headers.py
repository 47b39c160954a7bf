"""Header-row detection for sheets whose header is not necessarily row 1."""

from __future__ import annotations

from column_scrub import HEADER_SCAN_ROWS
from column_scrub.models import HeaderRow, SheetRange, Worksheet, cell_text


def placeholder_name(position: int) -> str:
    """Name used for a blank header cell; *position* is 1-based."""
    return f"Column{position}"


def _placeholder_names(rng: SheetRange) -> list[str]:
    return [placeholder_name(i + 1) for i in range(rng.n_cols)]


def detect_header_row(ws: Worksheet, scan_rows: int = HEADER_SCAN_ROWS) -> HeaderRow:
    """Return the header names of *ws* and the row they came from.

    The first row among the first *scan_rows* rows of the occupied range that
    has at least one non-blank cell is the header; blank cells in it get
    ``Column<N>`` names. The occupied range starts at the first present
    cell, so leading blank rows are never scanned. When every scanned row
    holds only blank text the header is all placeholders, anchored at the
    first occupied row. Never raises.
    """
    rng = ws.range
    last = min(rng.min_row + scan_rows, rng.max_row + 1)
    for r in range(rng.min_row, last):
        names: list[str] = []
        non_empty = 0
        for c in range(rng.min_col, rng.max_col + 1):
            text = cell_text(ws.cell(r, c)).strip()
            if text:
                non_empty += 1
                names.append(text)
            else:
                names.append(placeholder_name(c - rng.min_col + 1))
        if non_empty > 0:
            return HeaderRow(names=names, row_index=r)

    return HeaderRow(names=_placeholder_names(rng), row_index=rng.min_row)
