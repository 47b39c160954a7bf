"""Column cleaning + batch slicing — pure functions, no side effects."""

from __future__ import annotations

from collections.abc import Sequence
from numbers import Integral

from column_scrub import DEFAULT_STRIP_CHAR
from column_scrub.errors import ColumnNotFoundError, InvalidRowLimitError, NoMoreRowsError
from column_scrub.headers import detect_header_row
from column_scrub.models import BatchWindow, HeaderRow, Worksheet, cell_text

# ── Cleaning ────────────────────────────────────────────────────


def resolve_column(header: HeaderRow, column: str) -> int:
    """Return the zero-based index of *column* in *header*.

    Raises
    ------
    ColumnNotFoundError
        If no header name matches *column* exactly.
    """
    idx = header.index_of(column)
    if idx is None:
        raise ColumnNotFoundError(column, header.names)
    return idx


def strip_char(value: str, char: str = DEFAULT_STRIP_CHAR) -> str:
    """Remove every occurrence of *char* from *value*."""
    return value.replace(char, "")


def clean_column(
    ws: Worksheet,
    column: str,
    *,
    char: str = DEFAULT_STRIP_CHAR,
    header: HeaderRow | None = None,
) -> list[str]:
    """Return the cleaned values of *column* for every data row of *ws*.

    Data rows are the rows strictly below the detected header row. Rows with
    no cells at all are skipped; a present row with a blank target cell
    yields ``""``. Order is preserved.
    """
    if not char:
        raise ValueError("char must be a non-empty string")
    if header is None:
        header = detect_header_row(ws)
    col_idx = resolve_column(header, column)

    rng = ws.range
    cleaned: list[str] = []
    for r in range(header.row_index + 1, rng.max_row + 1):
        row = ws.row_values(r)
        if row is None:
            continue
        value = cell_text(row[col_idx]) if col_idx < len(row) else ""
        cleaned.append(strip_char(value, char))
    return cleaned


# ── Batch windowing ─────────────────────────────────────────────


def validate_row_limit(row_limit: object) -> int:
    if isinstance(row_limit, bool) or not isinstance(row_limit, Integral):
        raise InvalidRowLimitError("Row limit must be a positive whole number")
    if int(row_limit) < 1:
        raise InvalidRowLimitError(f"Row limit must be at least 1 (got {row_limit})")
    return int(row_limit)


def batch_number(offset: int, row_limit: int) -> int:
    return offset // row_limit + 1


def slice_batch(
    values: Sequence[str], offset: int, row_limit: int, column: str = ""
) -> tuple[BatchWindow, int]:
    """Cut the next window out of *values*.

    Returns ``(window, next_offset)``. The offset advances by *row_limit*
    even when the window is shorter (final partial batch).

    Raises
    ------
    InvalidRowLimitError
        If *row_limit* is not a positive integer.
    NoMoreRowsError
        If *offset* already reaches the end of *values*.
    """
    row_limit = validate_row_limit(row_limit)
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if offset >= len(values):
        raise NoMoreRowsError(
            f"No more rows: all {len(values)} values have been exported"
        )
    stop = min(offset + row_limit, len(values))
    window = BatchWindow(
        column=column,
        number=batch_number(offset, row_limit),
        start=offset,
        stop=stop,
        values=list(values[offset:stop]),
    )
    return window, offset + row_limit

