"""Data models used across the package."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import cached_property
from numbers import Integral
from typing import Any

import pandas as pd


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


def is_missing(value: Any) -> bool:
    """Return True for ``None``, ``NaN`` and ``pd.NA`` cells."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> str:
    """Render a cell as text; missing cells are empty, integral floats lose ``.0``."""
    if is_missing(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ── Worksheet ───────────────────────────────────────────────────


@dataclass(frozen=True)
class SheetRange:
    """Occupied range of a worksheet, inclusive and zero-based."""

    min_row: int = 0
    max_row: int = 0
    min_col: int = 0
    max_col: int = 0

    @property
    def n_cols(self) -> int:
        return self.max_col - self.min_col + 1


@dataclass(eq=False)
class Worksheet:
    """One sheet of a tabular file, read without assuming a header row.

    Cells are addressed by zero-based ``(row, col)``. Missing cells read as
    ``None``; the frame is never mutated.
    """

    frame: pd.DataFrame
    name: str = ""

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]], name: str = "") -> Worksheet:
        return cls(pd.DataFrame([list(r) for r in rows]), name=name)

    @cached_property
    def range(self) -> SheetRange:
        """Bounds of the rows and columns holding at least one present cell.

        Leading and trailing all-missing rows and columns lie outside the
        range. A sheet with no present cell gives ``SheetRange(0, 0, 0, 0)``.
        """
        if self.frame.size == 0:
            return SheetRange()
        present = self.frame.notna()
        rows = present.any(axis=1).to_numpy().nonzero()[0]
        cols = present.any(axis=0).to_numpy().nonzero()[0]
        if len(rows) == 0:
            return SheetRange()
        return SheetRange(
            min_row=int(rows[0]),
            max_row=int(rows[-1]),
            min_col=int(cols[0]),
            max_col=int(cols[-1]),
        )

    @property
    def is_empty(self) -> bool:
        return self.frame.size == 0 or bool(self.frame.isna().all(axis=None))

    def cell(self, row: int, col: int) -> Any:
        """Return the cell at absolute ``(row, col)``; ``None`` outside the range."""
        rng = self.range
        if not (rng.min_row <= row <= rng.max_row and rng.min_col <= col <= rng.max_col):
            return None
        if self.frame.size == 0:
            return None
        value = self.frame.iat[row, col]
        return None if is_missing(value) else value

    def row_values(self, row: int) -> list[Any] | None:
        """Return the cells of *row*, or ``None`` when every cell is missing."""
        rng = self.range
        values = [self.cell(row, c) for c in range(rng.min_col, rng.max_col + 1)]
        if all(v is None for v in values):
            return None
        return values


@dataclass(frozen=True)
class HeaderRow:
    """Column names plus the index of the row they were read from."""

    names: list[str]
    row_index: int

    def index_of(self, column: str) -> int | None:
        """Exact (case- and whitespace-sensitive) lookup of *column*."""
        try:
            return self.names.index(column)
        except ValueError:
            return None


# ── Batches ─────────────────────────────────────────────────────


@dataclass
class BatchWindow:
    """One contiguous slice of the cleaned values, delivered as one file."""

    column: str
    number: int
    start: int
    stop: int
    values: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.number = _to_non_negative_int(self.number, "number")
        self.start = _to_non_negative_int(self.start, "start")
        self.stop = _to_non_negative_int(self.stop, "stop")
        self.values = _to_string_list(self.values, "values")
        if self.number < 1:
            raise ValueError("number must be >= 1")
        if self.stop - self.start != len(self.values):
            raise ValueError("stop - start must equal len(values)")

    def __len__(self) -> int:
        return len(self.values)


@dataclass
class RunManifest:
    """Audit-trail manifest for a single ``export`` run."""

    tool: str = "column-scrub"
    version: str = ""
    input_path: str = ""
    output_dir: str = ""
    created_at_utc: str = ""
    sha256: str = ""
    column: str = ""
    strip_char: str = ""
    row_limit: int = 0
    header_row_index: int = 0
    rows_cleaned: int = 0
    batch_files: list[str] = field(default_factory=list)
    status: str = "success"
    error_code: str | None = None
    error_message: str = ""

    def __post_init__(self) -> None:
        self.row_limit = _to_non_negative_int(self.row_limit, "row_limit")
        self.header_row_index = _to_non_negative_int(self.header_row_index, "header_row_index")
        self.rows_cleaned = _to_non_negative_int(self.rows_cleaned, "rows_cleaned")
        self.batch_files = _to_string_list(self.batch_files, "batch_files")
        if self.status not in {"success", "failed"}:
            raise ValueError("status must be 'success' or 'failed'")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "sha256": self.sha256,
            "column": self.column,
            "strip_char": self.strip_char,
            "row_limit": self.row_limit,
            "header_row_index": self.header_row_index,
            "rows_cleaned": self.rows_cleaned,
            "batch_files": list(self.batch_files),
            "status": self.status,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }
