"""Per-upload batch state shared by the CLI and the web page."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from column_scrub import DEFAULT_STRIP_CHAR
from column_scrub.errors import (
    ColumnNotFoundError,
    ColumnScrubError,
    InvalidRowLimitError,
    NoColumnsError,
    NoDataError,
)
from column_scrub.headers import detect_header_row
from column_scrub.io import read_source, read_worksheet
from column_scrub.models import BatchWindow, HeaderRow, Worksheet
from column_scrub.pipeline import clean_column, slice_batch, validate_row_limit
from column_scrub.utils import sha256_bytes


@dataclass
class BatchSession:
    """State for one uploaded file: selection, row limit and batch offset.

    The parsed worksheet is kept for the lifetime of the upload. The cleaned
    values are cached per ``(upload digest, column, char)`` and dropped
    whenever the column or the row limit changes, which also rewinds the
    offset to zero.
    """

    char: str = DEFAULT_STRIP_CHAR
    source_name: str = ""
    source_digest: str = ""
    column: str | None = None
    row_limit: int | None = None
    offset: int = 0
    _worksheet: Worksheet | None = field(default=None, repr=False)
    _header: HeaderRow | None = field(default=None, repr=False)
    _cache_key: tuple[str, str, str] | None = field(default=None, repr=False)
    _cleaned: list[str] | None = field(default=None, repr=False)

    # ── Upload ───────────────────────────────────────────────────

    def load(self, data: bytes, filename: str, delimiter: str | None = None) -> HeaderRow:
        """Replace any previous upload with *data* and detect its header.

        Raises
        ------
        ParseError
            If the file cannot be parsed.
        NoColumnsError
            If the first sheet holds no cells at all.
        """
        self._clear()
        ws = read_worksheet(data, filename, delimiter=delimiter)
        if ws.is_empty:
            raise NoColumnsError(f"No columns detected in {filename}")
        self._worksheet = ws
        self._header = detect_header_row(ws)
        self.source_name = filename
        self.source_digest = sha256_bytes(data)
        return self._header

    def load_path(self, path: Path, delimiter: str | None = None) -> HeaderRow:
        path = Path(path)
        return self.load(read_source(path), path.name, delimiter=delimiter)

    def _clear(self) -> None:
        self.source_name = ""
        self.source_digest = ""
        self.column = None
        self.row_limit = None
        self._worksheet = None
        self._header = None
        self._invalidate()

    def _invalidate(self) -> None:
        self.offset = 0
        self._cache_key = None
        self._cleaned = None

    @property
    def loaded(self) -> bool:
        return self._worksheet is not None

    @property
    def header(self) -> HeaderRow:
        if self._header is None:
            raise NoColumnsError("No file loaded")
        return self._header

    @property
    def columns(self) -> list[str]:
        return list(self._header.names) if self._header else []

    # ── Selection ────────────────────────────────────────────────

    def select_column(self, column: str) -> None:
        if column not in self.header.names:
            raise ColumnNotFoundError(column, self.header.names)
        if column != self.column:
            self.column = column
            self._invalidate()

    def set_row_limit(self, row_limit: object) -> None:
        limit = validate_row_limit(row_limit)
        if limit != self.row_limit:
            self.row_limit = limit
            self._invalidate()

    def set_char(self, char: str) -> None:
        if not char:
            raise ColumnScrubError("The character to strip must not be empty")
        if len(char) != 1:
            raise ColumnScrubError(
                f"The character to strip must be a single character (got {char!r})"
            )
        if char != self.char:
            self.char = char
            self._invalidate()

    def reset(self) -> None:
        """Rewind to the first batch without dropping the upload."""
        self.offset = 0

    # ── Batches ──────────────────────────────────────────────────

    def cleaned_values(self) -> list[str]:
        if self._worksheet is None:
            raise NoColumnsError("No file loaded")
        if self.column is None:
            raise ColumnScrubError("Select a column first")
        key = (self.source_digest, self.column, self.char)
        if self._cleaned is None or self._cache_key != key:
            self._cleaned = clean_column(
                self._worksheet, self.column, char=self.char, header=self._header
            )
            self._cache_key = key
        return self._cleaned

    @property
    def exhausted(self) -> bool:
        return self._cleaned is not None and self.offset >= len(self._cleaned)

    def next_batch(self) -> BatchWindow:
        """Return the next window and advance the offset by the row limit.

        Raises
        ------
        InvalidRowLimitError
            If no positive row limit has been set.
        NoDataError
            If the selected column has no data rows.
        NoMoreRowsError
            If every value has already been handed out.
        """
        if self.row_limit is None:
            raise InvalidRowLimitError("Set a row limit first")
        values = self.cleaned_values()
        if not values:
            raise NoDataError(f"No data found in column {self.column!r}")
        window, self.offset = slice_batch(values, self.offset, self.row_limit, self.column or "")
        return window
