"""Error taxonomy shared by the session, the CLI and the web page."""

from __future__ import annotations


class ColumnScrubError(ValueError):
    """Base class for every user-recoverable failure.

    ``code`` is a stable identifier the CLI writes into the run manifest.
    """

    code = "error"


class ParseError(ColumnScrubError):
    code = "parse_failed"


class NoColumnsError(ColumnScrubError):
    code = "no_columns"


class ColumnNotFoundError(ColumnScrubError):
    code = "column_not_found"

    def __init__(self, column: str, available: list[str] | None = None) -> None:
        self.column = column
        self.available = list(available or [])
        message = f"Column not found: {column!r}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class NoDataError(ColumnScrubError):
    code = "no_data"


class NoMoreRowsError(ColumnScrubError):
    code = "no_more_rows"


class InvalidRowLimitError(ColumnScrubError):
    code = "invalid_row_limit"
