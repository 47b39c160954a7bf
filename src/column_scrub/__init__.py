"""column-scrub — Strip a character from one spreadsheet column and export it in batches."""

__version__ = "0.1.0"

DEFAULT_STRIP_CHAR: str = "@"
HEADER_SCAN_ROWS: int = 5
DEFAULT_ROW_LIMIT: int = 100
