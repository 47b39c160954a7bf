"""I/O helpers — parse uploads into worksheets, write JSON artifacts."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Callable, cast

import pandas as pd

from column_scrub.errors import ParseError
from column_scrub.models import Worksheet

SUPPORTED_SUFFIXES: tuple[str, ...] = (".csv", ".tsv", ".xlsx", ".xlsm", ".xls")

# Only truly empty fields count as missing; "NA" or "null" in a column of
# addresses is data.
_NA_OPTIONS: dict[str, Any] = {"na_values": [""], "keep_default_na": False}

# ── Loading ──────────────────────────────────────────────────────


def _read_delimited(data: bytes, name: str, sep: str) -> pd.DataFrame:
    # Rows may differ in width; short rows are padded with <NA>.
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            text = data.decode(encoding)
            rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=sep))
        except (UnicodeDecodeError, csv.Error) as exc:
            last_exc = exc
            continue
        frame = pd.DataFrame(rows, dtype="string")
        return frame.replace("", pd.NA)
    raise ParseError(f"Could not read {name} (decode or parse failed)") from last_exc


def _read_workbook(data: bytes, name: str, engine: str) -> pd.DataFrame:
    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    try:
        return read_excel(
            io.BytesIO(data),
            sheet_name=0,
            header=None,
            engine=engine,
            dtype="string",
            **_NA_OPTIONS,
        )
    except ImportError as exc:
        raise ParseError(
            f"Cannot read {name}: the {engine!r} package is not installed. "
            f"Either convert to .xlsx or add dependency: pip install {engine}"
        ) from exc
    except Exception as exc:
        raise ParseError(f"Could not read {name} ({exc})") from exc


def read_worksheet(data: bytes, filename: str, delimiter: str | None = None) -> Worksheet:
    """Parse the first sheet of an uploaded file held in memory.

    The format is picked from the extension of *filename*. No row is treated
    as a header; header detection happens later.

    Raises
    ------
    ParseError
        If the extension is not supported or the content cannot be parsed.
    """
    if delimiter is not None and len(delimiter) != 1:
        raise ParseError(f"Delimiter must be a single character (got {delimiter!r})")
    suffix = Path(filename).suffix.lower()
    if suffix == ".csv":
        frame = _read_delimited(data, filename, delimiter or ",")
    elif suffix == ".tsv":
        frame = _read_delimited(data, filename, delimiter or "\t")
    elif suffix in (".xlsx", ".xlsm"):
        frame = _read_workbook(data, filename, "openpyxl")
    elif suffix == ".xls":
        frame = _read_workbook(data, filename, "xlrd")
    else:
        raise ParseError(
            f"Unsupported file type: {suffix!r}. Use {', '.join(SUPPORTED_SUFFIXES)}"
        )
    return Worksheet(frame.reset_index(drop=True), name=filename)


def read_source(path: Path) -> bytes:
    """Return the raw bytes of *path*.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ParseError
        If *path* is a directory or cannot be read.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise ParseError(f"Input path is a directory, not a file: {path}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ParseError(f"Cannot read {path}: {exc}") from exc


# ── Writing ──────────────────────────────────────────────────────


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
