"""CLI entry point for column-scrub."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from column_scrub import DEFAULT_ROW_LIMIT, DEFAULT_STRIP_CHAR, __version__
from column_scrub.errors import ColumnScrubError, NoMoreRowsError, ParseError
from column_scrub.export import write_batch
from column_scrub.io import write_json
from column_scrub.models import RunManifest
from column_scrub.session import BatchSession
from column_scrub.utils import sha256_file, utcnow_iso

app = typer.Typer(
    name="colscrub",
    help="column-scrub — Strip a character from one spreadsheet column and export it in batches.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

WEB_APP_PATH = Path(__file__).resolve().with_name("web.py")


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"column-scrub v{__version__}")
        raise typer.Exit()


def _open_session(
    input_file: Path, *, char: str, delimiter: str | None
) -> BatchSession:
    """Load *input_file* into a fresh session or exit with code 2."""
    if len(char) != 1:
        _err(f"--strip-char must be a single character (got {char!r})")
        raise typer.Exit(code=2)
    session = BatchSession(char=char)
    try:
        session.load_path(input_file, delimiter=delimiter)
    except (ColumnScrubError, FileNotFoundError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    return session


def _select(session: BatchSession, column: str, limit: int) -> None:
    try:
        session.select_column(column)
        session.set_row_limit(limit)
    except ColumnScrubError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _write_manifest(
    out_dir: Path,
    input_file: Path,
    created_at: str,
    session: BatchSession,
    *,
    column: str,
    row_limit: int,
    batch_files: list[Path],
    rows_cleaned: int = 0,
    error: Exception | None = None,
) -> Path:
    sha256 = ""
    try:
        sha256 = sha256_file(input_file)
    except OSError:
        pass

    manifest = RunManifest(
        version=__version__,
        input_path=str(input_file.resolve()),
        output_dir=str(out_dir.resolve()),
        created_at_utc=created_at,
        sha256=sha256,
        column=column,
        strip_char=session.char,
        row_limit=max(row_limit, 0),
        header_row_index=session.header.row_index if session.loaded else 0,
        rows_cleaned=rows_cleaned,
        batch_files=[p.name for p in batch_files],
        status="success" if error is None else "failed",
        error_code=getattr(error, "code", "internal_error") if error is not None else None,
        error_message=str(error) if error is not None else "",
    )
    return write_json(out_dir / "run_manifest.json", manifest.to_dict())


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """column-scrub CLI."""


# ── columns command ──────────────────────────────────────────────


@app.command()
def columns(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to CSV, TSV, XLSX or XLS input file.",
        exists=True, readable=True,
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d",
        help="Field separator for CSV/TSV input (default: ',' for CSV, tab for TSV).",
    ),
) -> None:
    """List the columns detected in the first sheet."""
    session = _open_session(input_file, char=DEFAULT_STRIP_CHAR, delimiter=delimiter)
    header = session.header

    tbl = RichTable(title=f"Columns in {input_file.name}", show_lines=False)
    tbl.add_column("#", style="dim", justify="right")
    tbl.add_column("Column", style="bold")
    for idx, name in enumerate(header.names, 1):
        tbl.add_row(str(idx), name)
    console.print(tbl)
    console.print(f"  Header row: {header.row_index + 1}")


# ── batch command ────────────────────────────────────────────────


@app.command()
def batch(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to CSV, TSV, XLSX or XLS input file.",
        exists=True, readable=True,
    ),
    column: str = typer.Option(
        ..., "--column", "-c",
        help="Column to clean (exact header name, see `colscrub columns`).",
    ),
    limit: int = typer.Option(
        DEFAULT_ROW_LIMIT, "--limit", "-n",
        help="Rows per batch.",
    ),
    number: int = typer.Option(
        1, "--number", "-b",
        help="Which batch to write (1 = first).",
        min=1,
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for the batch file.",
    ),
    strip_char: str = typer.Option(
        DEFAULT_STRIP_CHAR, "--strip-char", "-s",
        help="Character removed from every value.",
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d",
        help="Field separator for CSV/TSV input.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output.",
    ),
) -> None:
    """Write a single batch of cleaned values."""
    echo = _printer(quiet)
    session = _open_session(input_file, char=strip_char, delimiter=delimiter)
    _select(session, column, limit)

    try:
        window = session.next_batch()
        for _ in range(number - 1):
            window = session.next_batch()
    except NoMoreRowsError:
        total = len(session.cleaned_values())
        _err(f"Batch {number} does not exist: {column!r} has {total} rows")
        raise typer.Exit(code=2)
    except ColumnScrubError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    try:
        path = write_batch(out_dir, window)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)
    echo(
        f"[blue]>[/blue] Batch {window.number}: rows {window.start + 1}-{window.stop} "
        f"({len(window)} values)"
    )
    echo(f"  Batch -> {path}")


# ── export command ───────────────────────────────────────────────


@app.command()
def export(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to CSV, TSV, XLSX or XLS input file.",
        exists=True, readable=True,
    ),
    column: str = typer.Option(
        ..., "--column", "-c",
        help="Column to clean (exact header name, see `colscrub columns`).",
    ),
    limit: int = typer.Option(
        DEFAULT_ROW_LIMIT, "--limit", "-n",
        help="Rows per batch.",
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for batch files + manifest.",
    ),
    strip_char: str = typer.Option(
        DEFAULT_STRIP_CHAR, "--strip-char", "-s",
        help="Character removed from every value.",
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d",
        help="Field separator for CSV/TSV input.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
) -> None:
    """Write every batch of cleaned values plus run_manifest.json."""
    echo = _printer(quiet)
    created_at = utcnow_iso()
    out_dir.mkdir(parents=True, exist_ok=True)
    session = BatchSession(char=strip_char if len(strip_char) == 1 else DEFAULT_STRIP_CHAR)
    try:
        if len(strip_char) != 1:
            raise ColumnScrubError(
                f"--strip-char must be a single character (got {strip_char!r})"
            )
        session.load_path(input_file, delimiter=delimiter)
    except (ColumnScrubError, FileNotFoundError, OSError) as exc:
        error = exc if isinstance(exc, ColumnScrubError) else ParseError(str(exc))
        manifest_path = _write_manifest(
            out_dir, input_file, created_at, session,
            column=column, row_limit=limit, batch_files=[], error=error,
        )
        _err(str(exc))
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=2)

    if not quiet:
        console.print(Panel(
            f"[bold]column-scrub[/bold] v{__version__}\n"
            f"Input:  {input_file}\nColumn: {column}\nOutput: {out_dir}",
            title="Export Start", border_style="blue",
        ))
        console.print(
            f"  Header row: {session.header.row_index + 1}, "
            f"strip: {strip_char!r}, rows per batch: {limit}"
        )

    written: list[Path] = []
    try:
        session.select_column(column)
        session.set_row_limit(limit)
        total = len(session.cleaned_values())
        echo(f"[blue]>[/blue] Cleaned {total} values")
        while True:
            try:
                window = session.next_batch()
            except NoMoreRowsError:
                break
            path = write_batch(out_dir, window)
            written.append(path)
            echo(f"  Batch {window.number} ({len(window)} rows) -> {path}")
    except ColumnScrubError as exc:
        manifest_path = _write_manifest(
            out_dir, input_file, created_at, session,
            column=column, row_limit=limit, batch_files=written, error=exc,
        )
        _err(str(exc))
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=2)
    except Exception as exc:
        message = f"Unexpected internal error: {exc}"
        manifest_path = _write_manifest(
            out_dir, input_file, created_at, session,
            column=column, row_limit=limit, batch_files=written,
            error=RuntimeError(message),
        )
        _err(message)
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=1)

    manifest_path = _write_manifest(
        out_dir, input_file, created_at, session,
        column=column, row_limit=limit, batch_files=written, rows_cleaned=total,
    )
    echo(f"  Manifest -> {manifest_path}")

    if not quiet:
        console.print(Panel(
            f"[green]Done[/green] — {total} values in {len(written)} batches -> {out_dir}",
            title="Export Complete", border_style="green",
        ))


# ── web command ──────────────────────────────────────────────────


@app.command()
def web(
    port: int = typer.Option(8501, "--port", "-p", help="Port for the Streamlit server."),
) -> None:
    """Launch the browser page (Streamlit)."""
    console.print(f"[blue]>[/blue] Starting web page on port {port} …")
    result = subprocess.run(
        [sys.executable, "-m", "streamlit", "run", str(WEB_APP_PATH),
         "--server.port", str(port)],
        check=False,
    )
    raise typer.Exit(code=result.returncode)
