"""CLI integration tests for column-scrub."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
from openpyxl import load_workbook
from typer.testing import CliRunner

from column_scrub import __version__
from column_scrub.cli import app
from column_scrub.export import SHEET_TITLE

runner = CliRunner()


def _write_csv(tmp_path: Path, name: str, rows: str) -> Path:
    path = tmp_path / name
    path.write_text(rows, encoding="utf-8")
    return path


def _column_values(path: Path) -> list[object]:
    ws = load_workbook(path)[SHEET_TITLE]
    return [row[0] for row in ws.iter_rows(values_only=True)]


def _contacts(tmp_path: Path, n: int = 5) -> Path:
    body = "".join(f"User {i},user{i}@example.com\n" for i in range(n))
    return _write_csv(tmp_path, "contacts.csv", "Name,Email\n" + body)


def test_version_option() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_columns_lists_detected_header(tmp_path: Path) -> None:
    csv_path = _write_csv(
        tmp_path, "titled.csv", "Contacts\n\nName,,Email\nA,x,a@b.c\n"
    )

    result = runner.invoke(app, ["columns", "--input", str(csv_path)])

    assert result.exit_code == 0
    assert "Contacts" in result.stdout
    assert "Header row: 1" in result.stdout


def test_columns_rejects_unsupported_file(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    result = runner.invoke(app, ["columns", "--input", str(path)])

    assert result.exit_code == 2
    assert "Unsupported file type" in result.stdout


def test_batch_writes_requested_window(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path, n=5)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "batch", "--input", str(csv_path), "--column", "Email",
            "--limit", "2", "--number", "2", "--out-dir", str(out_dir), "--quiet",
        ],
    )

    assert result.exit_code == 0
    path = out_dir / "cleaned_Email_batch_2.xlsx"
    assert path.exists()
    assert _column_values(path) == ["Email", "user2example.com", "user3example.com"]


def test_batch_past_the_end_fails(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path, n=3)

    result = runner.invoke(
        app,
        [
            "batch", "--input", str(csv_path), "--column", "Email",
            "--limit", "2", "--number", "3", "--out-dir", str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 2
    assert "does not exist" in result.stdout
    assert not (tmp_path / "out").exists()


def test_batch_unknown_column_fails(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path)

    result = runner.invoke(
        app, ["batch", "--input", str(csv_path), "--column", "email", "--limit", "2"]
    )

    assert result.exit_code == 2
    assert "Column not found" in result.stdout


def test_batch_invalid_limit_fails(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path)

    result = runner.invoke(
        app, ["batch", "--input", str(csv_path), "--column", "Email", "--limit", "0"]
    )

    assert result.exit_code == 2
    assert "Row limit" in result.stdout


def test_batch_unwritable_out_dir_exits_with_internal_error(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path)
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "batch", "--input", str(csv_path), "--column", "Email",
            "--limit", "2", "--out-dir", str(blocker),
        ],
    )

    assert result.exit_code == 1
    assert "Unexpected internal error" in result.stdout
    assert blocker.read_text(encoding="utf-8") == "occupied"


def test_batch_rejects_multi_character_strip_char(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path)

    result = runner.invoke(
        app,
        [
            "batch", "--input", str(csv_path), "--column", "Email",
            "--strip-char", "@@", "--out-dir", str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 2
    assert "single character" in result.stdout
    assert not (tmp_path / "out").exists()


def test_export_writes_all_batches_and_manifest(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path, n=5)
    out_dir = tmp_path / "export"

    result = runner.invoke(
        app,
        [
            "export", "--input", str(csv_path), "--column", "Email",
            "--limit", "2", "--out-dir", str(out_dir), "--quiet",
        ],
    )

    assert result.exit_code == 0
    names = sorted(p.name for p in out_dir.glob("*.xlsx"))
    assert names == [
        "cleaned_Email_batch_1.xlsx",
        "cleaned_Email_batch_2.xlsx",
        "cleaned_Email_batch_3.xlsx",
    ]
    assert _column_values(out_dir / "cleaned_Email_batch_3.xlsx") == ["Email", "user4example.com"]

    manifest = json.loads((out_dir / "run_manifest.json").read_text(encoding="utf-8"))
    assert manifest["status"] == "success"
    assert manifest["rows_cleaned"] == 5
    assert manifest["row_limit"] == 2
    assert manifest["header_row_index"] == 0
    assert manifest["strip_char"] == "@"
    assert manifest["batch_files"] == names
    assert len(manifest["sha256"]) == 64


def test_export_from_xlsx_uses_first_non_empty_row_as_header(tmp_path: Path) -> None:
    xlsx_path = tmp_path / "book.xlsx"
    frame = pd.DataFrame(
        [["Report", None], [None, None], ["Name", "Handle"], ["A", "@alice"], ["B", "@@bob"]]
    )
    frame.to_excel(xlsx_path, header=False, index=False)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "export", "--input", str(xlsx_path), "--column", "Column2",
            "--limit", "10", "--out-dir", str(out_dir), "--quiet",
        ],
    )

    assert result.exit_code == 0
    values = _column_values(out_dir / "cleaned_Column2_batch_1.xlsx")
    assert values[0] == "Column2"
    assert "alice" in values
    assert "bob" in values


def test_export_empty_column_writes_failed_manifest(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path, "header_only.csv", "Name,Email\n")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "export", "--input", str(csv_path), "--column", "Email",
            "--limit", "2", "--out-dir", str(out_dir), "--quiet",
        ],
    )

    assert result.exit_code == 2
    manifest = json.loads((out_dir / "run_manifest.json").read_text(encoding="utf-8"))
    assert manifest["status"] == "failed"
    assert manifest["error_code"] == "no_data"
    assert manifest["batch_files"] == []


def test_export_custom_strip_char(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path, "phones.csv", "Phone\n555-0100\n555-0199\n")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "export", "--input", str(csv_path), "--column", "Phone",
            "--strip-char", "-", "--out-dir", str(out_dir), "--quiet",
        ],
    )

    assert result.exit_code == 0
    assert _column_values(out_dir / "cleaned_Phone_batch_1.xlsx") == [
        "Phone", "5550100", "5550199",
    ]


def test_export_nonquiet_shows_progress_panels(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path, n=2)

    result = runner.invoke(
        app,
        [
            "export", "--input", str(csv_path), "--column", "Email",
            "--out-dir", str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 0
    assert "Export Start" in result.stdout
    assert "Cleaned 2 values" in result.stdout
    assert "Export Complete" in result.stdout


def test_web_launches_streamlit(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    import column_scrub.cli as cli_mod

    calls: list[list[str]] = []

    class _Done:
        returncode = 0

    def _fake_run(cmd: list[str], check: bool) -> _Done:
        calls.append(cmd)
        return _Done()

    monkeypatch.setattr(cli_mod.subprocess, "run", _fake_run)

    result = runner.invoke(app, ["web", "--port", "9000"])

    assert result.exit_code == 0
    assert calls[0][1:4] == ["-m", "streamlit", "run"]
    assert calls[0][4].endswith("web.py")
    assert calls[0][-1] == "9000"


def test_export_unreadable_input_writes_failed_manifest(tmp_path: Path) -> None:
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a workbook")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["export", "--input", str(path), "--column", "Email", "--out-dir", str(out_dir), "--quiet"],
    )

    assert result.exit_code == 2
    manifest = json.loads((out_dir / "run_manifest.json").read_text(encoding="utf-8"))
    assert manifest["status"] == "failed"
    assert manifest["error_code"] == "parse_failed"
    assert manifest["header_row_index"] == 0


def test_export_multi_character_strip_char_writes_failed_manifest(tmp_path: Path) -> None:
    csv_path = _contacts(tmp_path)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "export", "--input", str(csv_path), "--column", "Email",
            "--strip-char", "ab", "--out-dir", str(out_dir), "--quiet",
        ],
    )

    assert result.exit_code == 2
    manifest = json.loads((out_dir / "run_manifest.json").read_text(encoding="utf-8"))
    assert manifest["status"] == "failed"
    assert manifest["error_code"] == "error"
    assert manifest["batch_files"] == []
