"""Browser page: upload a sheet, pick a column, download cleaned batches.

Run with ``colscrub web`` or ``streamlit run src/column_scrub/web.py``.
"""

from __future__ import annotations

import streamlit as st

from column_scrub import DEFAULT_ROW_LIMIT, DEFAULT_STRIP_CHAR, __version__
from column_scrub.errors import ColumnScrubError, NoMoreRowsError
from column_scrub.export import XLSX_MIME, batch_filename, batch_to_bytes
from column_scrub.io import SUPPORTED_SUFFIXES
from column_scrub.session import BatchSession


def ensure_state() -> None:
    st.session_state.setdefault("processing", False)
    st.session_state.setdefault("session", BatchSession())
    st.session_state.setdefault("messages", [])
    st.session_state.setdefault("download", None)


def flash(level: str, message: str) -> None:
    st.session_state["messages"].append((level, message))


def on_upload() -> None:
    session: BatchSession = st.session_state["session"]
    st.session_state["messages"] = []
    st.session_state["download"] = None
    st.session_state["column_input"] = None

    upload = st.session_state.get("upload_input")
    if upload is None:
        st.session_state["session"] = BatchSession(char=session.char)
        return
    try:
        header = session.load(upload.getvalue(), upload.name)
    except ColumnScrubError as exc:
        flash("error", str(exc))
        return
    flash("info", f"Detected {len(header.names)} columns on row {header.row_index + 1}.")


def on_next_batch() -> None:
    session: BatchSession = st.session_state["session"]
    st.session_state["messages"] = []
    st.session_state["download"] = None

    column = st.session_state.get("column_input")
    if not session.loaded:
        flash("error", "Upload a file first.")
        return
    if column is None:
        flash("error", "Choose a column first.")
        return
    try:
        session.set_char(st.session_state.get("char_input") or "")
        session.select_column(column)
        session.set_row_limit(st.session_state.get("row_limit_input"))
        window = session.next_batch()
    except NoMoreRowsError:
        flash("info", "No more rows. Change the column or the row limit to start over.")
        return
    except ColumnScrubError as exc:
        flash("error", str(exc))
        return

    total = len(session.cleaned_values())
    st.session_state["download"] = (batch_filename(window), batch_to_bytes(window))
    flash("success", f"Batch {window.number}: rows {window.start + 1}-{window.stop} of {total}.")


def request_next_batch() -> None:
    if st.session_state["processing"]:
        return
    st.session_state["processing"] = True


def run_pending_batch() -> None:
    """Produce the requested batch, then re-enable the controls."""
    try:
        on_next_batch()
    finally:
        st.session_state["processing"] = False


def render_messages() -> None:
    for level, message in st.session_state["messages"]:
        if level == "error":
            st.error(message)
        elif level == "success":
            st.success(message)
        else:
            st.info(message)


def render_download() -> None:
    download = st.session_state.get("download")
    if not download:
        return
    file_name, data = download
    st.download_button(
        f"Download {file_name}",
        data=data,
        file_name=file_name,
        mime=XLSX_MIME,
        key=f"download_{file_name}",
    )


def main() -> None:
    st.set_page_config(page_title="column-scrub", layout="centered")
    ensure_state()
    session: BatchSession = st.session_state["session"]
    processing = st.session_state["processing"]

    st.title("column-scrub")
    st.caption(
        f"v{__version__} · Remove a character from one column and download it in batches."
    )

    st.file_uploader(
        "Upload a spreadsheet",
        type=[suffix.lstrip(".") for suffix in SUPPORTED_SUFFIXES],
        key="upload_input",
        on_change=on_upload,
        disabled=processing,
    )
    st.selectbox(
        "Column",
        options=session.columns,
        index=None,
        placeholder="Choose a column",
        key="column_input",
        disabled=processing or not session.loaded,
    )
    left, right = st.columns(2)
    left.number_input(
        "Rows per batch",
        min_value=1,
        value=DEFAULT_ROW_LIMIT,
        step=1,
        key="row_limit_input",
        disabled=processing,
    )
    right.text_input(
        "Character to strip",
        value=DEFAULT_STRIP_CHAR,
        max_chars=1,
        key="char_input",
        disabled=processing,
    )
    st.button(
        "Next batch",
        type="primary",
        on_click=request_next_batch,
        disabled=processing or not session.loaded,
    )

    if processing:
        with st.spinner("Preparing the next batch..."):
            run_pending_batch()
        st.rerun()

    render_messages()
    render_download()


if __name__ == "__main__":
    main()
