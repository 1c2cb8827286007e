from __future__ import annotations

from pathlib import Path

import pytest

from llm_context_gen.config import EntryKind, SkipReason
from llm_context_gen.exceptions import TreeDocumentError
from llm_context_gen.output_construction import (
    TreeDocument,
    get_indent,
    render_entry,
)


@pytest.mark.unit
def test_get_indent_is_capped() -> None:
    assert get_indent(0) == ""
    assert get_indent(2) == "│   │   "
    assert get_indent(10) == "│   " * 10
    assert get_indent(50) == get_indent(10)


@pytest.mark.unit
def test_render_entry_directory_and_file() -> None:
    assert render_entry("src", EntryKind.DIRECTORY) == "├── src/"
    assert render_entry(Path("src") / "main.rs", EntryKind.FILE) == "│   ├── main.rs"


@pytest.mark.unit
def test_render_entry_skipped_files() -> None:
    rel = Path("assets") / "logo.png"

    assert render_entry(rel, EntryKind.FILE, SkipReason.BINARY_OR_TOO_LARGE) == (
        "│   ├── logo.png (skipped - binary or too large)"
    )
    assert render_entry(rel, EntryKind.FILE, SkipReason.ERROR_READING) == (
        "│   ├── logo.png (skipped - error reading)"
    )
    assert render_entry(rel, EntryKind.FILE, SkipReason.PATH_TOO_LONG) == (
        "│   ├── ... (skipped - path too long)"
    )


@pytest.mark.unit
def test_tree_document_starts_with_root_line(tmp_path: Path) -> None:
    path = tmp_path / "file-tree.txt"

    TreeDocument(path)

    assert path.read_text(encoding="utf-8") == ".\n"


@pytest.mark.unit
def test_tree_document_renders_sentinel_for_deep_directories(tmp_path: Path) -> None:
    doc = TreeDocument(tmp_path / "file-tree.txt")
    deep = Path(*["d"] * 21)

    assert doc.add_directory(Path(*["d"] * 20)) is True
    assert doc.add_directory(deep) is False
    assert doc.getvalue().splitlines()[-1] == "[Deeply nested directory skipped]"
    assert doc.getvalue().splitlines()[-2] == "│   " * 10 + "├── d/"


@pytest.mark.unit
def test_tree_document_limit_notice_is_written_once(tmp_path: Path) -> None:
    path = tmp_path / "file-tree.txt"
    doc = TreeDocument(path)
    doc.add_entry("a.txt", EntryKind.FILE)

    doc.add_limit_notice(1)
    doc.add_limit_notice(1)
    doc.flush()

    assert path.read_text(encoding="utf-8") == (
        ".\n├── a.txt\n\n[Maximum file limit reached (1). Some files were skipped.]\n"
    )


@pytest.mark.unit
def test_tree_document_creation_failure(tmp_path: Path) -> None:
    with pytest.raises(TreeDocumentError):
        TreeDocument(tmp_path / "missing" / "file-tree.txt")
