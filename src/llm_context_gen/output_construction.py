from __future__ import annotations

import io
from pathlib import Path

from llm_context_gen.config import (
    BRANCH,
    DEEPLY_NESTED_LINE,
    INDENT_UNIT,
    MAX_INDENT_LEVEL,
    MAX_TREE_COMPONENTS,
    EntryKind,
    SkipReason,
)
from llm_context_gen.exceptions import TreeDocumentError

ROOT_LINE = "."
PATH_TOO_LONG_NAME = "..."


def get_indent(level: int) -> str:
    """Return the indentation prefix for a nesting level, capped at 10 levels."""
    return INDENT_UNIT * max(0, min(level, MAX_INDENT_LEVEL))


def is_deeply_nested(rel: Path | str) -> bool:
    """Check whether a directory is too deep to be rendered (more than 20 components)."""
    return len(Path(rel).parts) > MAX_TREE_COMPONENTS


def render_entry(rel: Path | str, kind: EntryKind, note: SkipReason | None = None) -> str:
    """Render one tree line.

    Args:
        rel (Path | str): path of the entry relative to the walk root
        kind (EntryKind): directory or file
        note (SkipReason | None): why a file has no artifact, if it has none

    Returns:
        str: the tree line, without a trailing newline
    """
    rel = Path(rel)
    indent = get_indent(len(rel.parts) - 1)
    if kind == EntryKind.DIRECTORY:
        return f"{indent}{BRANCH}{rel.name}/"
    if note is None:
        return f"{indent}{BRANCH}{rel.name}"
    name = PATH_TOO_LONG_NAME if note == SkipReason.PATH_TOO_LONG else rel.name
    return f"{indent}{BRANCH}{name} (skipped - {note})"


def limit_notice(max_files: int) -> str:
    """Return the notice closing a tree whose file budget ran out."""
    return f"[Maximum file limit reached ({max_files}). Some files were skipped.]"


class TreeDocument:
    """Append-only rendering of the walked tree, flushed to a single file.

    The file is created with the root line as soon as the document is built, so a
    tree document that cannot be written fails the run before the walk starts.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._out = io.StringIO()
        self._limit_reached = False
        self._out.write(f"{ROOT_LINE}\n")
        self.flush()

    def add_line(self, line: str) -> None:
        """Append one raw line to the buffered tree."""
        self._out.write(f"{line}\n")

    def add_entry(self, rel: Path | str, kind: EntryKind, note: SkipReason | None = None) -> None:
        self.add_line(render_entry(rel, kind, note))

    def add_directory(self, rel: Path | str) -> bool:
        """Render a directory line, or the nesting sentinel when it is too deep.

        Returns:
            bool: False when the directory was rendered as the sentinel
        """
        if is_deeply_nested(rel):
            self.add_line(DEEPLY_NESTED_LINE)
            return False
        self.add_entry(rel, EntryKind.DIRECTORY)
        return True

    def add_limit_notice(self, max_files: int) -> None:
        """Append the file limit notice; later calls are no-ops."""
        if self._limit_reached:
            return
        self._limit_reached = True
        self.add_line("")
        self.add_line(limit_notice(max_files))

    def getvalue(self) -> str:
        """Return the tree text buffered so far."""
        return self._out.getvalue()

    def flush(self) -> None:
        """Write the document to its file.

        Raises:
            TreeDocumentError: if the file cannot be written.
        """
        try:
            self.path.write_text(self.getvalue(), encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise TreeDocumentError(file=self.path, reason=str(e)) from e
