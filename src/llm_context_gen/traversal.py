"""Traversal driver: walks the tree once and writes the snapshot."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from llm_context_gen.config import (
    FILE_TREE_NAME,
    PROGRESS_INTERVAL,
    SKIP_REASONS,
    Classification,
    EntryKind,
    SkipReason,
    TraversalEntry,
)
from llm_context_gen.exceptions import (
    ArtifactWriteError,
    OutputDirectoryError,
    SourceOpenError,
    SourceReadError,
)
from llm_context_gen.file_manipulation import classify, read_source, write_artifact
from llm_context_gen.ignore_policy import GitignoreRules, build_ignore_set, should_skip
from llm_context_gen.logging import logger
from llm_context_gen.output_construction import TreeDocument, is_deeply_nested
from llm_context_gen.walker import walk_tree

if TYPE_CHECKING:
    from llm_context_gen.settings import Settings


class RunState(BaseModel):
    """Counters of one run."""

    files_processed: int = Field(default=0, ge=0, description="Files that reached the snapshot writer")
    budget_exhausted: bool = Field(default=False, description="The file limit stopped the walk")


def prepare_output_dir(output: Path) -> Path:
    """Create the output directory and return its absolute, resolved path.

    Raises:
        OutputDirectoryError: if the directory cannot be created.
    """
    try:
        output.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(folder=output, reason=str(e)) from e
    return output.resolve()


def log_walk_error(path: Path, error: OSError) -> None:
    """Log a directory the walk could not list; the walk carries on."""
    logger.error("walk_error", path=str(path), error=str(error))


def skip_entry(
    entry: TraversalEntry,
    *,
    ignore_set: frozenset[str],
    output_dir: Path,
    root: Path,
) -> bool:
    """Tell whether an entry is the output directory or has an ignored name component."""
    return should_skip(entry.path, ignore_set, output_dir, root=root)


def prune_directory(
    entry: TraversalEntry,
    *,
    ignore_set: frozenset[str],
    output_dir: Path,
    root: Path,
) -> bool:
    """Stop descending into ignored directories and below the nesting sentinel."""
    if is_deeply_nested(entry.rel):
        return True
    return skip_entry(entry, ignore_set=ignore_set, output_dir=output_dir, root=root)


def process_file(
    entry: TraversalEntry,
    output_dir: Path,
    tree: TreeDocument,
    state: RunState,
) -> None:
    """Classify one regular file and snapshot it when it is accepted.

    Skipped files get an explanatory tree line. A file that cannot be opened
    gets neither a tree line nor an artifact. A failed artifact write is logged
    and the tree line is still written.
    """
    classification = classify(entry.path, entry.rel)
    if classification != Classification.NORMAL:
        tree.add_entry(entry.rel, EntryKind.FILE, SKIP_REASONS[classification])
        return

    try:
        content = read_source(entry.path)
    except SourceOpenError as e:
        logger.error("source_open_failed", file=str(e.file), error=e.reason)
        return
    except SourceReadError as e:
        logger.error("source_read_failed", file=str(e.file), error=e.reason)
        tree.add_entry(entry.rel, EntryKind.FILE, SkipReason.ERROR_READING)
        return

    try:
        write_artifact(entry.rel, content, output_dir)
    except ArtifactWriteError as e:
        logger.error("artifact_write_failed", file=str(e.file), error=e.reason)

    tree.add_entry(entry.rel, EntryKind.FILE)
    state.files_processed += 1
    if state.files_processed % PROGRESS_INTERVAL == 0:
        logger.info("progress", files_processed=state.files_processed)


def run_snapshot(settings: Settings) -> RunState:
    """Walk `settings.dir` and write its snapshot into `settings.output`.

    Args:
        settings (Settings): the run configuration

    Raises:
        OutputDirectoryError: if the output directory cannot be created.
        TreeDocumentError: if the tree document cannot be written.

    Returns:
        RunState: the final counters of the run
    """
    output_dir = prepare_output_dir(Path(settings.output))
    tree = TreeDocument(output_dir / FILE_TREE_NAME)

    root = Path(settings.dir).resolve()
    ignore_set = build_ignore_set(settings.ignore)
    rules = None if settings.no_gitignore else GitignoreRules.for_root(root)
    logger.info(
        "run_config",
        directory=str(root),
        output=str(output_dir),
        ignored_names=sorted(ignore_set),
        max_files=settings.max_files,
        max_size=settings.max_size,
        max_depth=settings.max_depth,
        gitignore=rules is not None,
    )

    skip = partial(skip_entry, ignore_set=ignore_set, output_dir=output_dir, root=root)
    prune = partial(prune_directory, ignore_set=ignore_set, output_dir=output_dir, root=root)
    walk = walk_tree(
        root,
        max_depth=settings.max_depth,
        max_size=settings.max_size,
        rules=rules,
        prune=prune,
        on_error=log_walk_error,
    )

    state = RunState()
    try:
        for entry in walk:
            if state.files_processed >= settings.max_files:
                state.budget_exhausted = True
                tree.add_limit_notice(settings.max_files)
                logger.warning("file_limit_reached", max_files=settings.max_files)
                break
            if skip(entry):
                continue
            if entry.is_dir:
                tree.add_directory(entry.rel)
            else:
                process_file(entry, output_dir, tree, state)
    finally:
        tree.flush()
    return state
