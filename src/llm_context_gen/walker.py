"""Bounded depth-first walk over a source tree."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from llm_context_gen.config import TraversalEntry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from llm_context_gen.ignore_policy import GitignoreRules

    OnError = Callable[[Path, OSError], None]
    Prune = Callable[[TraversalEntry], bool]


def scan_directory(directory: Path, on_error: OnError | None = None) -> list[os.DirEntry[str]]:
    """List a directory's entries sorted by name.

    Args:
        directory (Path): the directory to list
        on_error (OnError | None): called with the directory and the error when it cannot be listed

    Returns:
        list[os.DirEntry[str]]: the entries, or an empty list on error
    """
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        if on_error is not None:
            on_error(directory, e)
        return []


def walk_tree(
    root: Path,
    *,
    max_depth: int,
    max_size: int | None = None,
    rules: GitignoreRules | None = None,
    prune: Prune | None = None,
    on_error: OnError | None = None,
) -> Iterator[TraversalEntry]:
    """Walk `root` depth-first, yielding every directory and regular file below it.

    Each directory is yielded before its contents; the contents of a directory
    are visited in name order. The root itself is not yielded. Hidden entries
    are visited.

    - Entries deeper than `max_depth` are never yielded; directories at
      `max_depth` are yielded but not entered.
    - Regular files larger than `max_size` bytes are dropped.
    - Entries excluded by `rules` are dropped, with their whole subtree.
    - Directories for which `prune(entry)` is true are yielded but not entered.
    - Symlinked directories are yielded but not entered.
    - Entries that are neither directories nor regular files are dropped.

    Args:
        root (Path): the directory to walk
        max_depth (int): maximum number of components of a yielded relative path
        max_size (int | None): maximum size of a yielded regular file
        rules (GitignoreRules | None): version-control ignore rules
        prune (Prune | None): predicate stopping descent into a yielded directory
        on_error (OnError | None): called with the offending path and error; the walk continues

    Yields:
        Iterator[TraversalEntry]: the entries in depth-first pre-order
    """
    if max_depth < 1:
        return

    stack: list[tuple[int, Iterator[os.DirEntry[str]]]] = [(1, iter(scan_directory(root, on_error)))]
    while stack:
        depth, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            continue

        path = Path(child.path)
        try:
            is_dir = child.is_dir()
            is_file = not is_dir and child.is_file()
            is_link = child.is_symlink()
            size = child.stat().st_size if is_file else 0
        except OSError as e:
            if on_error is not None:
                on_error(path, e)
            continue

        if not is_dir and not is_file:
            continue
        if rules is not None and rules.is_ignored(path, is_dir=is_dir):
            continue
        if is_file and max_size is not None and size > max_size:
            continue

        entry = TraversalEntry(path=path, rel=path.relative_to(root), is_dir=is_dir, depth=depth)
        yield entry

        if not is_dir or is_link or depth >= max_depth:
            continue
        if prune is not None and prune(entry):
            continue
        stack.append((depth + 1, iter(scan_directory(path, on_error))))
