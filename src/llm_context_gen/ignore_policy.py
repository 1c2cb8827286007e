from __future__ import annotations

import os
import shutil
import subprocess  # noqa: S404
from pathlib import Path
from typing import TYPE_CHECKING

from pathspec import GitIgnoreSpec

from llm_context_gen.config import DEFAULT_IGNORES
from llm_context_gen.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

# `.ignore` is read after `.gitignore` so its rules take precedence in a directory.
IGNORE_FILE_NAMES = (".gitignore", ".ignore")


def build_ignore_set(extra: str = "", defaults: Iterable[str] = DEFAULT_IGNORES) -> frozenset[str]:
    """Build the set of bare names excluded anywhere in the tree.

    Args:
        extra (str): user-supplied names, comma-separated
        defaults (Iterable[str]): built-in names

    Returns:
        frozenset[str]: the union of the built-in and user-supplied names
    """
    names = set(defaults)
    names.update(n.strip() for n in (extra or "").split(",") if n.strip())
    return frozenset(names)


def is_within(path: Path, folder: Path) -> bool:
    """Check whether `path` is `folder` or lies under it.

    Both paths are compared as given; callers pass absolute paths.
    """
    return path == folder or folder in path.parents


def should_skip(
    path: Path,
    ignore_set: frozenset[str],
    output_dir: Path,
    root: Path | None = None,
) -> bool:
    """Decide whether a walked path is silently excluded.

    A path is excluded when it is the output directory or lies under it, or when
    any of its components is an ignore name. When `root` is given, only the
    components below `root` are considered.

    Args:
        path (Path): absolute path of the entry
        ignore_set (frozenset[str]): ignore names
        output_dir (Path): absolute path of the output directory
        root (Path | None): the walk root

    Returns:
        bool: True if the entry must not appear in the snapshot
    """
    if is_within(path, output_dir):
        return True
    parts = path.parts
    if root is not None:
        try:
            parts = path.relative_to(root).parts
        except ValueError:
            pass
    return any(p in ignore_set for p in parts)


def find_work_tree(start: Path) -> Path | None:
    """Return the closest directory at or above `start` that holds a `.git` entry."""
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def global_excludes_file() -> Path:
    """Locate the user's global git excludes file.

    Uses `git config --global core.excludesFile` when git is available, and the
    XDG default location otherwise.

    Returns:
        Path: the global excludes file (it may not exist)
    """
    git = shutil.which("git")
    if git:
        try:
            out = subprocess.run(  # noqa: S603
                [git, "config", "--global", "--get", "core.excludesFile"],
                text=True,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            logger.warning("git_config_failed", error=str(e))
        else:
            if out.returncode == 0 and out.stdout.strip():
                return Path(out.stdout.strip()).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg) / "git" / "ignore"


def read_pattern_file(path: Path) -> list[str]:
    """Read the lines of an ignore file; a missing or unreadable file yields no patterns."""
    if not path.is_file():
        return []
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning("ignore_file_unreadable", file=str(path), error=str(e))
        return []


class GitignoreRules:
    """Ignore-file rules for one walk.

    Inside a git work tree, rules come from the global excludes file and
    `.git/info/exclude` (lowest priority, anchored at the work tree), then from
    `.gitignore` / `.ignore` files of every directory from the work tree down to
    the entry, deeper files taking precedence. Outside a work tree only `.ignore`
    files are read, from the walk root down. Negated patterns re-include entries.
    """

    def __init__(
        self,
        work_tree: Path,
        base_patterns: Sequence[str] = (),
        ignore_files: Sequence[str] = IGNORE_FILE_NAMES,
    ) -> None:
        """Initialize the rules.

        Args:
            work_tree: Directory that anchors every pattern (the git work tree or the walk root)
            base_patterns: Global and repository-level exclude patterns
            ignore_files: Names of the per-directory ignore files to read
        """
        self.work_tree = work_tree
        self.ignore_files = tuple(ignore_files)
        self._base_spec = GitIgnoreSpec.from_lines(base_patterns) if base_patterns else None
        self._spec_cache: dict[Path, GitIgnoreSpec | None] = {}

    @classmethod
    def for_root(cls, root: Path) -> GitignoreRules:
        """Build the rules applying to a walk rooted at `root`.

        Returns:
            GitignoreRules: rules anchored at the work tree, or at `root` with
            only `.ignore` files when `root` is not inside a git work tree
        """
        work_tree = find_work_tree(root)
        if work_tree is None:
            return cls(root, ignore_files=(".ignore",))
        patterns = [
            *read_pattern_file(global_excludes_file()),
            *read_pattern_file(work_tree / ".git" / "info" / "exclude"),
        ]
        return cls(work_tree, patterns)

    def _load_dir_spec(self, directory: Path) -> GitIgnoreSpec | None:
        if directory in self._spec_cache:
            return self._spec_cache[directory]
        lines: list[str] = []
        for name in self.ignore_files:
            lines.extend(read_pattern_file(directory / name))
        spec = GitIgnoreSpec.from_lines(lines) if lines else None
        self._spec_cache[directory] = spec
        return spec

    def _specs_for(self, directory: Path) -> list[tuple[Path, GitIgnoreSpec]]:
        try:
            parts = directory.relative_to(self.work_tree).parts
        except ValueError:
            return []
        specs: list[tuple[Path, GitIgnoreSpec]] = []
        if self._base_spec is not None:
            specs.append((self.work_tree, self._base_spec))
        folders = [self.work_tree]
        for part in parts:
            folders.append(folders[-1] / part)
        for folder in folders:
            spec = self._load_dir_spec(folder)
            if spec is not None:
                specs.append((folder, spec))
        return specs

    def is_ignored(self, path: Path, *, is_dir: bool = False) -> bool:
        """Check whether an absolute path is excluded by the ignore rules.

        Args:
            path: Absolute path of the entry
            is_dir: Whether the entry is a directory (`dir/` patterns only match directories)

        Returns:
            True if the last matching pattern excludes the path
        """
        ignored: bool | None = None
        for base, spec in self._specs_for(path.parent):
            rel = path.relative_to(base).as_posix()
            if is_dir:
                rel += "/"
            result = spec.check_file(rel)
            if result.include is not None:
                ignored = result.include
        return bool(ignored)
