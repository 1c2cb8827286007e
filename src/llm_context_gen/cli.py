"""
llm_context_gen — Flatten a source tree into text files for an LLM.

Overview
--------
The tool walks a directory depth-first and writes, into an output directory:

1) **`file-tree.txt`** — an indented rendering of the walked tree, starting
   with `.`; binary, oversized or unreadable files appear with a
   `(skipped - ...)` suffix.

2) **One `<path_with_underscores>.txt` per accepted file** — the file's base
   name, a blank line, then the raw content.

Common build and tooling directories (`node_modules`, `target`, `dist`, `.git`,
...) are ignored anywhere in the tree, as are entries excluded by `.gitignore`
rules when the directory is inside a git work tree. The run is bounded by a
file count, a per-file size and a directory depth.

Usage
-----
Run `python -m llm_context_gen.cli --help` for full options. Common examples:
    - Current directory into ./llm-context:
        uv run llm-context-gen

    - Another project, with extra ignored names and a smaller budget:
        uv run llm-context-gen --dir ../app --ignore vendor,tmp --max-files 500

    - Settings from a YAML file, logs to a file:
        uv run llm-context-gen --config llm-context.yaml --log-file snapshot.log
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from llm_context_gen import __version__
from llm_context_gen.exceptions import ConfigFileError, LlmContextError
from llm_context_gen.logging import attach_log_file, detach_log_file, logger
from llm_context_gen.settings import Settings, load_settings
from llm_context_gen.traversal import run_snapshot

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    # Unset flags stay out of the namespace so lower-priority sources keep their values.
    p = argparse.ArgumentParser(
        prog="llm-context-gen",
        description="Generate text files for LLM context from source code.",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-d", "--dir", type=Path, help="The directory to process (default: .).")
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        help="The output directory (default: llm-context).",
    )
    p.add_argument(
        "-i",
        "--ignore",
        type=str,
        help="Additional names to ignore (comma-separated).",
    )
    p.add_argument(
        "-m",
        "--max-files",
        type=int,
        help="Maximum number of files to process (default: 2000).",
    )
    p.add_argument(
        "-s",
        "--max-size",
        type=int,
        help="Maximum file size to process in bytes (default: 500000).",
    )
    p.add_argument("--max-depth", type=int, help="Maximum directory depth (default: 8).")
    p.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Do not apply .gitignore / .ignore rules.",
    )
    p.add_argument("--config", type=Path, help="YAML file with default settings.")
    p.add_argument("--log-file", type=str, help="Log file path.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into the run settings.

    Args:
        argv (Sequence[str] | None): arguments, defaults to `sys.argv[1:]`

    Raises:
        ConfigFileError: if the `--config` file cannot be loaded.
        ValidationError: if a setting is invalid.

    Returns:
        Settings: the merged settings
    """
    values = vars(build_parser().parse_args(argv))
    config_file = values.pop("config", None)
    return load_settings(values, config_file=config_file)


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except ConfigFileError as e:
        logger.error("invalid_configuration", file=str(e.file), error=e.message)
        return 2
    except ValidationError as e:
        logger.error("invalid_configuration", error=str(e))
        return 2

    log_handler = attach_log_file(settings.log_file) if settings.log_file else None
    try:
        state = run_snapshot(settings)
    except LlmContextError as e:
        logger.error("startup_failed", error=repr(e))
        return 1
    finally:
        if log_handler is not None:
            detach_log_file(log_handler)

    if state.budget_exhausted:
        print(f"Maximum file limit reached ({settings.max_files}). Some files were skipped.")
    print(f"Context files generated in: {settings.output}")
    print(f"Total files processed: {state.files_processed}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
