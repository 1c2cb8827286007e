from __future__ import annotations

from pathlib import Path

from llm_context_gen.config import (
    ARTIFACT_SUFFIX,
    BINARY_EXTENSIONS,
    HARD_MAX_FILE_BYTES,
    MAX_ARTIFACT_STEM_CHARS,
    MAX_PATH_CHARS,
    SNIFF_BYTES,
    Classification,
)
from llm_context_gen.exceptions import ArtifactWriteError, SourceOpenError, SourceReadError
from llm_context_gen.logging import logger


def has_binary_extension(path: Path) -> bool:
    """Check the file extension against the binary denylist (case-insensitive)."""
    return path.suffix.lower() in BINARY_EXTENSIONS


def is_binary_file(path: Path, nbytes: int = SNIFF_BYTES) -> bool:
    """Check if a file should be treated as binary.

    The first `nbytes` bytes are sniffed: an empty file is never binary, a null
    byte makes it binary. A non-empty file with a denylisted extension is binary
    whatever its content. A file that cannot be opened or read is treated as
    binary.

    Args:
        path (Path): the file to check
        nbytes (int, optional): number of bytes to sniff. Defaults to 8192.

    Returns:
        bool: True if the file is binary, False otherwise
    """
    try:
        with path.open("rb") as f:
            chunk = f.read(nbytes)
    except OSError:
        return True
    if not chunk:
        return False
    return b"\x00" in chunk or has_binary_extension(path)


def is_too_large(path: Path, max_bytes: int = HARD_MAX_FILE_BYTES) -> bool:
    """Check the current on-disk size of a file against `max_bytes`.

    A failure to read the metadata is logged and the file is considered small.
    """
    try:
        size = path.stat().st_size
    except OSError as e:
        logger.warning("stat_failed", file=str(path), error=str(e))
        return False
    return size > max_bytes


def is_path_too_long(rel: Path | str) -> bool:
    """Check whether a relative path is longer than the tree can safely render."""
    return len(str(rel)) > MAX_PATH_CHARS


def classify(path: Path, rel: Path | str, max_bytes: int = HARD_MAX_FILE_BYTES) -> Classification:
    """Classify a regular file before it is snapshotted.

    The path length is checked first, without touching the file; then binary
    content, then size.

    Args:
        path (Path): absolute path of the file
        rel (Path | str): path of the file relative to the walk root
        max_bytes (int, optional): size above which a file is too large. Defaults to 1,000,000.

    Returns:
        Classification: the outcome of the checks
    """
    if is_path_too_long(rel):
        return Classification.TOO_LONG_PATH
    if is_binary_file(path):
        return Classification.BINARY
    if is_too_large(path, max_bytes):
        return Classification.TOO_LARGE
    return Classification.NORMAL


def sanitize_filename(rel: Path | str) -> str:
    """Flatten a relative path into a single file name.

    Both separators become underscores and the result is cut to 150 characters.
    Distinct paths may collapse onto the same name.
    """
    flat = str(rel).replace("/", "_").replace("\\", "_")
    return flat[:MAX_ARTIFACT_STEM_CHARS]


def artifact_path(rel: Path | str, output_dir: Path) -> Path:
    """Return where the artifact of `rel` is written."""
    return output_dir / f"{sanitize_filename(rel)}{ARTIFACT_SUFFIX}"


def read_source(path: Path) -> str:
    """Read a source file as UTF-8 text, line endings untouched.

    Args:
        path (Path): the file to read

    Raises:
        SourceOpenError: if the file cannot be opened.
        SourceReadError: if the file cannot be read or is not valid UTF-8.

    Returns:
        str: the file content
    """
    try:
        handle = path.open(encoding="utf-8", newline="")
    except OSError as e:
        raise SourceOpenError(file=path, reason=str(e)) from e
    with handle:
        try:
            return handle.read()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(file=path, reason=str(e)) from e


def artifact_body(rel: Path | str, content: str) -> str:
    """Build an artifact body: base name, blank line, raw content."""
    return f"{Path(rel).name}\n\n{content}"


def write_artifact(rel: Path | str, content: str, output_dir: Path) -> Path:
    """Write the artifact of one accepted file.

    Args:
        rel (Path | str): path of the source file relative to the walk root
        content (str): the source file content
        output_dir (Path): the output directory

    Raises:
        ArtifactWriteError: if the artifact cannot be created or written.

    Returns:
        Path: the artifact path
    """
    target = artifact_path(rel, output_dir)
    try:
        # Encoded before the target is opened: a failure must not leave an empty artifact.
        data = artifact_body(rel, content).encode("utf-8", errors="surrogateescape")
        target.write_bytes(data)
    except (OSError, UnicodeEncodeError) as e:
        raise ArtifactWriteError(file=target, reason=str(e)) from e
    return target
