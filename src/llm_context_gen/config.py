from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

_ = Path()

FILE_TREE_NAME = "file-tree.txt"
ARTIFACT_SUFFIX = ".txt"

MAX_PATH_CHARS = 200
MAX_ARTIFACT_STEM_CHARS = 150
MAX_INDENT_LEVEL = 10
MAX_TREE_COMPONENTS = 20
SNIFF_BYTES = 8192
HARD_MAX_FILE_BYTES = 1_000_000
PROGRESS_INTERVAL = 100

INDENT_UNIT = "│   "
BRANCH = "├── "
DEEPLY_NESTED_LINE = "[Deeply nested directory skipped]"

DEFAULT_IGNORES = frozenset(
    {
        "node_modules",
        "target",
        "dist",
        "build",
        ".git",
        ".idea",
        ".vscode",
        "__pycache__",
        # Next.js / JS tooling
        ".next",
        "out",
        "coverage",
        ".vercel",
        ".turbo",
    },
)

BINARY_EXTENSIONS = frozenset(
    {
        # images
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".bmp",
        ".tiff",
        # documents
        ".pdf",
        ".doc",
        ".docx",
        ".xls",
        ".xlsx",
        ".ppt",
        ".pptx",
        # archives
        ".zip",
        ".tar",
        ".gz",
        ".rar",
        ".7z",
        # executables and libraries
        ".exe",
        ".dll",
        ".so",
        ".dylib",
        ".bin",
        # audio / video
        ".mp3",
        ".mp4",
        ".wav",
        ".avi",
        ".mov",
    },
)


class Classification(StrEnum):
    """Outcome of classifying a regular file before it is snapshotted."""

    NORMAL = auto()
    BINARY = auto()
    TOO_LARGE = auto()
    TOO_LONG_PATH = auto()


class EntryKind(StrEnum):
    """Kind of a rendered tree entry."""

    DIRECTORY = auto()
    FILE = auto()


class SkipReason(StrEnum):
    """Explanatory suffix of a file that appears in the tree without an artifact."""

    BINARY_OR_TOO_LARGE = "binary or too large"
    PATH_TOO_LONG = "path too long"
    ERROR_READING = "error reading"


SKIP_REASONS: dict[Classification, SkipReason] = {
    Classification.BINARY: SkipReason.BINARY_OR_TOO_LARGE,
    Classification.TOO_LARGE: SkipReason.BINARY_OR_TOO_LARGE,
    Classification.TOO_LONG_PATH: SkipReason.PATH_TOO_LONG,
}


class TraversalEntry(BaseModel):
    """One filesystem node yielded by the walk.

    Attributes:
        path: Absolute path of the entry.
        rel: Path relative to the walk root.
        is_dir: Whether the entry is a directory (symlinks are followed).
        depth: Number of components of `rel`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Absolute path")
    rel: Path = Field(..., description="Path relative to the walk root")
    is_dir: bool = Field(default=False, description="Directory entry")
    depth: int = Field(..., ge=1, description="Number of relative path components")

    @computed_field
    @property
    def name(self) -> str:
        """Base name of the entry."""
        return self.rel.name
