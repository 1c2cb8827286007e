from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LlmContextError(Exception):
    """Base exception for errors in the llm_context_gen package."""


@dataclass(frozen=True)
class OutputDirectoryError(LlmContextError):
    """Raised when the output directory cannot be created."""

    folder: Path
    reason: str = ""
    message: str = "The output directory cannot be created."


@dataclass(frozen=True)
class TreeDocumentError(LlmContextError):
    """Raised when the tree document cannot be created or written."""

    file: Path
    reason: str = ""
    message: str = "The tree document cannot be written."


@dataclass(frozen=True)
class ConfigFileError(LlmContextError):
    """Raised when a configuration file cannot be loaded."""

    file: Path
    message: str = "The configuration file is invalid."


@dataclass(frozen=True)
class FileProcessingError(LlmContextError):
    """Raised when an error occurs while snapshotting a single file."""

    file: Path
    reason: str = ""


@dataclass(frozen=True)
class SourceOpenError(FileProcessingError):
    """Raised when a source file cannot be opened."""


@dataclass(frozen=True)
class SourceReadError(FileProcessingError):
    """Raised when a source file cannot be read or decoded as text."""


@dataclass(frozen=True)
class ArtifactWriteError(FileProcessingError):
    """Raised when an artifact cannot be created or written."""
