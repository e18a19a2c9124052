from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FolderDocumentError(Exception):
    """Base exception for errors in the folder_to_document package."""


@dataclass(frozen=True)
class RootNotFoundError(FolderDocumentError):
    """Raised when the directory to document does not exist."""

    folder: Path
    message: str = "The specified root directory does not exist."


@dataclass(frozen=True)
class ConfigFileError(FolderDocumentError):
    """Raised when a YAML configuration file cannot be loaded."""

    file: Path
    reason: str
    message: str = "The configuration file could not be loaded."
