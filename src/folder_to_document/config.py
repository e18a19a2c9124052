from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

_ = Path()


class FileType(StrEnum):
    """Categorization of file types for fence languages and sanitization.

    This is a heuristic classification based on file extensions only.
    """

    CSHARP = auto()
    JAVASCRIPT = auto()
    TYPESCRIPT = auto()
    JSON = auto()
    XML = auto()
    YAML = auto()
    MARKDOWN = auto()
    HTML = auto()
    CSS = auto()
    SQL = auto()
    PYTHON = auto()
    BASH = auto()
    POWERSHELL = auto()
    INI = auto()
    TEXT = auto()
    OTHER = auto()


EXT2LANG: dict[str, FileType] = {
    ".bash": FileType.BASH,
    ".cfg": FileType.INI,
    ".config": FileType.XML,
    ".cs": FileType.CSHARP,
    ".cshtml": FileType.HTML,
    ".csproj": FileType.XML,
    ".css": FileType.CSS,
    ".htm": FileType.HTML,
    ".html": FileType.HTML,
    ".ini": FileType.INI,
    ".js": FileType.JAVASCRIPT,
    ".json": FileType.JSON,
    ".md": FileType.MARKDOWN,
    ".mjs": FileType.JAVASCRIPT,
    ".props": FileType.XML,
    ".ps1": FileType.POWERSHELL,
    ".py": FileType.PYTHON,
    ".resx": FileType.XML,
    ".sh": FileType.BASH,
    ".sln": FileType.TEXT,
    ".sql": FileType.SQL,
    ".targets": FileType.XML,
    ".ts": FileType.TYPESCRIPT,
    ".txt": FileType.TEXT,
    ".xaml": FileType.XML,
    ".xml": FileType.XML,
    ".yaml": FileType.YAML,
    ".yml": FileType.YAML,
}

_FENCE_LANGUAGE: dict[FileType, str] = {
    FileType.CSHARP: "csharp",
    FileType.JAVASCRIPT: "javascript",
    FileType.TYPESCRIPT: "typescript",
    FileType.JSON: "json",
    FileType.XML: "xml",
    FileType.YAML: "yaml",
    FileType.MARKDOWN: "markdown",
    FileType.HTML: "html",
    FileType.CSS: "css",
    FileType.SQL: "sql",
    FileType.PYTHON: "python",
    FileType.BASH: "bash",
    FileType.POWERSHELL: "powershell",
    FileType.INI: "ini",
    FileType.TEXT: "text",
    FileType.OTHER: "text",
}

# Comments in these kinds share the `//` and `/* */` syntax.
COMMENT_STRIPPABLE: frozenset[FileType] = frozenset({
    FileType.CSHARP,
    FileType.JAVASCRIPT,
    FileType.TYPESCRIPT,
    FileType.JSON,
})

EXCLUDED_EXTENSIONS: frozenset[str] = frozenset({
    # executables, libraries and debug symbols
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".pdb",
    ".bin",
    ".obj",
    ".nupkg",
    # IDE caches and user state
    ".cache",
    ".user",
    ".suo",
    # media and archives
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".ico",
    ".webp",
    ".pdf",
    ".zip",
    ".rar",
    ".7z",
    ".tar",
    ".gz",
})

EXCLUDED_FOLDERS: frozenset[str] = frozenset({
    ".git",
    ".svn",
    ".vs",
    ".vscode",
    ".idea",
    "bin",
    "obj",
    "debug",
    "release",
    "dist",
    "build",
    "packages",
    "node_modules",
    "__pycache__",
    "properties",
})

CONFIG_EXTENSIONS: frozenset[str] = frozenset({".json", ".xml", ".config"})

CONFIG_NAME_MARKERS: tuple[str, ...] = ("setting", "constant", "config")

ENTRY_POINT_FILES: frozenset[str] = frozenset({
    "program.cs",
    "startup.cs",
    "main.cs",
    "app.xaml.cs",
    "index.js",
    "index.ts",
    "main.ts",
})


def guess_file_type(path: Path) -> FileType:
    """Heuristic guess of file type based on extension.

    Args:
        path (Path): The file path to guess the type for.

    Returns:
        FileType: The guessed file type, or FileType.OTHER if unknown.
    """
    return EXT2LANG.get(path.suffix.lower(), FileType.OTHER)


def guess_language(file_type: FileType) -> str:
    """Get the code fence language for a given file type.

    Args:
        file_type (FileType): The categorized file type.

    Returns:
        str: The language name for code fences, "text" when unknown.
    """
    return _FENCE_LANGUAGE.get(file_type, "text")


class EntryKind(StrEnum):
    """Discriminator of a filesystem entry."""

    FILE = auto()
    DIRECTORY = auto()


class FileSystemEntry(BaseModel):
    """A file or directory found while enumerating the scan root.

    Attributes:
        kind: Whether the entry is a file or a directory.
        path: Absolute path on disk.
        rel: Path relative to the scan root, always with POSIX separators.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: EntryKind = Field(..., description="File or directory")
    path: Path = Field(..., description="Absolute path")
    rel: str = Field(..., description="Path relative to the scan root")

    @property
    def name(self) -> str:
        """Last component of the relative path."""
        return self.rel.rsplit("/", 1)[-1]

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @computed_field
    @property
    def file_type(self) -> FileType:
        """Categorize the entry based on its extension."""
        return guess_file_type(self.path)


class TraversalStats(BaseModel):
    """Totals returned by one traversal level, summed by the caller."""

    model_config = ConfigDict(frozen=True)

    file_count: int = Field(default=0, ge=0, description="Files emitted")
    line_count: int = Field(default=0, ge=0, description="Lines emitted")

    def __add__(self, other: TraversalStats) -> TraversalStats:
        return TraversalStats(
            file_count=self.file_count + other.file_count,
            line_count=self.line_count + other.line_count,
        )


class RenderedLine(BaseModel):
    """A numbered line of file content as written to the document."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1, description="1-based line number")
    text: str = Field(..., description="Line content without its line break")

    def render(self) -> str:
        return f"{self.number}|{self.text.rstrip()}"
