from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

from folder_to_document.config import EntryKind, FileSystemEntry
from folder_to_document.filters import is_included

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from folder_to_document.globbing import IncludePattern

_LINE_SPLIT = re.compile(r"\r\n|\r|\n")
_BACKTICK_RUN = re.compile(r"`{3,}")


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            The root itself gives an empty string.
    """
    rel = path.relative_to(root).as_posix()
    return "" if rel == "." else rel


def project_name(root: Path) -> str:
    """Name of the documented project: the name of its resolved root folder."""
    return root.resolve().name or str(root)


def scan_directory(directory: Path, root: Path) -> list[FileSystemEntry]:
    """List the immediate children of a directory, sorted by relative path.

    Files and directories are merged in one case-insensitive ordering.
    Symbolic links to directories are left out, so they are never followed.

    Args:
        directory (Path): directory to enumerate
        root (Path): scan root used to compute relative paths

    Raises:
        PermissionError: if the directory cannot be listed
        OSError: for other enumeration failures

    Returns:
        list[FileSystemEntry]: the children of `directory`
    """
    entries: list[FileSystemEntry] = []
    with os.scandir(directory) as it:
        for item in it:
            if item.is_symlink() and item.is_dir():
                continue
            path = directory / item.name
            kind = EntryKind.DIRECTORY if item.is_dir(follow_symlinks=False) else EntryKind.FILE
            entries.append(FileSystemEntry(kind=kind, path=path, rel=relpath(path, root)))
    return sorted(entries, key=lambda e: (e.rel.lower(), e.rel))


def included_children(
    directory: Path,
    root: Path,
    patterns: Sequence[IncludePattern],
) -> list[FileSystemEntry]:
    """Enumerate a directory and keep only included children.

    Args:
        directory (Path): directory to enumerate
        root (Path): scan root
        patterns (Sequence[IncludePattern]): compiled include patterns

    Raises:
        PermissionError: if the directory cannot be listed

    Returns:
        list[FileSystemEntry]: included children, sorted
    """
    return [e for e in scan_directory(directory, root) if is_included(e, patterns)]


def read_text(path: Path) -> str:
    """Read a whole file as UTF-8, dropping a byte order mark.

    Args:
        path (Path): the file path to read

    Raises:
        OSError: if the file cannot be read

    Returns:
        str: the file content, line breaks untouched
    """
    with path.open(encoding="utf-8-sig", errors="replace", newline="") as f:
        return f.read()


def split_lines(text: str) -> list[str]:
    """Split text on ``\\r\\n``, ``\\r`` and ``\\n``.

    A final line break does not open an extra empty line, so ``"a\\nb\\n"``
    and ``"a\\nb"`` both give two lines and an empty text gives none.

    Args:
        text (str): text to split

    Returns:
        list[str]: the lines without their line breaks
    """
    lines = _LINE_SPLIT.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def choose_fence(text: str) -> str:
    """Return a code fence one backtick longer than any fence inside ``text``, at least three."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=2)
    return "`" * (longest + 1)
